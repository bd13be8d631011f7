"""Commands exposed to the UI shell.

Each command returns a CommandResult instead of raising, so the shell can
forward the outcome as-is. Store failures are caught here and nowhere else.
"""

import functools
import json
import logging
import time
from typing import Any, Callable, Sequence

from pydantic import BaseModel

from .common.debug import log_command, log_command_result
from .store import PostStore, StoreError

logger = logging.getLogger(__name__)

UNKNOWN_COMMAND = "unknown_command"
INVALID_PAYLOAD = "invalid_payload"


class CommandResult(BaseModel):
    """Outcome of one command: a value on success, a message on failure."""

    ok: bool
    data: Any = None
    error: str | None = None
    kind: str | None = None

    @classmethod
    def success(cls, data: Any = None) -> "CommandResult":
        return cls(ok=True, data=data)

    @classmethod
    def failure(cls, error: str, kind: str) -> "CommandResult":
        return cls(ok=False, error=error, kind=kind)

    @classmethod
    def from_error(cls, err: StoreError) -> "CommandResult":
        return cls.failure(str(err), err.kind.value)

    def to_wire(self) -> dict[str, Any]:
        """JSON-ready dict; posts use the camelCase record shape."""
        return {
            "ok": self.ok,
            "data": _to_wire(self.data),
            "error": self.error,
            "kind": self.kind,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_wire(), ensure_ascii=False)


def _to_wire(value: Any) -> Any:
    if isinstance(value, BaseModel):
        if hasattr(value, "to_wire"):
            return value.to_wire()
        return value.model_dump(mode="json", by_alias=True)
    if isinstance(value, (list, tuple)):
        return [_to_wire(item) for item in value]
    return value


def command(func: Callable) -> Callable[..., CommandResult]:
    """Wrap a store call so StoreError becomes a failed CommandResult."""
    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> CommandResult:
        try:
            return CommandResult.success(func(*args, **kwargs))
        except StoreError as e:
            logger.error(f"{func.__name__}: {e}")
            return CommandResult.from_error(e)
    return wrapper


@command
def greet(name: str) -> str:
    """Handshake used by the shell to check the backend is alive."""
    return f"Hello, {name}! You've been greeted from hitori!"


@command
def list_posts(store: PostStore):
    """All posts, newest first."""
    return store.list_posts()


@command
def add_post(store: PostStore, content: str):
    """Create a post and return it."""
    return store.add_post(content)


@command
def delete_post(store: PostStore, post_id: str):
    """Delete a post; unknown ids succeed silently."""
    store.delete_post(post_id)


@command
def update_sync_status(store: PostStore, ids: Sequence[str], is_synced: bool):
    """Set the sync flag on a batch of posts atomically."""
    store.update_sync_status(ids, is_synced)


class PayloadError(ValueError):
    """A dispatched payload is missing an argument or has the wrong type."""


def _arg(payload: dict[str, Any], name: str, expected: type | tuple[type, ...]) -> Any:
    """Read an argument by snake_case or camelCase key."""
    head, *rest = name.split("_")
    camel = head + "".join(part.title() for part in rest)
    for key in (name, camel):
        if key in payload:
            value = payload[key]
            if not isinstance(value, expected):
                raise PayloadError(f"Argument '{key}' has the wrong type: {type(value).__name__}")
            return value
    raise PayloadError(f"Missing argument '{name}'")


def _ids(payload: dict[str, Any]) -> list[str]:
    ids = _arg(payload, "ids", (list, tuple))
    if not all(isinstance(post_id, str) for post_id in ids):
        raise PayloadError("Argument 'ids' must be a list of strings")
    return list(ids)


# Shell command name -> handler(store, payload)
COMMANDS: dict[str, Callable[[PostStore, dict[str, Any]], CommandResult]] = {
    "greet": lambda store, p: greet(_arg(p, "name", str)),
    "get_posts": lambda store, p: list_posts(store),
    "add_post": lambda store, p: add_post(store, _arg(p, "content", str)),
    "delete_post": lambda store, p: delete_post(store, _arg(p, "id", str)),
    "update_sync_status": lambda store, p: update_sync_status(
        store, _ids(p), _arg(p, "is_synced", bool)
    ),
}


def dispatch(store: PostStore, name: str, payload: dict[str, Any] | None = None) -> CommandResult:
    """Run a shell command by name with a JSON-style payload."""
    payload = payload or {}
    log_command(name, payload)
    start = time.time()

    handler = COMMANDS.get(name)
    if handler is None:
        result = CommandResult.failure(f"Unknown command: {name}", UNKNOWN_COMMAND)
    else:
        try:
            result = handler(store, payload)
        except PayloadError as e:
            result = CommandResult.failure(f"{name}: {e}", INVALID_PAYLOAD)

    log_command_result(name, result.to_wire(), (time.time() - start) * 1000)
    return result
