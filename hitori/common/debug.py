"""Debug mode for dispatched commands.

Enable debug mode:
- Set environment variable: HITORI_DEBUG=1
- Or in config: debug: true

Logs every dispatched command and its result to stderr in YAML format.
"""

import os
import sys
from datetime import datetime
from typing import Any

import yaml


def is_debug_enabled() -> bool:
    """Check if debug mode is enabled via env var or config."""
    if os.environ.get("HITORI_DEBUG", "").lower() in ("1", "true", "yes"):
        return True

    from .config import load_config
    return bool(load_config().get("debug", False))


# Global debug state
_DEBUG = None


def debug_enabled() -> bool:
    """Cached check for debug mode."""
    global _DEBUG
    if _DEBUG is None:
        _DEBUG = is_debug_enabled()
    return _DEBUG


def reset_debug_cache() -> None:
    """Reset debug cache (for testing and after config changes)."""
    global _DEBUG
    _DEBUG = None


def log_debug(event_type: str, data: dict[str, Any]) -> None:
    """Log a debug event to stderr in YAML format."""
    if not debug_enabled():
        return

    event = {
        "timestamp": datetime.now().isoformat(),
        "event": event_type,
        **data,
    }

    print("\n" + "=" * 60, file=sys.stderr)
    print(f"[DEBUG] {event_type.upper()}", file=sys.stderr)
    print("-" * 60, file=sys.stderr)
    print(yaml.safe_dump(event, default_flow_style=False, allow_unicode=True, width=120), file=sys.stderr)


def _truncate(data: Any, max_len: int = 500) -> Any:
    if isinstance(data, str):
        return data[:max_len] + "..." if len(data) > max_len else data
    if isinstance(data, list):
        return [_truncate(item, max_len // 2) for item in data[:5]]
    if isinstance(data, dict):
        return {str(k): _truncate(v, max_len // 2) for k, v in list(data.items())[:10]}
    if data is None or isinstance(data, (bool, int, float)):
        return data
    return str(data)[:max_len]


def log_command(name: str, payload: dict[str, Any]) -> None:
    """Log a dispatched command."""
    log_debug("command", {
        "command": name,
        "payload": _truncate(payload),
    })


def log_command_result(name: str, result: dict[str, Any], duration_ms: float | None = None) -> None:
    """Log a command result."""
    log_debug("command_result", {
        "command": name,
        "result": _truncate(result),
        "duration_ms": duration_ms,
    })
