"""Post record and its exchange format."""

import uuid
from datetime import datetime, timezone
from typing import Sequence

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def format_timestamp(value: datetime) -> str:
    """Format a datetime as fixed-width UTC ISO-8601 text.

    Naive values are taken to be UTC. Microseconds are always written so
    that text order matches chronological order.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def parse_timestamp(value: str) -> datetime:
    """Parse stored timestamp text, rejecting values without an offset."""
    if not isinstance(value, str):
        raise ValueError(f"Timestamp is not text: {value!r}")
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        raise ValueError(f"Timestamp has no UTC offset: {value}")
    return parsed


class Post(BaseModel):
    """A single stored note."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    id: str = Field(description="Unique identifier, generated at creation")
    content: str = Field(description="Note text")
    created_at: datetime = Field(description="Creation time (UTC)")
    updated_at: datetime = Field(description="Last update time (UTC)")
    is_synced: bool = Field(default=False, description="Mirrored to cloud storage")

    @classmethod
    def new(cls, content: str, now: datetime | None = None) -> "Post":
        """Build a fresh, unsynced post with a new id."""
        now = now or utc_now()
        return cls(
            id=str(uuid.uuid4()),
            content=content,
            created_at=now,
            updated_at=now,
            is_synced=False,
        )

    @classmethod
    def from_row(cls, row: Sequence) -> "Post":
        """Decode a `posts` row (id, content, created_at, updated_at, is_synced)."""
        post_id, content, created_at, updated_at, is_synced = row
        return cls(
            id=post_id,
            content=content,
            created_at=parse_timestamp(created_at),
            updated_at=parse_timestamp(updated_at),
            is_synced=is_synced != 0,
        )

    def to_row(self) -> tuple[str, str, str, str, int]:
        """Encode for the `posts` table."""
        return (
            self.id,
            self.content,
            format_timestamp(self.created_at),
            format_timestamp(self.updated_at),
            1 if self.is_synced else 0,
        )

    def to_wire(self) -> dict:
        """JSON-ready dict with camelCase keys, as the UI shell expects."""
        return self.model_dump(mode="json", by_alias=True)
