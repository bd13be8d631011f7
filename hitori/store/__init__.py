"""Local post storage backed by SQLite."""

from .db import PostStore
from .errors import ErrorKind, StoreError
from .models import Post

__all__ = ["PostStore", "Post", "StoreError", "ErrorKind"]
