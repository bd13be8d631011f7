"""hitori - a local-first note timeline."""

__version__ = "0.1.0"

# Lazy imports for fast CLI startup
__all__ = ["PostStore", "Post", "StoreError", "ErrorKind"]


def __getattr__(name):
    if name in __all__:
        from . import store
        return getattr(store, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
