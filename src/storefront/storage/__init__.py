"""Order storage factory.

Provides get_storage() / set_storage() to swap implementations:
- ProteanStorage (the storefront domain's repositories) by default
- InMemoryStorage for tests that need fault injection
"""

from storefront.storage.port import Storage

_current_storage: Storage | None = None


def get_storage() -> Storage:
    """Return the current storage. Defaults to ProteanStorage."""
    global _current_storage
    if _current_storage is None:
        from storefront.storage.protean_adapter import ProteanStorage

        _current_storage = ProteanStorage()
    return _current_storage


def set_storage(storage: Storage) -> None:
    """Override the active storage (useful for tests)."""
    global _current_storage
    _current_storage = storage


def reset_storage() -> None:
    """Reset to default storage."""
    global _current_storage
    _current_storage = None
