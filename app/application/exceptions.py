
class RecordStoreError(RuntimeError):
    """Base class for record store failures."""
    pass


class StoreUnavailableError(RecordStoreError):
    """Raised when a store read fails (network errors, timeouts, unreadable data)."""
    pass


class StoreWriteError(RecordStoreError):
    """Raised when a store write fails; nothing was persisted."""
    pass


class DuplicateRecordError(RecordStoreError):
    """Raised when inserting a record whose id already exists in the collection."""
    pass


class RecordValidationError(ValueError):
    """Raised when a store document is missing required fields or has malformed values."""
    pass
