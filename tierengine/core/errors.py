class TierListError(Exception):
    """Base exception for tier list engine errors."""


class ValidationError(TierListError):
    """Raised for invalid input: empty save name, malformed snapshot document, bad arguments."""


class NotFoundError(TierListError):
    """Raised when an item or named save slot does not exist."""


class StorageError(TierListError):
    """Raised when the durable store cannot be read or written."""
