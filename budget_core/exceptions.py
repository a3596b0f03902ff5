"""Domain-specific exceptions for the household budget services."""

class ValidationError(ValueError):
    """Raised when provided data does not meet validation requirements."""


class DuplicateRecordError(ValidationError):
    """Raised when a catalog receives a second record for an existing key."""


class RecordNotFoundError(LookupError):
    """Raised when a category, budget or expense cannot be located."""


class SnapshotError(IOError):
    """Raised when a snapshot file cannot be read or has an unexpected shape."""
