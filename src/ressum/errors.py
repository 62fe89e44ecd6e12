class RessumError(Exception):
    """Base class for all ressum-related errors."""

    pass


class ValidationError(RessumError, ValueError):
    """Raised when input data fails validation checks."""

    pass


class KeywordError(ValidationError):
    """Raised when a summary keyword is malformed or not supported."""

    pass


class SummaryError(RessumError):
    """Base class for summary-writing errors."""

    pass


class OrderingError(SummaryError):
    """Raised when steps are ingested out of simulated-time order."""

    pass


class EngineStateError(SummaryError):
    """Raised when an operation is not allowed in the engine's current state."""

    pass


class SummaryKeyError(SummaryError, KeyError):
    """Raised when a keyword, entity or report step is missing from a summary table."""

    pass


class StorageError(RessumError):
    """Raised when there is an error related to data storage."""

    pass


class SerializationError(RessumError):
    """Raised when an object cannot be dumped."""

    pass


class DeserializationError(RessumError):
    """Raised when an object cannot be loaded."""

    pass
