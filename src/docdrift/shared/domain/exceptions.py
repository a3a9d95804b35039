"""
Domain exceptions for docdrift.

All application errors inherit from DocDriftError. Expected invalid input
(malformed specs) is reported as structured results, not exceptions; these
classes cover persisted-state failures and explicit assertions.
"""


class DocDriftError(Exception):
    """Base class for all docdrift exceptions."""

    def __init__(self, message: str, context: dict = None):
        super().__init__(message)
        self.context = context or {}


class SpecValidationError(DocDriftError):
    """Raised by assert_spec when an API spec violates the schema."""

    pass


class UnsupportedVersionError(DocDriftError):
    """Raised when a persisted document carries an unknown schema version."""

    pass


class CacheCorruptedError(DocDriftError):
    """Raised when a spec cache file cannot be parsed at all."""

    pass


class HistoryCorruptedError(DocDriftError):
    """Raised when the snapshot history contains an unreadable record."""

    pass


class CheckpointError(DocDriftError):
    """Raised when a batch checkpoint cannot be written or read."""

    pass


class CheckpointInUseError(CheckpointError):
    """Raised when a checkpoint is owned by another live process."""

    pass


class ConfigurationError(DocDriftError):
    """Raised when configuration is invalid or corrupt."""

    pass
