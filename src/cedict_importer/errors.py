"""Importer exception types.

Item-level problems never raise out of a batch; these exceptions cover
the structural and request-level failures that do.
"""

from typing import Optional


class ImporterError(Exception):
    """Base class for all importer errors."""


class ImportFileError(ImporterError, ValueError):
    """An uploaded file cannot be imported as a whole (bad JSON, not an array)."""


class NoFilesProvidedError(ImporterError):
    """A multi-file upload arrived without any files."""


class UploadRejectedError(ImporterError):
    """An upload violates the configured size, count or type constraints."""


class RateLimitExceededError(ImporterError):
    """A client has used up its upload allowance for the current window."""

    def __init__(self, message: str, retry_after: Optional[float] = None):
        super().__init__(message)
        self.retry_after = retry_after


class RecordValidationError(ImporterError, ValueError):
    """The store refused to write a record that breaks its schema rules."""
