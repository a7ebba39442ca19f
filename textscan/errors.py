# textscan/errors.py
from __future__ import annotations


class TextScanError(Exception):
    """Base error for the service."""
    code = "internal_error"
    status = 500


class InvalidInputError(TextScanError):
    """Raised when the extractor is invoked with something that is not text."""
    code = "invalid_input"
    status = 400


class BackendUnavailableError(TextScanError):
    """The generative backend could not be reached or answered with an error."""
    code = "backend_unavailable"
    status = 502


class SchemaViolationError(TextScanError):
    """The generative backend answered, but not with the declared schema."""
    code = "schema_violation"
    status = 502


class StorageError(TextScanError):
    code = "storage_error"
    status = 500


class SequenceExhaustedError(TextScanError):
    """All 999 numbers of a day have been handed out."""
    code = "sequence_exhausted"
    status = 409
