"""
Errors raised by the draft store and the export pipeline.
"""


class DraftError(Exception):
    """Base class for draft store errors."""


class ValidationError(DraftError):
    """Bad input: unknown template, malformed drawing payload."""


class NotFoundError(DraftError):
    """Unknown draft, template, drawing or export for the given owner."""


class ExportFailure(DraftError):
    """The PDF could not be composed."""
