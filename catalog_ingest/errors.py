"""Failure taxonomy for the ingestion workflow.

None of these reach an external caller: the workflow converts
``ValidationError`` and ``ProcessingError`` into a dead-letter move, and
``QuarantineError`` is only ever logged by the router.
"""


class IngestError(Exception):
    """Base class for ingestion failures."""


class ValidationError(IngestError):
    """Upload metadata is missing or matches no product colour."""

    def __init__(self, reason):
        super().__init__(reason)
        self.reason = reason


class ProcessingError(IngestError):
    """Download, resize, upload, delete or database update failed."""


class QuarantineError(IngestError):
    """A dead-letter step failed."""
