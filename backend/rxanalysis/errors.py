"""
Error taxonomy for the prescription pipeline.

Every failure carries a ``kind`` discriminant and an HTTP-equivalent status.
The route layer maps errors by ``kind`` only, never by message text.
"""

from typing import Optional


class PipelineError(Exception):
    """Base class for all pipeline failures."""

    kind = "internal"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"success": False, "error": self.kind, "message": self.message}


class ValidationError(PipelineError):
    """Bad or missing caller input."""

    kind = "validation"
    status_code = 400


class NotFoundError(PipelineError):
    """A referenced record does not exist."""

    kind = "not_found"
    status_code = 404


class ExtractionProviderError(PipelineError):
    """The AI provider failed or returned something off-contract."""

    kind = "provider"
    status_code = 500

    # Message prefixes per pipeline stage
    PREFIXES = {
        "analyze": "Failed to analyze prescription",
        "interactions": "Failed to check drug interactions",
        "medication_info": "Failed to get medication information",
    }

    def __init__(self, operation: str, cause: str):
        prefix = self.PREFIXES.get(operation, "Extraction provider failed")
        super().__init__(f"{prefix}: {cause}")
        self.operation = operation
        self.cause = cause


class PersistenceError(PipelineError):
    """Storage failure."""

    kind = "persistence"
    status_code = 500

    def __init__(self, message: str, cause: Optional[Exception] = None):
        super().__init__(message)
        self.cause = cause
