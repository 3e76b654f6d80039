"""Custom exception hierarchy for the Estimo estimation pipeline."""

from __future__ import annotations


class EstimoError(Exception):
    """Base exception for all Estimo errors."""


class OracleCallError(EstimoError):
    """Raised when the document-understanding oracle call fails.

    ``document_rejected`` is set when the oracle refused one of the supplied
    files, which callers may recover from with a text-only request.
    """

    def __init__(self, message: str, *, document_rejected: bool = False) -> None:
        super().__init__(message)
        self.document_rejected = document_rejected


class JsonExtractionError(EstimoError):
    """Raised when no JSON object can be recovered from oracle output."""


class ExtractionError(EstimoError):
    """Raised when structured extraction from drawings fails."""


class AutoFixError(EstimoError):
    """Raised when a single auto-fix cannot be applied."""


class CostEstimationError(EstimoError):
    """Raised when pricing a bill of quantities fails."""


class PipelineStageError(EstimoError):
    """Raised when a pipeline pass fails."""

    def __init__(self, pass_name: str, message: str) -> None:
        super().__init__(f"{pass_name}: {message}")
        self.pass_name = pass_name


class EstimationFailedError(EstimoError):
    """Raised when both the multi-pass run and its fallback fail."""

    def __init__(self, primary_error: str, fallback_error: str) -> None:
        super().__init__(
            f"Multi-pass failed: {primary_error}. "
            f"Fallback failed: {fallback_error}"
        )
        self.primary_error = primary_error
        self.fallback_error = fallback_error
