"""Response envelopes shared by every endpoint.

Success bodies are {"data": ...}; failure bodies are
{"error": {"code", "message", "details"}}.
"""

from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class DataResponse(BaseModel, Generic[T]):
    """Success envelope, e.g. ``DataResponse[SessionView]``."""

    data: T


class ErrorDetail(BaseModel):
    """Body of the error envelope.

    Attributes:
        code: Machine-readable code ("NOT_FOUND", "VALIDATION_ERROR", ...).
        message: Human-readable message, safe to show to the user.
        details: Optional field-level entries (validation failures, the
            step that is actually current, ...).
    """

    code: str
    message: str
    details: list[dict] | None = None


class ErrorResponse(BaseModel):
    """Failure envelope."""

    error: ErrorDetail

    @classmethod
    def build(
        cls, code: str, message: str, details: list[dict] | None = None
    ) -> dict:
        """Serialized envelope ready for a JSONResponse body."""
        return cls(
            error=ErrorDetail(code=code, message=message, details=details)
        ).model_dump()
