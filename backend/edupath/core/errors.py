"""API errors and their mapping from onboarding domain errors.

Every error that reaches a client is an APIError; the handlers in
edupath.main render it as {"error": {"code", "message", "details"}}.
Flow-engine errors are translated here so routers stay one-liners:

    AnswerValidationError  -> 400 VALIDATION_ERROR
    StepTransitionError    -> 422 INVALID_STATE_TRANSITION
"""

from typing import ClassVar

from edupath.services.onboarding_errors import (
    AnswerValidationError,
    OnboardingError,
    StepTransitionError,
)


class APIError(Exception):
    """Base class for errors rendered in the error envelope.

    Subclasses pin ``code`` and ``status_code``; instances carry the
    message and optional field-level details.
    """

    code: ClassVar[str] = "INTERNAL_ERROR"
    status_code: ClassVar[int] = 500

    def __init__(self, message: str, details: list[dict] | None = None) -> None:
        self.message = message
        self.details = details
        super().__init__(message)


class ValidationError(APIError):
    """Rejected input (400): a bad answer, body or query parameter."""

    code = "VALIDATION_ERROR"
    status_code = 400


class NotFoundError(APIError):
    """Unknown or expired resource (404)."""

    code = "NOT_FOUND"
    status_code = 404

    def __init__(self, resource: str, resource_id: str | None = None) -> None:
        if resource_id:
            super().__init__(f"{resource} with id '{resource_id}' not found")
        else:
            super().__init__(f"{resource} not found")


class InvalidStateError(APIError):
    """Well-formed request the session cannot accept right now (422).

    E.g. answering a step that is not current, or rewinding forward.
    """

    code = "INVALID_STATE_TRANSITION"
    status_code = 422


def to_api_error(exc: OnboardingError) -> APIError:
    """Translate a flow-engine error raised while handling a request.

    Args:
        exc: Error raised by the onboarding session or orchestrator.

    Returns:
        The APIError to raise in its place (chain it with ``from exc``).
    """
    if isinstance(exc, AnswerValidationError):
        return ValidationError(
            exc.message, details=[{"field": "value", "step_id": exc.step_id}]
        )
    if isinstance(exc, StepTransitionError):
        details = None
        if exc.current_step_id is not None:
            details = [{"step_id": exc.step_id, "current_step_id": exc.current_step_id}]
        return InvalidStateError(exc.message, details=details)
    return APIError(str(exc))
