"""Domain errors for the onboarding flow engine.

Error handling strategy:
    - Malformed step registry: StepRegistryError at startup (never at runtime)
    - Invalid user input: AnswerValidationError, step stays current
    - Submitting or rewinding out of order: StepTransitionError
    - Collaborator failures: never raised here, recovered by synthesis

The API layer translates AnswerValidationError to 400 VALIDATION_ERROR and
StepTransitionError to 422 INVALID_STATE_TRANSITION.
"""


class OnboardingError(Exception):
    """Base class for onboarding domain errors."""


class StepRegistryError(OnboardingError):
    """Raised when the step registry is malformed.

    Attributes:
        problems: Every problem found, so one startup failure lists them all.
    """

    def __init__(self, problems: list[str]) -> None:
        self.problems = list(problems)
        super().__init__("Invalid step registry: " + "; ".join(self.problems))


class AnswerValidationError(OnboardingError):
    """Raised when a submitted answer fails its step's validation.

    Attributes:
        step_id: Step the answer was submitted for.
        message: Human-readable reason.
    """

    def __init__(self, step_id: str, message: str) -> None:
        self.step_id = step_id
        self.message = message
        super().__init__(f"{step_id}: {message}")


class StepTransitionError(OnboardingError):
    """Raised when a submission or rewind does not match session state.

    Attributes:
        step_id: Step the caller targeted (None for rewinds).
        current_step_id: Step that is actually current (None when done).
        message: Human-readable reason.
    """

    def __init__(
        self,
        message: str,
        *,
        step_id: str | None = None,
        current_step_id: str | None = None,
    ) -> None:
        self.step_id = step_id
        self.current_step_id = current_step_id
        self.message = message
        super().__init__(message)
