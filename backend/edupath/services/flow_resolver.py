"""Flow resolver: which step comes next.

A step is invisible when its flow tags exclude the session's flow, or when
its skip condition's referenced answer exists and equals the required value.
next_visible_index is a pure function of (from_index, registry, answers,
flow), so it is idempotent: resolving from a visible index returns that same
index.
"""

from edupath.services.answer_store import AnswerStore
from edupath.services.onboarding_steps import StepDefinition, StepRegistry


def is_step_visible(
    step: StepDefinition, answers: AnswerStore, selected_flow: str | None
) -> bool:
    """Whether a step is shown for the given answers and flow.

    Args:
        step: Step to test.
        answers: Current answers.
        selected_flow: Session flow; None before the flow is chosen.

    Returns:
        True if the step is visible.
    """
    if not step.in_flow(selected_flow):
        return False
    if step.skip_if is not None:
        referenced = answers.get(step.skip_if.step_id)
        if referenced is not None and referenced.value == step.skip_if.value:
            return False
    return True


def next_visible_index(
    from_index: int,
    registry: StepRegistry,
    answers: AnswerStore,
    selected_flow: str | None,
) -> int:
    """First visible step index at or after ``from_index``.

    Args:
        from_index: Index to start scanning from (inclusive).
        registry: Step registry.
        answers: Current answers.
        selected_flow: Session flow; None before the flow is chosen.

    Returns:
        Index of the first visible step, or ``len(registry)`` when none
        remain (the flow is done).
    """
    for index in range(max(from_index, 0), len(registry)):
        if is_step_visible(registry[index], answers, selected_flow):
            return index
    return len(registry)


def visible_indices(
    registry: StepRegistry, answers: AnswerStore, selected_flow: str | None
) -> list[int]:
    """Indices of every currently visible step, in order."""
    return [
        i
        for i, step in enumerate(registry)
        if is_step_visible(step, answers, selected_flow)
    ]
