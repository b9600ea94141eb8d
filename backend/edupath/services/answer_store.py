"""Answer store with write-time alias denormalization.

Answers are keyed by the id of the step that owns them. When a step declares
an alias, the same answer is also written under the shared profile key in
the same call, so readers only ever need the shared key (``country``,
``gpa``, ...) regardless of which flow produced it.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass


@dataclass(frozen=True)
class Answer:
    """A submitted answer: canonical value plus display label."""

    value: str
    label: str


class AnswerStore:
    """Primary answers by step id plus alias entries by shared key.

    Args:
        alias_table: Static mapping of step id to shared key.
    """

    def __init__(self, alias_table: Mapping[str, str]) -> None:
        self._alias_table = dict(alias_table)
        self._primary: dict[str, Answer] = {}
        self._shared: dict[str, Answer] = {}

    def submit(self, step_id: str, value: str, label: str) -> Answer:
        """Write the primary entry and, if aliased, the shared entry.

        Returns:
            The stored Answer.
        """
        answer = Answer(value=value, label=label)
        alias = self._alias_table.get(step_id)
        # Both writes happen before any await point can observe the store
        self._primary[step_id] = answer
        if alias is not None:
            self._shared[alias] = answer
        return answer

    def get(self, step_id: str) -> Answer | None:
        """Primary answer owned by ``step_id``."""
        return self._primary.get(step_id)

    def resolve(self, key: str) -> Answer | None:
        """Answer under a shared key, falling back to a step id."""
        answer = self._shared.get(key)
        if answer is not None:
            return answer
        return self._primary.get(key)

    def discard(self, step_ids: Iterable[str]) -> list[str]:
        """Delete primary entries owned by ``step_ids`` and their alias entries.

        A shared key is only cleared when the answer under it is one being
        deleted. Steps that were never answered leave shared keys alone, so
        discarding a later step of another flow keeps an alias written by an
        earlier step. If another answered step still owns the alias, its
        answer takes the shared key back.

        Returns:
            Step ids that actually had an answer.
        """
        removed: list[str] = []
        for step_id in step_ids:
            answer = self._primary.pop(step_id, None)
            if answer is None:
                continue
            removed.append(step_id)
            alias = self._alias_table.get(step_id)
            if alias is not None and self._shared.get(alias) is answer:
                del self._shared[alias]
                self._restore_alias(alias)
        return removed

    def _restore_alias(self, alias: str) -> None:
        owners = [
            answer
            for step_id, answer in self._primary.items()
            if self._alias_table.get(step_id) == alias
        ]
        if owners:
            self._shared[alias] = owners[-1]

    def answered_step_ids(self) -> list[str]:
        return list(self._primary)

    def primary_items(self) -> dict[str, Answer]:
        return dict(self._primary)

    def shared_items(self) -> dict[str, Answer]:
        return dict(self._shared)

    def __contains__(self, step_id: object) -> bool:
        return step_id in self._primary

    def __len__(self) -> int:
        return len(self._primary)
