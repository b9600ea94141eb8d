"""Single-slot request supervisor.

One slot per request key (an auto step, the preview, a live-search step).
Issuing a request on a key supersedes any earlier request on that key:
its generation number moves on, so the earlier result is recognized as
stale when it resolves. Requests are never hard-cancelled; late results are
simply not applied.

Callers that find a request already in flight on a key can wait for it
instead of issuing a duplicate.
"""

import asyncio
from dataclasses import dataclass


@dataclass(frozen=True)
class RequestTicket:
    """Identity of one issued request.

    Attributes:
        key: Slot the request occupies.
        generation: Sequence number within the slot.
        epoch: Session epoch when issued (bumped on rewind).
        step_id: Step that was current when the request was issued.
    """

    key: str
    generation: int
    epoch: int
    step_id: str


class RequestSupervisor:
    """Per-session tracker of in-flight requests and their generations."""

    def __init__(self) -> None:
        self._generations: dict[str, int] = {}
        self._pending: dict[str, tuple[RequestTicket, asyncio.Event]] = {}

    def issue(self, key: str, epoch: int, step_id: str) -> RequestTicket:
        """Start a request on ``key``, superseding any earlier one.

        Returns:
            The new ticket.
        """
        generation = self._generations.get(key, 0) + 1
        self._generations[key] = generation
        superseded = self._pending.pop(key, None)
        if superseded is not None:
            superseded[1].set()
        ticket = RequestTicket(key=key, generation=generation, epoch=epoch, step_id=step_id)
        self._pending[key] = (ticket, asyncio.Event())
        return ticket

    def finish(self, ticket: RequestTicket) -> None:
        """Mark a request resolved and wake anyone waiting on it."""
        entry = self._pending.get(ticket.key)
        if entry is not None and entry[0] == ticket:
            del self._pending[ticket.key]
            entry[1].set()

    def in_flight(self, key: str) -> bool:
        return key in self._pending

    async def wait(self, key: str) -> None:
        """Wait for the request in flight on ``key`` (no-op if none)."""
        entry = self._pending.get(key)
        if entry is not None:
            await entry[1].wait()

    def is_newest(self, ticket: RequestTicket) -> bool:
        """Whether no later request was issued on the ticket's key."""
        return self._generations.get(ticket.key) == ticket.generation

    def invalidate_all(self) -> None:
        """Supersede every issued request (used on rewind)."""
        for key in self._generations:
            self._generations[key] += 1
        for _, event in self._pending.values():
            event.set()
        self._pending.clear()
