"""Tests for the single-slot request supervisor."""

import asyncio

import pytest

from edupath.services.request_supervisor import RequestSupervisor


class TestIssue:
    """Issuing and superseding requests."""

    def test_first_ticket_is_newest(self):
        supervisor = RequestSupervisor()
        ticket = supervisor.issue("auto:ai_search", 0, "ai_search")
        assert ticket.generation == 1
        assert supervisor.is_newest(ticket)
        assert supervisor.in_flight("auto:ai_search")

    def test_later_ticket_supersedes_earlier(self):
        supervisor = RequestSupervisor()
        first = supervisor.issue("live:plan_course", 0, "plan_course")
        second = supervisor.issue("live:plan_course", 0, "plan_course")
        assert not supervisor.is_newest(first)
        assert supervisor.is_newest(second)

    def test_keys_are_independent(self):
        supervisor = RequestSupervisor()
        search = supervisor.issue("auto:ai_search", 0, "ai_search")
        supervisor.issue("preview", 0, "university_preview")
        assert supervisor.is_newest(search)

    def test_finish_clears_in_flight(self):
        supervisor = RequestSupervisor()
        ticket = supervisor.issue("preview", 0, "university_preview")
        supervisor.finish(ticket)
        assert not supervisor.in_flight("preview")
        assert supervisor.is_newest(ticket)

    def test_finishing_a_superseded_ticket_keeps_the_newer_one(self):
        supervisor = RequestSupervisor()
        first = supervisor.issue("preview", 0, "university_preview")
        supervisor.issue("preview", 0, "university_preview")
        supervisor.finish(first)
        assert supervisor.in_flight("preview")

    def test_invalidate_all_supersedes_everything(self):
        supervisor = RequestSupervisor()
        a = supervisor.issue("auto:ai_search", 0, "ai_search")
        b = supervisor.issue("preview", 0, "university_preview")
        supervisor.invalidate_all()
        assert not supervisor.is_newest(a)
        assert not supervisor.is_newest(b)
        assert not supervisor.in_flight("auto:ai_search")


class TestWait:
    """Waiting on an in-flight request."""

    @pytest.mark.asyncio
    async def test_wait_returns_when_request_finishes(self):
        supervisor = RequestSupervisor()
        ticket = supervisor.issue("auto:ai_search", 0, "ai_search")
        waiter = asyncio.create_task(supervisor.wait("auto:ai_search"))
        await asyncio.sleep(0)
        assert not waiter.done()

        supervisor.finish(ticket)

        await asyncio.wait_for(waiter, timeout=1)

    @pytest.mark.asyncio
    async def test_wait_returns_when_request_is_superseded(self):
        supervisor = RequestSupervisor()
        supervisor.issue("preview", 0, "university_preview")
        waiter = asyncio.create_task(supervisor.wait("preview"))
        await asyncio.sleep(0)

        supervisor.invalidate_all()

        await asyncio.wait_for(waiter, timeout=1)

    @pytest.mark.asyncio
    async def test_wait_without_request_is_a_no_op(self):
        await asyncio.wait_for(RequestSupervisor().wait("preview"), timeout=1)
