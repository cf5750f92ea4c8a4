"""Unit tests for JobPoller's polling loop and its budgets."""

from unittest.mock import AsyncMock

import pytest

from docjob.core.exceptions import (
    AuthError,
    JobFailedError,
    JobTimeoutError,
    TransientError,
)
from docjob.core.managers.job_poller import JobPoller
from docjob.core.models.job import Job
from docjob.core.models.state import PollPhase


def status(value: str, **extra) -> dict:
    return {"job": {"status": value, **extra}}


# --- Test Fixtures ---

@pytest.fixture
def endpoint():
    return AsyncMock()


@pytest.fixture
def poller(endpoint, clock):
    return JobPoller(endpoint, sleep=clock.sleep, clock=clock)


class TestTerminalStates:

    @pytest.mark.asyncio
    async def test_completes_after_four_iterations(self, poller, endpoint, clock):
        chapters = [{"number": 1, "title": "Intro"}, {"number": 2, "title": "Growth"}]
        endpoint.invoke.side_effect = [
            status("pending"),
            status("processing", progress=30),
            status("processing", progress=70),
            status("completed", progress=100, result={"pageCount": 120, "chapters": chapters}),
        ]

        result = await poller.poll("J1")

        assert [c.title for c in result.chapters] == ["Intro", "Growth"]
        assert result.page_count == 120
        assert endpoint.invoke.await_count == 4
        assert clock.sleeps == [2.0, 2.0, 2.0, 2.0]

    @pytest.mark.asyncio
    async def test_queries_by_job_id(self, poller, endpoint):
        endpoint.invoke.return_value = status("completed", result={"chapters": []})

        await poller.poll("J42")

        endpoint.invoke.assert_awaited_with({"jobId": "J42"})

    @pytest.mark.asyncio
    async def test_completed_without_result_is_empty_result(self, poller, endpoint):
        endpoint.invoke.return_value = status("completed")

        result = await poller.poll("J1")

        assert result.is_empty()
        assert result.page_count is None
        assert result.chapters == []

    @pytest.mark.asyncio
    async def test_failed_raises_with_server_message(self, poller, endpoint):
        endpoint.invoke.side_effect = [status("processing"), status("failed", error="Encrypted PDF")]
        state = poller.new_state()

        with pytest.raises(JobFailedError) as excinfo:
            await poller.poll("J1", state)

        assert excinfo.value.message == "Encrypted PDF"
        assert excinfo.value.job_id == "J1"
        assert state.phase == PollPhase.failed


class TestBudgets:

    @pytest.mark.asyncio
    async def test_stops_after_max_attempts(self, endpoint, clock):
        endpoint.invoke.return_value = status("processing")
        # interval 0 keeps the clock still so only the attempt cap applies
        poller = JobPoller(endpoint, poll_interval=0, sleep=clock.sleep, clock=clock)
        state = poller.new_state()

        with pytest.raises(JobTimeoutError):
            await poller.poll("J1", state)

        assert endpoint.invoke.await_count == 60
        assert state.phase == PollPhase.timed_out

    @pytest.mark.asyncio
    async def test_stops_when_wall_clock_budget_is_spent(self, endpoint, clock):
        endpoint.invoke.return_value = status("pending")
        poller = JobPoller(endpoint, timeout=10.0, sleep=clock.sleep, clock=clock)

        with pytest.raises(JobTimeoutError) as excinfo:
            await poller.poll("J1")

        # 6 sleeps of 2s push elapsed past 10s before the 7th iteration
        assert endpoint.invoke.await_count == 6
        assert excinfo.value.elapsed_seconds == pytest.approx(12.0)

    @pytest.mark.asyncio
    async def test_default_budget_never_exceeds_sixty_queries(self, poller, endpoint, clock):
        endpoint.invoke.return_value = status("processing")

        with pytest.raises(JobTimeoutError):
            await poller.poll("J1")

        assert endpoint.invoke.await_count <= 60
        assert clock.now <= 120.0 + poller.poll_interval


class TestStatusCheckErrors:

    @pytest.mark.asyncio
    async def test_transient_status_error_does_not_abort(self, poller, endpoint):
        endpoint.invoke.side_effect = [
            TransientError("502", status=502),
            {"unexpected": "shape"},
            status("bogus-status"),
            status("completed", result={"pageCount": 12}),
        ]

        result = await poller.poll("J1")

        assert result.page_count == 12
        assert endpoint.invoke.await_count == 4

    @pytest.mark.asyncio
    async def test_auth_error_aborts_polling(self, poller, endpoint):
        endpoint.invoke.side_effect = [status("processing"), AuthError("invalid session")]

        with pytest.raises(AuthError):
            await poller.poll("J1")

        assert endpoint.invoke.await_count == 2


@pytest.mark.parametrize(
    "value, terminal",
    [("pending", False), ("processing", False), ("completed", True), ("failed", True)],
)
def test_terminal_statuses(value, terminal):
    assert Job(id="J1", status=value).is_in_terminal_state() is terminal
