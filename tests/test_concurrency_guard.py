"""Unit tests for ConcurrencyGuard admission and release rules."""

import pytest

from docjob.core.exceptions import OperationInProgressError
from docjob.core.managers.concurrency_guard import ConcurrencyGuard
from docjob.core.models.state import RetryState


@pytest.fixture
def guard():
    return ConcurrencyGuard()


class TestAdmission:

    def test_fresh_invocation_takes_the_flag(self, guard):
        assert guard.admit("book-1", RetryState()) is True
        assert guard.is_in_progress("book-1")

    def test_second_fresh_invocation_is_rejected(self, guard):
        guard.admit("book-1", RetryState())

        with pytest.raises(OperationInProgressError) as excinfo:
            guard.admit("book-1", RetryState())

        assert excinfo.value.operation_key == "book-1"

    def test_retry_invocation_is_admitted_while_flag_set(self, guard):
        guard.admit("book-1", RetryState())

        assert guard.admit("book-1", RetryState(attempt=1)) is False
        assert guard.is_in_progress("book-1")

    def test_independent_keys_do_not_interfere(self, guard):
        guard.admit("book-1", RetryState())

        assert guard.admit("book-2", RetryState()) is True


class TestHold:

    @pytest.mark.asyncio
    async def test_flag_cleared_after_success(self, guard):
        async with guard.hold("book-1", RetryState()):
            assert guard.is_in_progress("book-1")

        assert not guard.is_in_progress("book-1")

    @pytest.mark.asyncio
    async def test_flag_cleared_after_exception(self, guard):
        with pytest.raises(RuntimeError):
            async with guard.hold("book-1", RetryState()):
                raise RuntimeError("unexpected")

        assert not guard.is_in_progress("book-1")

    @pytest.mark.asyncio
    async def test_rejected_hold_leaves_owner_flag_in_place(self, guard):
        async with guard.hold("book-1", RetryState()):
            with pytest.raises(OperationInProgressError):
                async with guard.hold("book-1", RetryState()):
                    pass  # pragma: no cover
            assert guard.is_in_progress("book-1")

    @pytest.mark.asyncio
    async def test_retry_hold_does_not_release_owner_flag(self, guard):
        async with guard.hold("book-1", RetryState()):
            async with guard.hold("book-1", RetryState(attempt=2)):
                pass
            assert guard.is_in_progress("book-1")

        assert not guard.is_in_progress("book-1")
