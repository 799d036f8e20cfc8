"""Tests for cancel module."""

import asyncio

import pytest

from interview_ai.errors import ErrorKind, OperationCancelledError, classify
from interview_ai.resilience import (
    CancelReason,
    CancelToken,
    cancellable_sleep,
    run_cancellable,
)


class TestCancelToken:
    """Tests for CancelToken."""

    def test_initial_state(self) -> None:
        """Test initial token state."""
        token = CancelToken()
        assert token.is_cancelled is False
        assert token.reason is None
        assert token.state.timestamp is None

    def test_cancel(self) -> None:
        """Test cancellation."""
        token = CancelToken()
        result = token.cancel(CancelReason.USER_REQUEST, source="ui")

        assert result is True
        assert token.is_cancelled is True
        assert token.reason == CancelReason.USER_REQUEST
        assert token.state.metadata == {"source": "ui"}
        assert token.state.timestamp is not None

    def test_cancel_twice(self) -> None:
        """Test cancelling twice returns False and keeps the first reason."""
        token = CancelToken()
        assert token.cancel(CancelReason.SHUTDOWN) is True
        assert token.cancel(CancelReason.USER_REQUEST) is False
        assert token.reason == CancelReason.SHUTDOWN

    def test_on_cancel_callback(self) -> None:
        """Test callbacks run once on cancel."""
        token = CancelToken()
        seen: list[CancelReason] = []
        token.on_cancel(seen.append)

        token.cancel(CancelReason.USER_REQUEST)
        token.cancel(CancelReason.USER_REQUEST)
        assert seen == [CancelReason.USER_REQUEST]

    def test_on_cancel_after_cancelled(self) -> None:
        """Test registering on a cancelled token fires immediately."""
        token = CancelToken()
        token.cancel(CancelReason.SHUTDOWN)
        seen: list[CancelReason] = []
        assert token.on_cancel(seen.append) is token
        assert seen == [CancelReason.SHUTDOWN]

    def test_failing_callback_does_not_block_others(self) -> None:
        """Test a raising callback is logged and the rest still run."""
        token = CancelToken()
        seen: list[CancelReason] = []

        def broken(reason: CancelReason) -> None:
            raise RuntimeError("callback bug")

        token.on_cancel(broken)
        token.on_cancel(seen.append)
        assert token.cancel() is True
        assert seen == [CancelReason.USER_REQUEST]

    def test_raise_if_cancelled(self) -> None:
        """Test raise_if_cancelled raises a cancelled error."""
        token = CancelToken()
        token.raise_if_cancelled()

        token.cancel(CancelReason.TIMEOUT)
        with pytest.raises(OperationCancelledError) as exc_info:
            token.raise_if_cancelled()
        assert exc_info.value.reason == "timeout"
        assert classify(exc_info.value) == ErrorKind.CANCELLED

    @pytest.mark.asyncio
    async def test_wait(self) -> None:
        """Test wait resolves with the reason."""
        token = CancelToken()

        async def cancel_later() -> None:
            await asyncio.sleep(0.01)
            token.cancel(CancelReason.SHUTDOWN)

        asyncio.create_task(cancel_later())
        assert await token.wait() == CancelReason.SHUTDOWN

    @pytest.mark.asyncio
    async def test_timeout(self) -> None:
        """Test the deadline cancels the token."""
        token = CancelToken(timeout=0.01)
        assert await token.wait() == CancelReason.TIMEOUT
        assert token.is_cancelled


class TestRunCancellable:
    """Tests for run_cancellable and cancellable_sleep."""

    @pytest.mark.asyncio
    async def test_without_token(self) -> None:
        """Test the operation runs directly without a token."""

        async def operation() -> int:
            return 42

        assert await run_cancellable(operation, None) == 42

    @pytest.mark.asyncio
    async def test_completes_before_cancel(self) -> None:
        """Test a finished operation returns its result."""
        token = CancelToken()

        async def operation() -> str:
            return "done"

        assert await run_cancellable(operation, token) == "done"
        assert token.is_cancelled is False

    @pytest.mark.asyncio
    async def test_already_cancelled(self) -> None:
        """Test a cancelled token prevents the operation from starting."""
        token = CancelToken()
        token.cancel()
        started = False

        async def operation() -> None:
            nonlocal started
            started = True

        with pytest.raises(OperationCancelledError):
            await run_cancellable(operation, token)
        assert started is False

    @pytest.mark.asyncio
    async def test_cancel_aborts_in_flight_operation(self) -> None:
        """Test cancelling interrupts a pending operation."""
        token = CancelToken()
        interrupted = asyncio.Event()

        async def operation() -> None:
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                interrupted.set()
                raise

        async def cancel_soon() -> None:
            await asyncio.sleep(0.01)
            token.cancel(CancelReason.USER_REQUEST)

        asyncio.create_task(cancel_soon())
        with pytest.raises(OperationCancelledError) as exc_info:
            await run_cancellable(operation, token)
        assert exc_info.value.reason == "user_request"
        assert interrupted.is_set()

    @pytest.mark.asyncio
    async def test_operation_error_propagates(self) -> None:
        """Test operation exceptions pass through unchanged."""
        token = CancelToken()

        async def operation() -> None:
            raise ValueError("bad")

        with pytest.raises(ValueError, match="bad"):
            await run_cancellable(operation, token)

    @pytest.mark.asyncio
    async def test_cancellable_sleep_uses_milliseconds(self) -> None:
        """Test the sleep function receives seconds."""
        delays: list[float] = []

        async def sleep(seconds: float) -> None:
            delays.append(seconds)

        await cancellable_sleep(1500, None, sleep)
        assert delays == [1.5]

    @pytest.mark.asyncio
    async def test_cancellable_sleep_aborts(self) -> None:
        """Test a deadline token cuts a long sleep short."""
        token = CancelToken(timeout=0.01)
        with pytest.raises(OperationCancelledError):
            await cancellable_sleep(10_000, token)
