"""Tests for the cancellation token."""

import asyncio

import pytest

from weekly_report.errors import OperationCancelledError
from weekly_report.transport.cancel import CancelToken


class TestCancelToken:
    """Test CancelToken class."""

    def test_cancel_is_idempotent(self) -> None:
        """Test cancelling twice leaves the token cancelled."""
        token = CancelToken()
        assert not token.cancelled
        token.cancel()
        token.cancel()
        assert token.cancelled

    def test_raise_if_cancelled(self) -> None:
        """Test raise_if_cancelled only raises after cancel."""
        token = CancelToken()
        token.raise_if_cancelled()
        token.cancel()
        with pytest.raises(OperationCancelledError):
            token.raise_if_cancelled()

    @pytest.mark.asyncio
    async def test_sleep_completes(self) -> None:
        """Test sleep returns normally when not cancelled."""
        token = CancelToken()
        await token.sleep(0.01)
        await token.sleep(0)

    @pytest.mark.asyncio
    async def test_sleep_interrupted_by_cancel(self) -> None:
        """Test a long sleep ends as soon as the token fires."""
        token = CancelToken()
        loop = asyncio.get_running_loop()
        loop.call_later(0.01, token.cancel)
        start = loop.time()

        with pytest.raises(OperationCancelledError):
            await token.sleep(30)

        assert loop.time() - start < 5

    @pytest.mark.asyncio
    async def test_sleep_on_cancelled_token(self) -> None:
        """Test sleeping on an already cancelled token raises immediately."""
        token = CancelToken()
        token.cancel()
        with pytest.raises(OperationCancelledError):
            await token.sleep(0)

    @pytest.mark.asyncio
    async def test_run_returns_result(self) -> None:
        """Test run passes through the awaited value."""

        async def work() -> str:
            return "done"

        token = CancelToken()
        assert await token.run(work()) == "done"

    @pytest.mark.asyncio
    async def test_run_propagates_errors(self) -> None:
        """Test run re-raises the operation's own exception."""

        async def work() -> None:
            raise RuntimeError("boom")

        token = CancelToken()
        with pytest.raises(RuntimeError, match="boom"):
            await token.run(work())

    @pytest.mark.asyncio
    async def test_run_abandons_operation(self) -> None:
        """Test run cancels the in-flight operation when the token fires."""
        token = CancelToken()
        started = asyncio.Event()
        was_cancelled = False

        async def slow() -> None:
            nonlocal was_cancelled
            started.set()
            try:
                await asyncio.sleep(30)
            except asyncio.CancelledError:
                was_cancelled = True
                raise

        async def cancel_when_started() -> None:
            await started.wait()
            token.cancel()

        canceller = asyncio.create_task(cancel_when_started())
        with pytest.raises(OperationCancelledError):
            await token.run(slow())
        await canceller

        assert was_cancelled
