"""
Tests for report view state and superseded refreshes.
"""
import asyncio

import pytest

from errors import FetchError, NotAuthenticatedError
from views import ReportView


def test_successful_refresh_sets_data():
    view = ReportView("sales")

    async def compute():
        return {"daily_revenue": []}

    assert asyncio.run(view.refresh(compute)) is True
    assert view.data == {"daily_revenue": []}
    assert view.error is None
    assert view.loading is False


def test_report_error_becomes_message_and_clears_data():
    view = ReportView("sales")
    view.data = {"stale": True}

    async def compute():
        raise NotAuthenticatedError()

    asyncio.run(view.refresh(compute))
    assert view.data is None
    assert view.error == "User not authenticated"
    assert view.loading is False


def test_unexpected_errors_propagate():
    view = ReportView("sales")

    async def compute():
        raise KeyError("bug")

    with pytest.raises(KeyError):
        asyncio.run(view.refresh(compute))


def test_superseded_result_is_discarded():
    view = ReportView("engagement")

    async def scenario():
        release_slow = asyncio.Event()

        async def slow():
            await release_slow.wait()
            return "old"

        async def fast():
            return "new"

        slow_task = asyncio.create_task(view.refresh(slow))
        await asyncio.sleep(0)
        applied_fast = await view.refresh(fast)
        release_slow.set()
        applied_slow = await slow_task
        return applied_fast, applied_slow

    applied_fast, applied_slow = asyncio.run(scenario())
    assert (applied_fast, applied_slow) == (True, False)
    assert view.data == "new"
    assert view.loading is False


def test_superseded_error_is_discarded():
    view = ReportView("engagement")

    async def scenario():
        release_failing = asyncio.Event()

        async def failing():
            await release_failing.wait()
            raise FetchError("orders", "timeout")

        async def ok():
            return [1]

        failing_task = asyncio.create_task(view.refresh(failing))
        await asyncio.sleep(0)
        await view.refresh(ok)
        release_failing.set()
        return await failing_task

    assert asyncio.run(scenario()) is False
    assert view.error is None
    assert view.data == [1]
