"""Tests for the compensating actions helper."""
from unittest.mock import Mock

import pytest

from app.core import compensation
from app.core.compensation import CompensatingActions


@pytest.mark.unit
@pytest.mark.asyncio
class TestCompensatingActions:
    async def test_undo_steps_run_in_reverse_order(self):
        undone = []

        async def undo(name):
            undone.append(name)

        with pytest.raises(RuntimeError, match="boom"):
            async with CompensatingActions("three_writes") as saga:
                saga.add("first", lambda: undo("first"))
                saga.add("second", lambda: undo("second"))
                raise RuntimeError("boom")

        assert undone == ["second", "first"]

    async def test_nothing_undone_on_success(self):
        undone = []

        async def undo():
            undone.append(True)

        async with CompensatingActions("single_write") as saga:
            saga.add("write", undo)

        assert undone == []

    async def test_commit_discards_steps(self):
        undone = []

        async def undo():
            undone.append(True)

        with pytest.raises(ValueError):
            async with CompensatingActions("committed") as saga:
                saga.add("write", undo)
                saga.commit()
                raise ValueError("after commit")

        assert undone == []

    async def test_failing_undo_is_logged_and_others_still_run(self, monkeypatch):
        mock_logger = Mock()
        monkeypatch.setattr(compensation, "logger", mock_logger)
        undone = []

        async def good_undo():
            undone.append("good")

        async def bad_undo():
            raise ConnectionError("store gone")

        with pytest.raises(RuntimeError, match="original"):
            async with CompensatingActions("create_poll", failure_event="orphaned_poll") as saga:
                saga.add("good", good_undo)
                saga.add("bad", bad_undo, poll_id="abc")
                raise RuntimeError("original")

        assert undone == ["good"]
        mock_logger.critical.assert_called_once()
        assert mock_logger.critical.call_args.args == ("orphaned_poll",)
        assert mock_logger.critical.call_args.kwargs["poll_id"] == "abc"
        assert mock_logger.critical.call_args.kwargs["step"] == "bad"
