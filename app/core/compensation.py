"""Compensating actions for multi-step writes.

The store has no transaction spanning several round trips, so a workflow that
writes more than once registers an undo step after each successful write.
If a later step fails, the undo steps run in reverse order and the original
error is re-raised.

Usage:
    async with CompensatingActions("create_poll", failure_event="orphaned_poll") as saga:
        poll = await store.insert_poll(new_poll)
        saga.add("delete_poll", lambda: store.delete_poll(poll.id), poll_id=str(poll.id))
        await store.insert_options(poll.id, options)
"""
from typing import Any, Awaitable, Callable, List, Tuple

from app.core.logging_config import get_logger

logger = get_logger(__name__)

UndoStep = Tuple[str, Callable[[], Awaitable[Any]], dict]


class CompensatingActions:
    """Async context manager that undoes completed steps when the block fails."""

    def __init__(self, operation: str, failure_event: str = "compensation_failed"):
        self.operation = operation
        self.failure_event = failure_event
        self._steps: List[UndoStep] = []

    def add(self, name: str, undo: Callable[[], Awaitable[Any]], **context: Any) -> None:
        """Register an undo step. ``context`` is attached to log lines."""
        self._steps.append((name, undo, context))

    def commit(self) -> None:
        """Forget all registered steps; nothing will be undone."""
        self._steps.clear()

    async def __aenter__(self) -> "CompensatingActions":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        if exc_type is None:
            self._steps.clear()
            return False

        logger.warning(
            "compensation_started",
            operation=self.operation,
            error=str(exc),
            error_type=exc_type.__name__,
            steps=[name for name, _, _ in self._steps],
        )
        await self._run_undo_steps()
        # Never swallow the original failure
        return False

    async def _run_undo_steps(self) -> None:
        while self._steps:
            name, undo, context = self._steps.pop()
            try:
                await undo()
            except Exception as undo_error:
                logger.critical(
                    self.failure_event,
                    operation=self.operation,
                    step=name,
                    error=str(undo_error),
                    error_type=type(undo_error).__name__,
                    **context,
                )
            else:
                logger.info("compensation_step_completed", operation=self.operation, step=name, **context)
