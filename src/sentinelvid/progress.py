"""Progress reporting for a single analysis invocation."""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable

from sentinelvid.models.enums import AnalysisPhase

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[AnalysisPhase], object]

_FORWARD_ORDER = {
    AnalysisPhase.IDLE: 0,
    AnalysisPhase.UPLOADING: 1,
    AnalysisPhase.ANALYZING: 2,
    AnalysisPhase.COMPLETE: 3,
}

# Only in-flight phases are projected to the caller; terminal phases are
# conveyed by the run_analysis return value.
_REPORTED_PHASES = frozenset({AnalysisPhase.UPLOADING, AnalysisPhase.ANALYZING})


class ProgressReporter:
    """Tracks the current phase and notifies a fire-and-forget callback.

    The callback's return value is ignored. If it returns an awaitable, the
    awaitable is scheduled as a task and never awaited by the pipeline.
    Exceptions from the callback are logged and never change control flow.
    """

    def __init__(self, callback: ProgressCallback | None = None) -> None:
        self._callback = callback
        self._phase = AnalysisPhase.IDLE
        self._tasks: set[asyncio.Future[object]] = set()

    @property
    def phase(self) -> AnalysisPhase:
        return self._phase

    def advance(self, phase: AnalysisPhase) -> None:
        """Move forward to `phase` and notify the callback.

        Raises:
            ValueError: the transition is not a forward move from a live phase
        """
        if phase is AnalysisPhase.ERROR:
            self.fail()
            return
        if self._phase.is_terminal or _FORWARD_ORDER[phase] <= _FORWARD_ORDER[self._phase]:
            raise ValueError(f"Illegal progress transition: {self._phase} -> {phase}")
        self._phase = phase
        if phase in _REPORTED_PHASES:
            self._notify(phase)

    def complete(self) -> None:
        self.advance(AnalysisPhase.COMPLETE)

    def fail(self) -> None:
        if self._phase.is_terminal:
            raise ValueError(f"Illegal progress transition: {self._phase} -> error")
        self._phase = AnalysisPhase.ERROR

    def _notify(self, phase: AnalysisPhase) -> None:
        if self._callback is None:
            return
        try:
            result = self._callback(phase)
        except Exception:
            logger.exception("Progress callback failed for phase %s", phase)
            return
        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result)
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
            task.add_done_callback(self._log_task_exception)

    def _log_task_exception(self, task: asyncio.Future[object]) -> None:
        """Log unexpected callback task exceptions."""
        try:
            exc = task.exception()
        except asyncio.CancelledError:
            return
        if exc is not None:
            logger.error("Progress callback task failed: %s", exc, exc_info=exc)
