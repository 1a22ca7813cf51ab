import logging
import time
from enum import StrEnum
from typing import Any

from pydantic import BaseModel

logger = logging.getLogger(__name__)

VERY_SLOW_STEP_MS = 3000
BOTTLENECK_COUNT = 3


class StepStatus(StrEnum):
    started = "started"
    completed = "completed"
    failed = "failed"


class StepTiming(BaseModel):
    step: str
    start_time: float
    end_time: float | None = None
    duration: float | None = None  # ms
    status: StepStatus = StepStatus.started
    details: dict[str, Any] = {}


def _now_ms() -> float:
    return time.perf_counter() * 1000


class PerformanceLogger:
    """Per-request step timings.

    Concurrent tasks of one request share an instance; every mutation is a
    synchronous append or update, so no lock is needed on the event loop.
    """

    def __init__(self) -> None:
        self._timings: list[StepTiming] = []
        self._start = _now_ms()

    def _find_started(self, step: str) -> StepTiming | None:
        for timing in reversed(self._timings):
            if timing.step == step and timing.status == StepStatus.started:
                return timing
        return None

    def start_step(self, step: str, details: dict[str, Any] | None = None) -> StepTiming:
        timing = StepTiming(step=step, start_time=_now_ms(), details=dict(details or {}))
        self._timings.append(timing)
        logger.debug("Step %s starting %s", step, timing.details or "")
        return timing

    def end_step(self, step: str, details: dict[str, Any] | None = None) -> StepTiming | None:
        timing = self._find_started(step)
        if timing is None:
            logger.debug("end_step for unknown step %s", step)
            return None
        self._finish(timing, StepStatus.completed, details)

        if timing.duration > VERY_SLOW_STEP_MS:
            logger.warning("Step %s completed in %.0fms (slow)", step, timing.duration)
        else:
            logger.info("Step %s completed in %.0fms", step, timing.duration)
        return timing

    def fail_step(self, step: str, error: BaseException | str) -> StepTiming | None:
        timing = self._find_started(step)
        if timing is None:
            return None
        self._finish(timing, StepStatus.failed, {"error": str(error) or type(error).__name__})
        logger.warning("Step %s failed in %.0fms: %s", step, timing.duration, error)
        return timing

    @staticmethod
    def _finish(timing: StepTiming, status: StepStatus, details: dict[str, Any] | None) -> None:
        timing.end_time = _now_ms()
        timing.duration = round(timing.end_time - timing.start_time, 1)
        timing.status = status
        if details:
            timing.details = {**timing.details, **details}

    @property
    def timings(self) -> list[StepTiming]:
        return list(self._timings)

    def total_time(self) -> float:
        return round(_now_ms() - self._start, 1)

    def report(self) -> dict[str, Any]:
        total = self.total_time()

        def _entry(t: StepTiming) -> dict[str, Any]:
            percentage = round(t.duration / total * 100, 1) if t.duration and total else 0
            return {
                "step": t.step,
                "duration": t.duration,
                "status": t.status.value,
                "percentage": percentage,
                "details": t.details,
            }

        finished = [t for t in self._timings if t.duration is not None]
        slowest = sorted(finished, key=lambda t: t.duration, reverse=True)[:BOTTLENECK_COUNT]

        report = {
            "total_time_ms": total,
            "step_breakdown": [_entry(t) for t in self._timings],
            "bottlenecks": [_entry(t) for t in slowest],
        }
        logger.info(
            "Performance report: %.0fms total, %d steps, bottlenecks=%s",
            total,
            len(self._timings),
            [(b["step"], b["duration"]) for b in report["bottlenecks"]],
        )
        return report
