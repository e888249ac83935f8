# core/job_timer.py
from typing import Optional
from core.entities import JobRun
from util.enums import JobState
from util.errors import InvalidDuration, JobAlreadyStarted


class JobTimer:
    """
    Converts wall-clock time into a 0..100 progress percentage.

    The timer never reads a clock itself: every call that needs the time
    takes `now` (integer ms), so a fake clock drives it deterministically.
    Paused intervals are excluded from the elapsed time.
    """

    def __init__(self) -> None:
        self._run: Optional[JobRun] = None
        self._pause_started_at: Optional[int] = None
        self._percent: int = 0

    @property
    def run(self) -> Optional[JobRun]:
        return self._run

    @property
    def state(self) -> JobState:
        return self._run.state if self._run is not None else JobState.IDLE

    @property
    def percent(self) -> int:
        return self._percent

    @staticmethod
    def validate_duration(target_duration_ms: int) -> int:
        if (
            isinstance(target_duration_ms, bool)
            or not isinstance(target_duration_ms, int)
            or target_duration_ms <= 0
        ):
            raise InvalidDuration(target_duration_ms)
        return target_duration_ms

    def start(self, target_duration_ms: int, now: int) -> JobRun:
        self.validate_duration(target_duration_ms)
        if self._run is not None:
            raise JobAlreadyStarted()
        self._run = JobRun(started_at=now, target_duration_ms=target_duration_ms)
        return self._run

    def tick(self, now: int) -> int:
        run = self._run
        if run is None or run.state != JobState.RUNNING:
            return self._percent

        elapsed = now - run.started_at - run.paused_accumulated_ms
        # Integer math keeps exact boundaries (e.g. 300/1000 -> 30, not 29)
        percent = max(0, min(100, elapsed * 100 // run.target_duration_ms))
        self._percent = max(self._percent, percent)
        if self._percent >= 100:
            run.state = JobState.COMPLETED
        return self._percent

    def pause(self, now: int) -> bool:
        if self._run is None or self._run.state != JobState.RUNNING:
            return False
        self._run.state = JobState.PAUSED
        self._pause_started_at = now
        return True

    def resume(self, now: int) -> bool:
        if self._run is None or self._run.state != JobState.PAUSED:
            return False
        started = self._pause_started_at if self._pause_started_at is not None else now
        self._run.paused_accumulated_ms += max(0, now - started)
        self._pause_started_at = None
        self._run.state = JobState.RUNNING
        return True

    def stop(self) -> bool:
        if self._run is None or self._run.state not in (
            JobState.RUNNING,
            JobState.PAUSED,
        ):
            return False
        self._run.state = JobState.STOPPED
        self._pause_started_at = None
        return True
