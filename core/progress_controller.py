# core/progress_controller.py
import asyncio
import logging
from typing import Callable, List, Optional, Sequence, Tuple
from core.entities import JobRun, LogLine, ProgressEvent, StageDefinition
from core.job_timer import JobTimer
from core.stage_mapper import StageMapper
from util.constants import JobMessages, PROGRESS_MESSAGES
from util.enums import JobState
from util.timing import now_ms

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int], None]
StageCallback = Callable[[str], None]
LogCallback = Callable[[str], None]
CompleteCallback = Callable[[], None]


def _noop(*_args) -> None:
    return None


class ProgressController:
    """
    Drives a simulated job: owns one JobTimer and one StageMapper and reports
    through caller-supplied callbacks.

    Polling design: `run()` schedules a tick every `tick_interval_ms` on the
    running asyncio loop. `tick()` is public so callers (and tests) can drive
    it by hand against a fake clock after `start()`.

    Callback exceptions are not caught; they propagate out of `tick()`.
    """

    def __init__(
        self,
        *,
        clock: Callable[[], int] = now_ms,
        tick_interval_ms: int = 100,
        log_every_percent: int = 7,
        messages: Sequence[str] = PROGRESS_MESSAGES,
        name: str = "job",
    ) -> None:
        if tick_interval_ms <= 0:
            raise ValueError("tick_interval_ms must be positive")
        if log_every_percent <= 0:
            raise ValueError("log_every_percent must be positive")
        self._clock = clock
        self._tick_interval_ms = tick_interval_ms
        self._log_every = log_every_percent
        self._messages: Tuple[str, ...] = tuple(messages)
        self._name = name

        self._timer = JobTimer()
        self._mapper = StageMapper()
        self._logs: List[LogLine] = []
        self._task: Optional[asyncio.Task] = None

        self._last_percent: Optional[int] = None
        self._last_stage: Optional[int] = None
        self._last_bucket: int = -1
        self._stage_name: Optional[str] = None

        self._on_progress: ProgressCallback = _noop
        self._on_stage_change: StageCallback = _noop
        self._on_log: LogCallback = _noop
        self._on_complete: CompleteCallback = _noop

    # ---------------- Read-only views ----------------

    @property
    def state(self) -> JobState:
        return self._timer.state

    @property
    def percent(self) -> int:
        return self._timer.percent

    @property
    def stage(self) -> Optional[str]:
        return self._stage_name

    @property
    def logs(self) -> Tuple[LogLine, ...]:
        return tuple(self._logs)

    @property
    def run_state(self) -> Optional[JobRun]:
        return self._timer.run

    @property
    def is_scheduled(self) -> bool:
        return self._task is not None and not self._task.done()

    def snapshot(self) -> ProgressEvent:
        return ProgressEvent(percent=self.percent, stage=self._stage_name or "")

    # ---------------- Control surface ----------------

    def start(
        self,
        target_duration_ms: int,
        stages: Optional[Sequence[StageDefinition]] = None,
        *,
        on_progress: Optional[ProgressCallback] = None,
        on_stage_change: Optional[StageCallback] = None,
        on_log: Optional[LogCallback] = None,
        on_complete: Optional[CompleteCallback] = None,
    ) -> None:
        """Arm the timer without scheduling ticks."""
        self._timer.start(target_duration_ms, self._clock())
        self._mapper = StageMapper(stages)
        self._on_progress = on_progress or _noop
        self._on_stage_change = on_stage_change or _noop
        self._on_log = on_log or _noop
        self._on_complete = on_complete or _noop
        logger.info(
            "job.start name=%s duration_ms=%d stages=%d",
            self._name,
            target_duration_ms,
            len(self._mapper.stages),
        )
        self._log(JobMessages.STARTED)

    def run(
        self,
        target_duration_ms: int,
        stages: Optional[Sequence[StageDefinition]] = None,
        *,
        on_progress: Optional[ProgressCallback] = None,
        on_stage_change: Optional[StageCallback] = None,
        on_log: Optional[LogCallback] = None,
        on_complete: Optional[CompleteCallback] = None,
    ) -> asyncio.Task:
        """
        Start the job and schedule the tick loop on the running event loop.
        Raises InvalidDuration synchronously, before any task exists.
        """
        loop = asyncio.get_running_loop()
        self.start(
            target_duration_ms,
            stages,
            on_progress=on_progress,
            on_stage_change=on_stage_change,
            on_log=on_log,
            on_complete=on_complete,
        )
        self._task = loop.create_task(self._loop(), name=f"progress:{self._name}")
        return self._task

    def tick(self) -> bool:
        """
        Evaluate elapsed time once and fire callbacks.
        Returns False once no further ticks should be scheduled.
        """
        if self.state == JobState.IDLE or self.state.is_terminal:
            return False
        if self.state == JobState.PAUSED:
            return True

        percent = self._timer.tick(self._clock())

        if percent != self._last_percent:
            self._last_percent = percent
            self._on_progress(percent)
            if self._halted():
                return False

        index = self._mapper.index_for(percent)
        if index != self._last_stage:
            self._last_stage = index
            stage = self._mapper.stage_for(percent)
            self._stage_name = stage.name
            self._on_stage_change(stage.name)
            if self._halted():
                return False
            self._log(JobMessages.STAGE_STARTED.format(stage=stage.label))
            if self._halted():
                return False

        if percent < 100:
            bucket = percent // self._log_every
            if bucket > self._last_bucket:
                self._last_bucket = bucket
                # Past the end of the catalogue no further cadence lines are logged
                if bucket < len(self._messages):
                    self._log(self._messages[bucket])
            return not self._halted()

        if self.state != JobState.COMPLETED:
            return False
        logger.info("job.complete name=%s", self._name)
        self._log(JobMessages.COMPLETED)
        self._on_complete()
        return False

    def pause(self) -> bool:
        if not self._timer.pause(self._clock()):
            return False
        logger.info("job.pause name=%s percent=%d", self._name, self.percent)
        self._log(JobMessages.PAUSED)
        return True

    def resume(self) -> bool:
        if not self._timer.resume(self._clock()):
            return False
        logger.info("job.resume name=%s percent=%d", self._name, self.percent)
        self._log(JobMessages.RESUMED)
        return True

    def cancel(self) -> bool:
        if not self._timer.stop():
            return False
        self._release()
        logger.info("job.cancel name=%s percent=%d", self._name, self.percent)
        self._log(JobMessages.STOPPED)
        return True

    def close(self) -> None:
        """Teardown: drop the pending tick task without touching job state."""
        self._release()

    # ---------------- Internals ----------------

    async def _loop(self) -> None:
        interval = self._tick_interval_ms / 1000
        try:
            while self.tick():
                await asyncio.sleep(interval)
        finally:
            self._task = None

    def _release(self) -> None:
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()

    def _halted(self) -> bool:
        return self.state == JobState.STOPPED

    def _log(self, message: str) -> None:
        self._logs.append(LogLine(message=message))
        self._on_log(message)
