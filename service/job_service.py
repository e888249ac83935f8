# service/job_service.py
import asyncio
import logging
from typing import AsyncIterator, Callable, Dict, List, Optional
from uuid import uuid4
from config.settings import settings
from core.entities import LogLine
from core.job_timer import JobTimer
from core.progress_controller import ProgressController
from core.solutions import SOLUTION_PRESETS, SolutionPreset, get_preset, preamble_for
from core.streaming import JobSession, event, ndjson_line
from model.api import StartJobRequest
from model.job import Job
from repository.job_repository import JobRepository
from repository.log_buffer_repository import LogBufferRepository
from service.job_registry import JobRegistry, LiveJob
from util.constants import JobMessages
from util.enums import JobState
from util.errors import JobNotFound
from util.timing import now_ms, timed

logger = logging.getLogger(__name__)


class JobService:
    """
    Runs simulated solution jobs in this process and mirrors them to Redis.

    Flow:
    - start_job: validate, persist the initial snapshot, run a ProgressController
      whose callbacks publish into a JobSession.
    - A persistence pump follows the session and writes snapshot/log updates.
    - stream_job follows the same session live, or replays Redis once the job
      has left this process.
    """

    def __init__(
        self,
        jobs: JobRepository,
        logs: LogBufferRepository,
        registry: JobRegistry,
        *,
        clock: Callable[[], int] = now_ms,
        tick_interval_ms: Optional[int] = None,
        log_every_percent: Optional[int] = None,
    ) -> None:
        self._jobs = jobs
        self._logs = logs
        self._registry = registry
        self._clock = clock
        self._tick_interval_ms = tick_interval_ms or settings.TICK_INTERVAL_MS
        self._log_every_percent = log_every_percent or settings.LOG_EVERY_PERCENT

    @staticmethod
    def list_solutions() -> List[SolutionPreset]:
        return list(SOLUTION_PRESETS.values())

    # ---------------- Lifecycle ----------------

    async def start_job(self, request: StartJobRequest) -> Job:
        preset = get_preset(request.solution)
        duration = (
            request.durationMs
            if request.durationMs is not None
            else preset.effective_duration_ms
        )
        # Nothing is persisted for an invalid duration
        JobTimer.validate_duration(duration)
        if request.stages is not None:
            stages = [s.to_definition() for s in request.stages]
        else:
            stages = list(preset.stages)

        job_id = str(uuid4())
        job = Job(
            id=job_id,
            solution=request.solution,
            status=JobState.RUNNING,
            target_duration_ms=duration,
        )
        await self._jobs.create(job)
        await self._logs.clear(job_id)

        session = JobSession(job_id)
        controller = ProgressController(
            clock=self._clock,
            tick_interval_ms=self._tick_interval_ms,
            log_every_percent=self._log_every_percent,
            name=job_id,
        )
        live = LiveJob(
            job_id=job_id,
            solution=request.solution,
            controller=controller,
            session=session,
        )
        self._registry.add(live)

        session.publish("status", {"status": JobState.RUNNING.value})
        for line in preamble_for(request.solution, request.productCount):
            session.publish("log", {"message": line})

        def _on_complete() -> None:
            session.publish("status", {"status": JobState.COMPLETED.value})
            session.publish("done", {"percent": 100})

        task = controller.run(
            duration,
            stages,
            on_progress=lambda p: session.publish("progress", {"percent": p}),
            on_stage_change=lambda name: session.publish("stage", {"name": name}),
            on_log=lambda m: session.publish("log", {"message": m}),
            on_complete=_on_complete,
        )
        task.add_done_callback(lambda t: self._on_tick_loop_done(live, t))
        live.pump = asyncio.create_task(self._persist(live), name=f"persist:{job_id}")

        logger.info(
            "job.created job=%s solution=%s duration_ms=%d stages=%d",
            job_id,
            request.solution.value,
            duration,
            len(stages),
        )
        return live.to_job()

    async def get_job(self, job_id: str) -> Job:
        live = self._registry.get(job_id)
        if live is not None:
            return live.to_job()
        job = await self._jobs.get(job_id)
        if job is None:
            raise JobNotFound(job_id)
        return job

    async def pause_job(self, job_id: str) -> Job:
        live = self._registry.get(job_id)
        if live is None:
            return await self.get_job(job_id)
        if live.controller.pause():
            live.session.publish("status", {"status": JobState.PAUSED.value})
        return live.to_job()

    async def resume_job(self, job_id: str) -> Job:
        live = self._registry.get(job_id)
        if live is None:
            return await self.get_job(job_id)
        if live.controller.resume():
            live.session.publish("status", {"status": JobState.RUNNING.value})
        return live.to_job()

    async def cancel_job(self, job_id: str) -> Job:
        live = self._registry.get(job_id)
        if live is None:
            return await self.get_job(job_id)
        if live.controller.cancel():
            live.session.publish("status", {"status": JobState.STOPPED.value})
            live.session.publish(
                "cancelled", {"message": JobMessages.CANCELLED_BY_USER}
            )
        return live.to_job()

    # ---------------- Streaming ----------------

    async def stream_job(self, job_id: str) -> AsyncIterator[bytes]:
        """
        Live job: replay the session history, then follow it to done/cancelled.
        Otherwise: stored snapshot + buffered log lines + a terminal event.
        """
        live = self._registry.get(job_id)
        if live is not None:
            logger.info("stream.live job=%s", job_id)
            async for ev in live.session.follow():
                yield ndjson_line(ev)
            return

        try:
            job = await self._jobs.get(job_id)
        except Exception:
            logger.error("stream.job.get.error job=%s", job_id)
            job = None

        if job is None:
            yield ndjson_line(event("error", {"message": JobNotFound(job_id).detail}))
            yield ndjson_line(event("done"))
            return

        yield ndjson_line(event("status", {"status": job.status.value}))
        yield ndjson_line(event("progress", {"percent": job.percent}))
        if job.stage:
            yield ndjson_line(event("stage", {"name": job.stage}))

        try:
            buffered = await self._logs.all(job_id)
        except Exception:
            logger.error("stream.logs.read.error job=%s", job_id)
            buffered = []
        logger.info("stream.replay job=%s logs=%d", job_id, len(buffered))
        for line in buffered:
            yield ndjson_line(event("log", {"message": line.message, "ts": line.ts}))

        if job.status == JobState.COMPLETED:
            yield ndjson_line(event("done", {"percent": 100}))
        elif job.status == JobState.STOPPED:
            yield ndjson_line(
                event("cancelled", {"message": JobMessages.CANCELLED_BY_USER})
            )
        else:
            # Snapshot of a job whose controller no longer runs anywhere
            yield ndjson_line(event("error", {"message": "Job is no longer running"}))
            yield ndjson_line(event("done"))

    # ---------------- Internals ----------------

    async def _persist(self, live: LiveJob) -> None:
        try:
            with timed(logger, "job.session", job=live.job_id):
                async for ev in live.session.follow():
                    try:
                        await self._apply(live, ev)
                    except Exception:
                        # The simulation keeps running; the snapshot just lags
                        logger.exception(
                            "job.persist.error job=%s type=%s", live.job_id, ev["type"]
                        )
        finally:
            self._registry.discard(live.job_id)

    async def _apply(self, live: LiveJob, ev: Dict[str, object]) -> None:
        kind = ev["type"]
        if kind == "log":
            payload: Dict[str, object] = ev["payload"]  # type: ignore[assignment]
            await self._logs.append(
                live.job_id,
                LogLine(message=str(payload["message"]), ts=int(payload["ts"])),
            )
        elif kind in ("status", "progress", "stage"):
            # Always the whole snapshot: an expired hash is rebuilt complete
            await self._jobs.put(live.to_job())

    def _on_tick_loop_done(self, live: LiveJob, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is None:
            return
        logger.error(
            "job.tick.error job=%s err=%s",
            live.job_id,
            type(exc).__name__,
            exc_info=exc,
        )
        # Nothing drives this job any more; leave a terminal snapshot behind
        live.controller.cancel()
        live.session.publish("status", {"status": live.controller.state.value})
        live.session.publish("error", {"message": str(exc) or type(exc).__name__})
        live.session.close()
