# service/job_registry.py
import asyncio
import logging
from dataclasses import dataclass
from typing import Dict, Optional
from core.progress_controller import ProgressController
from core.streaming import JobSession
from model.job import Job
from util.enums import Solution

logger = logging.getLogger(__name__)


@dataclass
class LiveJob:
    job_id: str
    solution: Solution
    controller: ProgressController
    session: JobSession
    pump: Optional[asyncio.Task] = None

    def to_job(self) -> Job:
        run = self.controller.run_state
        snap = self.controller.snapshot()
        return Job(
            id=self.job_id,
            solution=self.solution,
            status=self.controller.state,
            percent=snap.percent,
            stage=snap.stage or None,
            target_duration_ms=run.target_duration_ms if run else 0,
        )


class JobRegistry:
    """
    Process-wide map of jobs whose controller lives in this process.
    Each entry is dropped by its persistence pump once the session ends.
    """

    def __init__(self) -> None:
        self._live: Dict[str, LiveJob] = {}

    def __len__(self) -> int:
        return len(self._live)

    def __contains__(self, job_id: str) -> bool:
        return job_id in self._live

    def add(self, live: LiveJob) -> None:
        self._live[live.job_id] = live

    def get(self, job_id: str) -> Optional[LiveJob]:
        return self._live.get(job_id)

    def discard(self, job_id: str) -> None:
        self._live.pop(job_id, None)

    async def shutdown(self) -> None:
        """Release every pending tick and let the pumps drain what was already emitted."""
        lives = list(self._live.values())
        for live in lives:
            live.controller.close()
            live.session.close()
        pumps = [live.pump for live in lives if live.pump is not None]
        if pumps:
            await asyncio.gather(*pumps, return_exceptions=True)
        logger.info("registry.shutdown jobs=%d", len(lives))
        self._live.clear()


registry = JobRegistry()
