# repository/job_repository.py
from typing import Final, Optional
from redis.asyncio import Redis
from config.cache import get_redis
from config.settings import settings
from model.job import Job
from repository.namespaces import JOBS
from util.enums import JobState

KEY_PREFIX: Final[str] = JOBS


class JobRepository:
    """
    Latest snapshot of each job as a Redis hash keyed by job id.
    Newer writes overwrite older ones; TTL is refreshed on every write.
    """

    def __init__(self, ttl_seconds: int = settings.PERSISTENCE_TTL_SECONDS) -> None:
        self._ttl = int(ttl_seconds)

    @staticmethod
    async def _client() -> Redis:
        return await get_redis()

    @staticmethod
    def _key(job_id: str) -> str:
        return f"{KEY_PREFIX}:{job_id}"

    async def _hset(self, job_id: str, mapping: dict) -> None:
        r = await self._client()
        await r.hset(self._key(job_id), mapping=mapping)
        await r.expire(self._key(job_id), self._ttl)

    # ---------------- Core CRUD ----------------

    async def create(self, job: Job) -> Job:
        await self.put(job)
        return job

    async def put(self, job: Job) -> None:
        await self._hset(
            job.id,
            {
                "id": job.id,
                "solution": job.solution.value,
                "status": job.status.value,
                "percent": str(job.percent),
                "stage": job.stage or "",
                "target_duration_ms": str(job.target_duration_ms),
            },
        )

    async def get(self, job_id: str) -> Optional[Job]:
        if not job_id:
            return None
        r = await self._client()
        h = await r.hgetall(self._key(job_id))
        if not h:
            return None

        def _s(key: str, default: str = "") -> str:
            v = h.get(key)
            if v is None:
                return default
            return v.decode("utf-8") if isinstance(v, (bytes, bytearray)) else str(v)

        try:
            return Job(
                id=_s("id") or job_id,
                solution=_s("solution"),
                status=_s("status") or JobState.IDLE.value,
                percent=int(_s("percent", "0") or 0),
                stage=_s("stage") or None,
                target_duration_ms=int(_s("target_duration_ms", "0") or 0),
            )
        except ValueError:
            return None

