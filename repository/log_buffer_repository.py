# repository/log_buffer_repository.py
import json
from typing import List
from redis.asyncio import Redis
from config.cache import get_redis
from config.settings import settings
from core.entities import LogLine
from repository.namespaces import LOGS


class LogBufferRepository:
    """
    Flow:
    - Append each emitted log line to a Redis list (RPUSH) keyed by jobId.
    - A stream opened after the job left this process replays the list.
    - TTL is refreshed on append/read so the buffer outlives the job snapshot.
    """

    def __init__(self, ttl_seconds: int = settings.PERSISTENCE_TTL_SECONDS) -> None:
        self._ttl = int(ttl_seconds)

    @staticmethod
    def _key(job_id: str) -> str:
        return f"{LOGS}:{job_id}"

    @staticmethod
    async def _client() -> Redis:
        return await get_redis()

    async def append(self, job_id: str, line: LogLine) -> None:
        r = await self._client()
        payload = json.dumps({"message": line.message, "ts": line.ts})
        await r.rpush(self._key(job_id), payload)
        await r.expire(self._key(job_id), self._ttl)

    async def all(self, job_id: str) -> List[LogLine]:
        r = await self._client()
        vals = await r.lrange(self._key(job_id), 0, -1)
        out: List[LogLine] = []
        for raw in vals or []:
            try:
                obj = json.loads(raw)
                out.append(LogLine(message=str(obj["message"]), ts=int(obj["ts"])))
            except (ValueError, KeyError, TypeError):
                # Skip malformed entries instead of breaking the replay
                continue
        if vals:
            await r.expire(self._key(job_id), self._ttl)
        return out

    async def clear(self, job_id: str) -> int:
        r = await self._client()
        return int(await r.delete(self._key(job_id)))
