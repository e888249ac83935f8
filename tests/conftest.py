# tests/conftest.py
import os

# Settings are read at import time; give the required ones before any app import.
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")
os.environ.setdefault("PERSISTENCE_TTL_SECONDS", "3600")
os.environ.setdefault("ALLOWED_ORIGIN", "http://localhost:3000")
os.environ.setdefault("RATE_LIMIT_TIMES", "1000")
os.environ.setdefault("RATE_LIMIT_SECONDS", "60")
os.environ.setdefault("TRUST_PROXY", "false")
os.environ.setdefault("TICK_INTERVAL_MS", "5")

import asyncio  # noqa: E402
from typing import Dict, List, Optional  # noqa: E402
import fakeredis  # noqa: E402
import pytest  # noqa: E402
from core.entities import LogLine  # noqa: E402
from model.job import Job  # noqa: E402
from repository import job_repository, log_buffer_repository  # noqa: E402


class FakeClock:
    def __init__(self, now: int = 0) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> int:
        self.now += ms
        return self.now


class FakeJobRepository:
    """In-memory stand-in for JobRepository (same coroutine surface)."""

    def __init__(self) -> None:
        self.jobs: Dict[str, Job] = {}

    async def create(self, job: Job) -> Job:
        await self.put(job)
        return job

    async def put(self, job: Job) -> None:
        self.jobs[job.id] = job.model_copy()

    async def get(self, job_id: str) -> Optional[Job]:
        job = self.jobs.get(job_id)
        return job.model_copy() if job else None


class FakeLogBufferRepository:
    def __init__(self) -> None:
        self.lines: Dict[str, List[LogLine]] = {}

    async def append(self, job_id: str, line: LogLine) -> None:
        self.lines.setdefault(job_id, []).append(line)

    async def all(self, job_id: str) -> List[LogLine]:
        return list(self.lines.get(job_id, []))

    async def clear(self, job_id: str) -> int:
        return 1 if self.lines.pop(job_id, None) is not None else 0


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def job_repo() -> FakeJobRepository:
    return FakeJobRepository()


@pytest.fixture
def log_repo() -> FakeLogBufferRepository:
    return FakeLogBufferRepository()


@pytest.fixture
def fake_redis(monkeypatch):
    """
    Points the real repositories at an in-memory Redis server.
    Returns the patched `get_redis` so tests can inspect raw keys.
    """
    server = fakeredis.FakeServer()
    clients = {}

    async def _get_redis():
        # One client per event loop; every asyncio.run() brings a new loop
        loop = asyncio.get_running_loop()
        if loop not in clients:
            clients[loop] = fakeredis.FakeAsyncRedis(
                server=server, decode_responses=True
            )
        return clients[loop]

    monkeypatch.setattr(job_repository, "get_redis", _get_redis)
    monkeypatch.setattr(log_buffer_repository, "get_redis", _get_redis)
    return _get_redis
