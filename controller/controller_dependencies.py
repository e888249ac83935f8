# controller/controller_dependencies.py
from fastapi_limiter.depends import RateLimiter
from config.settings import settings
from repository.job_repository import JobRepository
from repository.log_buffer_repository import LogBufferRepository
from service.job_registry import registry
from service.job_service import JobService

# Shared instance so tests can swap it out via app.dependency_overrides
job_rate_limiter = RateLimiter(
    times=settings.RATE_LIMIT_TIMES, seconds=settings.RATE_LIMIT_SECONDS
)


def get_job_service() -> JobService:
    _jobs = JobRepository()
    _logs = LogBufferRepository()
    _service = JobService(_jobs, _logs, registry)
    return _service
