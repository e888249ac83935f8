# controller/job_controller.py
from fastapi import APIRouter, Depends, status
from fastapi.responses import StreamingResponse
from model.api import JobResponse, SolutionResponse, StartJobRequest
from service.job_service import JobService
from util.constants import InternalURIs
from controller.controller_dependencies import get_job_service, job_rate_limiter

job_router = APIRouter(dependencies=[Depends(job_rate_limiter)])


@job_router.get(InternalURIs.SOLUTIONS, response_model=list[SolutionResponse])
async def list_solutions() -> list[SolutionResponse]:
    return [SolutionResponse.from_preset(p) for p in JobService.list_solutions()]


@job_router.post(
    InternalURIs.JOBS,
    response_model=JobResponse,
    status_code=status.HTTP_201_CREATED,
)
async def start_job(
    payload: StartJobRequest,
    service: JobService = Depends(get_job_service),
) -> JobResponse:
    job = await service.start_job(payload)
    return JobResponse.from_job(job)


@job_router.get(InternalURIs.JOB, response_model=JobResponse)
async def get_job(
    job_id: str, service: JobService = Depends(get_job_service)
) -> JobResponse:
    return JobResponse.from_job(await service.get_job(job_id))


@job_router.post(InternalURIs.PAUSE_JOB, response_model=JobResponse)
async def pause_job(
    job_id: str, service: JobService = Depends(get_job_service)
) -> JobResponse:
    return JobResponse.from_job(await service.pause_job(job_id))


@job_router.post(InternalURIs.RESUME_JOB, response_model=JobResponse)
async def resume_job(
    job_id: str, service: JobService = Depends(get_job_service)
) -> JobResponse:
    return JobResponse.from_job(await service.resume_job(job_id))


@job_router.post(InternalURIs.CANCEL_JOB, response_model=JobResponse)
async def cancel_job(
    job_id: str, service: JobService = Depends(get_job_service)
) -> JobResponse:
    return JobResponse.from_job(await service.cancel_job(job_id))


@job_router.get(InternalURIs.STREAM_JOB)
async def stream_job(job_id: str, service: JobService = Depends(get_job_service)):
    generator = service.stream_job(job_id)
    return StreamingResponse(generator, media_type="application/x-ndjson")
