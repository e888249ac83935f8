# model/job.py
from typing import Optional
from pydantic import BaseModel, Field
from util.enums import JobState, Solution


class Job(BaseModel):
    id: str
    solution: Solution
    status: JobState = JobState.IDLE
    percent: int = Field(default=0, ge=0, le=100)
    stage: Optional[str] = None
    target_duration_ms: int = 0
