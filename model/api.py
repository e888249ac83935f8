# model/api.py
from typing import Optional
from pydantic import BaseModel, Field
from core.entities import StageDefinition
from core.solutions import SolutionPreset
from model.job import Job
from util.enums import JobState, Solution


class StageIn(BaseModel):
    name: str = Field(min_length=1)
    weightPercent: float = Field(ge=0)
    description: Optional[str] = None

    def to_definition(self) -> StageDefinition:
        return StageDefinition(
            name=self.name,
            weight_percent=self.weightPercent,
            description=self.description,
        )

    @classmethod
    def from_definition(cls, stage: StageDefinition) -> "StageIn":
        return cls(
            name=stage.name,
            weightPercent=stage.weight_percent,
            description=stage.description,
        )


class StartJobRequest(BaseModel):
    solution: Solution
    # Validated by the timer so the error surfaces as InvalidDuration
    durationMs: Optional[int] = None
    stages: Optional[list[StageIn]] = None
    productCount: int = Field(default=0, ge=0)


class JobResponse(BaseModel):
    jobId: str
    solution: Solution
    status: JobState
    percent: int
    stage: Optional[str] = None
    durationMs: int

    @classmethod
    def from_job(cls, job: Job) -> "JobResponse":
        return cls(
            jobId=job.id,
            solution=job.solution,
            status=job.status,
            percent=job.percent,
            stage=job.stage,
            durationMs=job.target_duration_ms,
        )


class SolutionResponse(BaseModel):
    solution: Solution
    title: str
    durationMs: int
    stages: list[StageIn]

    @classmethod
    def from_preset(cls, preset: SolutionPreset) -> "SolutionResponse":
        return cls(
            solution=preset.solution,
            title=preset.title,
            durationMs=preset.effective_duration_ms,
            stages=[StageIn.from_definition(s) for s in preset.stages],
        )

