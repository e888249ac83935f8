# core/entities.py
from dataclasses import dataclass, field
import time
from typing import Optional
from util.enums import JobState


@dataclass(frozen=True)
class StageDefinition:
    """
    One named phase of a simulated job. `weight_percent` is its share of the
    total duration; a run's weights are expected (not checked) to sum to 100.
    """

    name: str
    weight_percent: float
    description: Optional[str] = None

    @property
    def label(self) -> str:
        return self.description or self.name


@dataclass
class JobRun:
    """
    One simulated execution. Times are integer milliseconds on the owning
    timer's clock; `paused_accumulated_ms` only ever grows.
    """

    started_at: int
    target_duration_ms: int
    paused_accumulated_ms: int = 0
    state: JobState = JobState.RUNNING


@dataclass(frozen=True)
class ProgressEvent:
    percent: int
    stage: str


@dataclass(frozen=True)
class LogLine:
    message: str
    ts: int = field(default_factory=lambda: int(time.time()))
