# util/enums.py
from enum import Enum
from typing import NamedTuple
from fastapi import status


class Color(str, Enum):
    RESET = "\033[0m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    BOLD = "\033[1m"

    def __str__(self):
        return self.value


class Environment(str, Enum):
    DEV = "dev"
    PROD = "prod"


class JobState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"
    STOPPED = "stopped"

    @property
    def is_terminal(self) -> bool:
        return self in (JobState.COMPLETED, JobState.STOPPED)


class Solution(str, Enum):
    ATTRIBUTE_EXTRACTION = "attribute_extraction"
    COLLECTION_BUILDER = "collection_builder"
    HEADER_OPTIMIZATION = "header_optimization"
    LOW_HANGING_FRUITS = "low_hanging_fruits"
    INTERNAL_LINKS = "internal_links"
    ON_PAGE_BOOSTING = "on_page_boosting"


class ErrorInfo(NamedTuple):
    message: str
    http_status: int


class ErrorMessage(Enum):
    INVALID_DURATION = ErrorInfo(
        "Target duration must be a positive number of milliseconds",
        status.HTTP_422_UNPROCESSABLE_ENTITY,
    )
    JOB_ALREADY_STARTED = ErrorInfo(
        "Job has already been started", status.HTTP_409_CONFLICT
    )
    JOB_NOT_FOUND = ErrorInfo("Unknown or expired jobId", status.HTTP_404_NOT_FOUND)
