# util/errors.py
from fastapi import HTTPException, status
from util.enums import ErrorMessage


class AppError(HTTPException):
    # Flow: raise AppError to short-circuit with a typed status & message.
    def __init__(
        self, message: str, http_status: int = status.HTTP_400_BAD_REQUEST
    ) -> None:
        super().__init__(status_code=http_status, detail=message)


class InvalidDuration(AppError):
    def __init__(self, duration_ms: object = None) -> None:
        info = ErrorMessage.INVALID_DURATION.value
        super().__init__(info.message, info.http_status)
        self.duration_ms = duration_ms


class JobAlreadyStarted(AppError):
    def __init__(self) -> None:
        info = ErrorMessage.JOB_ALREADY_STARTED.value
        super().__init__(info.message, info.http_status)


class JobNotFound(AppError):
    def __init__(self, job_id: str) -> None:
        info = ErrorMessage.JOB_NOT_FOUND.value
        super().__init__(info.message, info.http_status)
        self.job_id = job_id
