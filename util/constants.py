class InternalURIs:
    API = "/api"
    V1 = API + "/v1"
    SOLUTIONS = V1 + "/solutions"
    JOBS = V1 + "/jobs"
    JOB = JOBS + "/{job_id}"
    PAUSE_JOB = JOB + "/pause"
    RESUME_JOB = JOB + "/resume"
    CANCEL_JOB = JOB + "/cancel"
    STREAM_JOB = JOB + "/stream"


class JobMessages:
    STARTED = "Process started"
    PAUSED = "Process paused"
    RESUMED = "Process resumed"
    STOPPED = "Process stopped"
    COMPLETED = "Process completed successfully!"
    CANCELLED_BY_USER = "Job cancelled by user"
    STAGE_STARTED = "Starting stage: {stage}"


# Cadence log lines of the simulated pipeline, one per LOG_EVERY_PERCENT bucket.
PROGRESS_MESSAGES = (
    "Initializing process...",
    "Loading configuration...",
    "Connecting to API...",
    "Preparing dataset...",
    "Processing data batch 1/5...",
    "Running AI analysis...",
    "Processing data batch 2/5...",
    "Optimizing results...",
    "Processing data batch 3/5...",
    "Validating output...",
    "Processing data batch 4/5...",
    "Finalizing results...",
    "Processing data batch 5/5...",
    "Generating report...",
)
