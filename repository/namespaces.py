# repository/namespaces.py
from typing import Final

ROOT: Final[str] = "autommerce"

JOBS: Final[str] = f"{ROOT}:jobs"
LOGS: Final[str] = f"{JOBS}:logs"  # per-job ordered log lines
