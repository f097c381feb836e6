import os
import sys

TESTING = os.getenv("TESTING") == "1"
REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")
API_KEY = os.getenv("API_KEY", "dev-key")


def _csv(value: str) -> frozenset:
    return frozenset(part.strip() for part in value.split(",") if part.strip())


# Dispatch
MAX_ATTEMPTS = int(os.getenv("JOB_MAX_ATTEMPTS", "3"))
RETRY_REJECTED = os.getenv("JOB_RETRY_REJECTED", "1") == "1"
ALLOWED_NAMESPACES = _csv(os.getenv("JOB_ALLOWED_NAMESPACES", "jobrunner.jobs"))
JOB_MODULES = sorted(_csv(os.getenv("JOB_MODULES", "jobrunner.jobs")))

# Worker process
PYTHON_BINARY = os.getenv("JOB_PYTHON_BINARY", sys.executable)
WORKER_MODULE = os.getenv("JOB_WORKER_MODULE", "jobrunner.cli")
WORKER_OUTPUT = os.getenv("JOB_WORKER_OUTPUT") or None

LOG_DIR = os.getenv("JOB_LOG_DIR", os.path.join("storage", "logs"))

# Priorities outside +/- MAX_PRIORITY are refused at every entry point
MAX_PRIORITY = 1000
