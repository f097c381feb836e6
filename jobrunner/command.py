from typing import List, Optional

from . import config

WORKER_SUBCOMMAND = "run-background-job"


class CommandBuilder:
    """Builds the argument vector that starts a worker process.

    The interpreter and worker module are fixed when the builder is created.
    Arguments after ``--`` are positional no matter what they look like.
    """

    def __init__(self, python_binary: Optional[str] = None, worker_module: Optional[str] = None):
        self.python_binary = python_binary or config.PYTHON_BINARY
        self.worker_module = worker_module or config.WORKER_MODULE

    def build(self, class_name: str, method: str, payload: str, delay: int = 0, priority: int = 0) -> List[str]:
        return [
            self.python_binary,
            "-m",
            self.worker_module,
            WORKER_SUBCOMMAND,
            "--",
            class_name,
            method,
            payload,
            str(int(delay)),
            str(int(priority)),
        ]
