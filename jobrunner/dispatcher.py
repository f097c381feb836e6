"""Launcher side of background job dispatch.

``JobDispatcher.dispatch`` validates the target, encodes the parameters and
starts a detached worker process that builds and queues the job. It never
raises: the outcome of every call is only visible through the status and
error log channels.
"""
import json
from dataclasses import dataclass
from typing import Any, Optional, Sequence, Tuple

from . import codec, config, metrics
from .command import CommandBuilder
from .errors import ValidationError
from .registry import load_job_modules
from .retry import Outcome, RetryController
from .spawner import ProcessSpawner, default_spawner
from .status_log import StatusLog
from .validator import TargetValidator


@dataclass(frozen=True)
class JobRequest:
    class_name: str
    method: str
    parameters: Tuple[Any, ...] = ()
    delay: int = 0
    priority: int = 0

    @property
    def label(self) -> str:
        return f"{self.class_name}@{self.method}"


class JobDispatcher:
    def __init__(
        self,
        validator: Optional[TargetValidator] = None,
        builder: Optional[CommandBuilder] = None,
        spawner: Optional[ProcessSpawner] = None,
        log: Optional[StatusLog] = None,
        max_attempts: Optional[int] = None,
        retry_rejected: Optional[bool] = None,
    ):
        self.validator = validator or TargetValidator()
        self.builder = builder or CommandBuilder()
        self.spawner = spawner or default_spawner()
        self.log = log or StatusLog()
        self.max_attempts = config.MAX_ATTEMPTS if max_attempts is None else max_attempts
        self.retry = RetryController(self.log, retry_terminal=retry_rejected)

    def dispatch(
        self,
        class_name: str,
        method: str,
        parameters: Sequence[Any] = (),
        delay: int = 0,
        priority: int = 0,
    ) -> None:
        label = f"{class_name}@{method}"
        try:
            request = JobRequest(class_name, method, tuple(parameters or ()), int(delay), int(priority))
            metrics.dispatch_requests_total.inc()
            outcome = self.retry.run(lambda: self._attempt(request), self.max_attempts, label=request.label)
        except Exception as exc:
            self.log.log_error(f"Failed to run job '{label}': {exc}")
            outcome = Outcome.EXHAUSTED
        if outcome is not Outcome.SUCCEEDED:
            metrics.dispatch_failures_total.inc()

    def _attempt(self, request: JobRequest) -> int:
        if request.delay < 0:
            raise ValidationError(f"Delay must be zero or more seconds, got {request.delay}")
        if abs(request.priority) > config.MAX_PRIORITY:
            raise ValidationError(
                f"Priority must be between -{config.MAX_PRIORITY} and {config.MAX_PRIORITY}, got {request.priority}"
            )
        verdict = self.validator.validate(request.class_name, request.method)
        if not verdict:
            raise ValidationError(verdict.reason)

        payload = codec.encode(request.parameters)
        argv = self.builder.build(request.class_name, request.method, payload, request.delay, request.priority)
        pid = self.spawner.spawn_detached(argv)
        metrics.workers_spawned_total.inc()

        self.log.log_status(
            f"Job '{request.label}' started with parameters: {json.dumps(list(request.parameters))} (pid {pid})"
        )
        return pid


_default_dispatcher: Optional[JobDispatcher] = None


def get_default_dispatcher() -> JobDispatcher:
    global _default_dispatcher
    if _default_dispatcher is None:
        load_job_modules(config.JOB_MODULES)
        _default_dispatcher = JobDispatcher()
    return _default_dispatcher


def submit(class_name: str, method: str, parameters: Sequence[Any] = (), delay: int = 0, priority: int = 0) -> None:
    """Run ``class_name.method(*parameters)`` as a background job."""
    get_default_dispatcher().dispatch(class_name, method, parameters, delay, priority)
