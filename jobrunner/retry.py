"""Bounded, sequential retries of a launch attempt."""
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from . import config
from .status_log import StatusLog


class Outcome(str, Enum):
    SUCCEEDED = "succeeded"
    EXHAUSTED = "exhausted"
    REJECTED = "rejected"


@dataclass
class RetryState:
    attempt: int = 0
    max: int = config.MAX_ATTEMPTS


class RetryController:
    """Runs ``dispatch_fn`` until it succeeds or the attempt budget is spent.

    State lives in a ``RetryState`` created per ``run`` call, so concurrent or
    nested dispatches never share a counter. Errors whose ``retryable`` flag
    is false end the run at once unless ``retry_terminal`` is set.
    """

    def __init__(self, log: Optional[StatusLog] = None, retry_terminal: Optional[bool] = None):
        self.log = log or StatusLog()
        self.retry_terminal = config.RETRY_REJECTED if retry_terminal is None else retry_terminal

    def run(self, dispatch_fn: Callable[[], object], max_attempts: Optional[int] = None, label: str = "job") -> Outcome:
        if max_attempts is None:
            max_attempts = config.MAX_ATTEMPTS
        state = RetryState(attempt=0, max=max(1, max_attempts))

        while True:
            state.attempt += 1
            if state.attempt == 1:
                self.log.log_status(f"Dispatching job '{label}'... Attempt 1")
            else:
                self.log.log_status(f"Retrying job '{label}'... Attempt {state.attempt}")

            try:
                dispatch_fn()
            except Exception as exc:
                self.log.log_error(f"Failed to run job '{label}': {exc}")
                if not getattr(exc, "retryable", True) and not self.retry_terminal:
                    self.log.log_status(f"Job '{label}' rejected, not retrying")
                    self.log.log_status(f"Job '{label}' failed after {state.attempt} attempts")
                    return Outcome.REJECTED
                if state.attempt >= state.max:
                    self.log.log_status(f"Job '{label}' failed after {state.attempt} attempts")
                    return Outcome.EXHAUSTED
                continue

            return Outcome.SUCCEEDED
