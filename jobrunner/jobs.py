"""Jobs that may be dispatched in the background.

This module is the default allowed namespace: only classes defined here and
registered with ``@register_job`` pass validation unless the deployment
configures more namespaces.
"""
from typing import Any, Dict

from .job import QueuedJob
from .registry import register_job
from .status_log import StatusLog


@register_job
class Example(QueuedJob):
    """Echoes its arguments into the status log."""

    @classmethod
    def run(cls, *args: Any) -> "Example":
        return cls({"args": list(args)})

    def handle(self) -> Dict[str, Any]:
        StatusLog().log_status(f"Example job ran with {self.payload['args']}")
        return {"args": self.payload["args"]}


@register_job
class SumNumbers(QueuedJob):
    @classmethod
    def create(cls, *numbers: float) -> "SumNumbers":
        return cls({"numbers": list(numbers)})

    def handle(self) -> Dict[str, Any]:
        return {"total": sum(self.payload["numbers"])}


@register_job
class SendEmail(QueuedJob):
    """Composes an email message.

    Delivery is left to whatever transport the deployment wires in; the
    handler only renders the message and records it.
    """

    @classmethod
    def create(cls, to: str, subject: str, body: str = "") -> "SendEmail":
        if "@" not in to:
            raise ValueError(f"not an email address: {to!r}")
        return cls({"to": to, "subject": subject, "body": body})

    def handle(self) -> Dict[str, Any]:
        message = f"To: {self.payload['to']}\nSubject: {self.payload['subject']}\n\n{self.payload['body']}"
        StatusLog().log_status(f"Email to {self.payload['to']} rendered ({len(message)} bytes)")
        return {"to": self.payload["to"], "size": len(message)}
