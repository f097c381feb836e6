"""Base class for the job objects that factory methods return."""
import time
import uuid
from typing import Any, Dict, Optional

from . import redis_helper
from .registry import qualified_name


class QueuedJob:
    """A unit of work headed for the Redis queue.

    Subclasses expose classmethod factories (the names callers dispatch) that
    build an instance from plain arguments, and implement ``handle`` to do the
    actual work once a queue worker picks the job up.
    """

    def __init__(self, payload: Optional[Dict[str, Any]] = None):
        self.payload = dict(payload or {})
        self.priority = 0
        self.delay = 0

    @classmethod
    def job_type(cls) -> str:
        return qualified_name(cls)

    def set_priority(self, priority: int) -> "QueuedJob":
        self.priority = redis_helper.check_priority(priority)
        return self

    def set_delay(self, delay: int) -> "QueuedJob":
        if int(delay) < 0:
            raise ValueError(f"delay must be >= 0, got {delay}")
        self.delay = int(delay)
        return self

    def handle(self) -> Any:
        raise NotImplementedError

    def to_record(self, job_id: str) -> Dict[str, Any]:
        return {
            "job_id": job_id,
            "job_type": self.job_type(),
            "payload": self.payload,
            "priority": self.priority,
            "delay": self.delay,
            "status": "scheduled" if self.delay else "queued",
            "created_at": time.time(),
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "QueuedJob":
        job = cls(record.get("payload"))
        job.priority = record.get("priority", 0)
        job.delay = record.get("delay", 0)
        return job

    async def enqueue(self, redis_client) -> str:
        job_id = str(uuid.uuid4())
        record = self.to_record(job_id)
        if self.delay:
            await redis_helper.schedule_job(redis_client, job_id, record, record["created_at"] + self.delay)
        else:
            await redis_helper.enqueue_job(redis_client, job_id, record)
        return job_id
