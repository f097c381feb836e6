"""Worker side of background job dispatch.

Runs inside the detached process started by the launcher: decodes the
parameters, calls the target's factory method to build the job, and hands the
job to the Redis queue with the requested priority and delay. Nothing here is
retried; a failure is logged and reported through the exit code.
"""
from typing import Optional

from . import codec, redis_helper
from .errors import CodecError, FactoryError, ValidationError
from .status_log import StatusLog
from .validator import TargetValidator

EXIT_OK = 0
EXIT_FACTORY_ERROR = 1
EXIT_CODEC_ERROR = 2
EXIT_INVALID_TARGET = 3


def _is_queueable(job) -> bool:
    return all(callable(getattr(job, name, None)) for name in ("set_priority", "set_delay", "enqueue"))


async def run_background_job(
    class_name: str,
    method: str,
    payload: str,
    delay: int = 0,
    priority: int = 0,
    *,
    validator: Optional[TargetValidator] = None,
    log: Optional[StatusLog] = None,
    redis_client=None,
) -> int:
    log = log or StatusLog()
    label = f"{class_name}@{method}"

    try:
        parameters = codec.decode(payload)
    except CodecError as exc:
        log.log_error(f"Failed to decode parameters for job '{label}': {exc}")
        return EXIT_CODEC_ERROR

    try:
        factory = (validator or TargetValidator()).resolve_factory(class_name, method)
    except ValidationError as exc:
        log.log_error(f"Refusing to run job '{label}': {exc}")
        return EXIT_INVALID_TARGET

    owns_client = redis_client is None
    try:
        job = factory(*parameters)
        if not _is_queueable(job):
            raise FactoryError(f"factory returned {type(job).__name__}, not a queueable job")
        job.set_priority(priority)
        job.set_delay(delay)
        if owns_client:
            redis_client = await redis_helper.get_redis()
        job_id = await job.enqueue(redis_client)
    except Exception as exc:
        log.log_error(f"Failed to dispatch job '{label}': {exc}")
        return EXIT_FACTORY_ERROR
    finally:
        if owns_client and redis_client is not None:
            await redis_client.aclose()

    log.log_status(f"Job '{label}' dispatched successfully as {job_id}")
    return EXIT_OK
