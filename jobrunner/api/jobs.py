from fastapi import APIRouter, Depends, HTTPException
from starlette.concurrency import run_in_threadpool

from ..schemas import DispatchResponse, JobListResponse, JobResponse, JobSubmit
from ..dispatcher import JobDispatcher, get_default_dispatcher
from .. import redis_helper
from .. import metrics
from ..auth import require_api_key

router = APIRouter()


def get_dispatcher() -> JobDispatcher:
    return get_default_dispatcher()


@router.post("/jobs", response_model=DispatchResponse, status_code=202)
async def submit_job(
    job: JobSubmit,
    authorized: bool = Depends(require_api_key),
    dispatcher: JobDispatcher = Depends(get_dispatcher),
):
    # dispatch blocks through its retries, keep it off the event loop
    await run_in_threadpool(
        dispatcher.dispatch, job.class_name, job.method, job.parameters, job.delay, job.priority
    )
    metrics.jobs_submitted_total.inc()
    return DispatchResponse(status="dispatched", job=f"{job.class_name}@{job.method}")


@router.get("/jobs/{job_id}", response_model=JobResponse)
async def get_job(job_id: str):
    redis_client = await redis_helper.get_redis()
    data = await redis_helper.get_job(redis_client, job_id)
    if not data:
        raise HTTPException(status_code=404, detail="job not found")
    return JobResponse(**data)


@router.get("/jobs", response_model=JobListResponse)
async def list_jobs():
    redis_client = await redis_helper.get_redis()
    all_jobs = await redis_helper.list_jobs(redis_client)
    return JobListResponse(jobs=[JobResponse(**data) for data in all_jobs])
