#!/usr/bin/env python3
"""Simple scheduler that periodically moves due jobs from `scheduled_zset` into the ready set.

Usage:
  python scripts/scheduler.py

Environment variables:
- REDIS_URL (optional)
- TESTING=1 to use in-memory redis
- POLL_SECONDS (optional, default 0.5)
"""
import asyncio
import os
import time
from jobrunner import metrics
from jobrunner.redis_helper import get_redis, pop_due_jobs, enqueue_job, get_job

POLL_SECONDS = float(os.getenv("POLL_SECONDS", "0.5"))


async def promote_due_jobs(redis_client, now: float) -> int:
    promoted = 0
    for job_id in await pop_due_jobs(redis_client, now, count=100):
        data = await get_job(redis_client, job_id)
        if data:
            data["status"] = "queued"
            await enqueue_job(redis_client, job_id, data)
            metrics.jobs_enqueued_total.inc()
            promoted += 1
            print(f"scheduler: enqueued {job_id}")
    return promoted


async def run_scheduler():
    redis_client = await get_redis()
    print("scheduler: connected")
    try:
        while True:
            await promote_due_jobs(redis_client, time.time())
            await asyncio.sleep(POLL_SECONDS)
    except asyncio.CancelledError:
        pass


if __name__ == "__main__":
    try:
        asyncio.run(run_scheduler())
    except KeyboardInterrupt:
        print("scheduler: exiting")
