#!/usr/bin/env python3
"""Async queue worker that pops the highest-priority job from the Redis ready set,
rebuilds it from the job registry, runs its handler and records the result.

Usage:
  REDIS_URL=redis://localhost:6379/0 python scripts/queue_worker.py

Set TESTING=1 to use the in-memory AsyncInMemoryRedis implementation used by the tests.
"""
import asyncio
import inspect
import os
import time

from jobrunner import config, metrics
from jobrunner.redis_helper import get_redis, get_job, pop_ready, set_job
from jobrunner.registry import JobRegistry, get_default_registry, load_job_modules

TESTING = config.TESTING
SLEEP_BETWEEN_POLLS = float(os.getenv("WORKER_POLL_SECONDS", "0.5"))


async def handle_job(redis_client, job_id: str, registry: JobRegistry):
    data = await get_job(redis_client, job_id)
    if data is None:
        return
    data["status"] = "running"
    data["started_at"] = time.time()
    await set_job(redis_client, job_id, data)

    start = time.time()
    try:
        job_cls = registry.resolve(data["job_type"])
        if job_cls is None:
            raise LookupError(f"unknown job type {data['job_type']}")
        result = job_cls.from_record(data).handle()
        if inspect.isawaitable(result):
            result = await result
    except Exception as e:
        data["status"] = "failed"
        data["error"] = str(e)
        metrics.jobs_failed_total.inc()
    else:
        data["status"] = "completed"
        data["result"] = result
        metrics.jobs_executed_total.inc()
    data["completed_at"] = time.time()
    await set_job(redis_client, job_id, data)
    metrics.execution_latency_seconds.observe(time.time() - start)


async def run_worker(registry: JobRegistry = None):
    load_job_modules(config.JOB_MODULES)
    registry = registry or get_default_registry()
    redis_client = await get_redis()
    print("worker: connected, testing=", TESTING)
    try:
        while True:
            job_id = await pop_ready(redis_client)
            if job_id:
                try:
                    await handle_job(redis_client, job_id, registry)
                except Exception as e:
                    print("worker: error handling job", job_id, e)
            else:
                await asyncio.sleep(SLEEP_BETWEEN_POLLS)
    except asyncio.CancelledError:
        pass


if __name__ == "__main__":
    try:
        asyncio.run(run_worker())
    except KeyboardInterrupt:
        print("worker: exiting")
