import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from . import config
from .api import jobs as jobs_api
from .metrics import error_count, metrics_response, request_latency_seconds
from .registry import load_job_modules
from .status_log import configure_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    load_job_modules(config.JOB_MODULES)
    yield


app = FastAPI(title="jobrunner", lifespan=lifespan)

app.include_router(jobs_api.router)


@app.middleware("http")
async def metrics_middleware(request: Request, call_next):
    start = time.time()
    try:
        response = await call_next(request)
        if response.status_code >= 500:
            error_count.inc()
        return response
    finally:
        request_latency_seconds.observe(time.time() - start)


@app.get("/healthz")
async def healthz():
    return {"status": "ok"}


@app.get("/readyz")
async def readyz():
    # Could add redis readiness check
    return {"ready": True}


@app.get("/metrics")
async def metrics():
    return metrics_response()
