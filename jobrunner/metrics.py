from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

# Keep metrics module-level singletons
jobs_submitted_total = Counter("jobs_submitted_total", "Total jobs submitted via API")
dispatch_requests_total = Counter("dispatch_requests_total", "Dispatch calls received by the launcher")
dispatch_failures_total = Counter("dispatch_failures_total", "Dispatch calls that never launched a worker")
workers_spawned_total = Counter("workers_spawned_total", "Detached worker processes launched")
error_count = Counter("error_count", "Total errors encountered by the control plane")
request_latency_seconds = Histogram("request_latency_seconds", "HTTP request latency seconds")

# Queue / execution metrics
jobs_enqueued_total = Counter("jobs_enqueued_total", "Jobs moved into the ready queue")
jobs_executed_total = Counter("jobs_executed_total", "Total jobs executed by queue workers")
jobs_failed_total = Counter("jobs_failed_total", "Jobs whose handler raised")
execution_latency_seconds = Histogram("execution_latency_seconds", "Job execution latency seconds")


def metrics_response():
    # Return prometheus metrics as a Response
    payload = generate_latest()
    return Response(content=payload, media_type=CONTENT_TYPE_LATEST)
