from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response
import time
from functools import wraps
from typing import Callable

# Define metrics
request_count = Counter(
    'content_ai_requests_total',
    'Total number of requests',
    ['method', 'endpoint', 'status']
)

request_duration = Histogram(
    'content_ai_request_duration_seconds',
    'Request duration in seconds',
    ['method', 'endpoint']
)

model_attempts = Counter(
    'content_ai_model_attempts_total',
    'Attempts against upstream models',
    ['feature', 'model', 'outcome']
)

model_latency = Histogram(
    'content_ai_model_latency_seconds',
    'Upstream model response latency',
    ['feature', 'model'],
    buckets=[0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0]
)

orchestration_results = Counter(
    'content_ai_orchestration_results_total',
    'Terminal orchestration results',
    ['feature', 'status']
)

backoff_waits = Counter(
    'content_ai_backoff_waits_total',
    'Pauses after rate-limited attempts',
    ['feature']
)

error_count = Counter(
    'content_ai_errors_total',
    'Total number of errors',
    ['error_type', 'endpoint']
)

# Metrics endpoint
async def metrics_endpoint():
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

# Decorator for tracking metrics
def track_metrics(endpoint: str):
    def decorator(func: Callable):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            start_time = time.time()
            status = "success"

            try:
                result = await func(*args, **kwargs)
                return result
            except Exception as e:
                status = "error"
                error_count.labels(
                    error_type=type(e).__name__,
                    endpoint=endpoint
                ).inc()
                raise
            finally:
                duration = time.time() - start_time
                request_count.labels(
                    method="POST",
                    endpoint=endpoint,
                    status=status
                ).inc()
                request_duration.labels(
                    method="POST",
                    endpoint=endpoint
                ).observe(duration)

        return wrapper
    return decorator
