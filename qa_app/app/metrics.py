from __future__ import annotations

import time

from fastapi import Request
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from starlette.responses import Response

from qa_app.app.settings import settings
from qa_app.rag.types import AnswerMethod

UNMATCHED_ROUTE = "unmatched"

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"],
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "path"],
)
ANSWER_COUNT = Counter(
    "qa_answers_total",
    "Answers produced, by answering method",
    ["method"],
)


def _route_path(request: Request) -> str:
    # label by route template so document ids do not explode label cardinality
    route = request.scope.get("route")
    return getattr(route, "path", UNMATCHED_ROUTE)


async def metrics_middleware(request: Request, call_next):
    if not settings.metrics_enabled:
        return await call_next(request)
    if request.url.path == "/metrics":
        return await call_next(request)
    start = time.monotonic()
    status = 500
    try:
        response = await call_next(request)
        status = response.status_code
        return response
    finally:
        duration = time.monotonic() - start
        path = _route_path(request)
        REQUEST_COUNT.labels(request.method, path, str(status)).inc()
        REQUEST_LATENCY.labels(request.method, path).observe(duration)


def record_answer(method: AnswerMethod) -> None:
    if settings.metrics_enabled:
        ANSWER_COUNT.labels(method.value).inc()


def metrics_response() -> Response:
    if not settings.metrics_enabled:
        return Response(status_code=404)
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
