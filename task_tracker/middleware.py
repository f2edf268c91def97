import logging
import time
import uuid
from typing import Callable

from fastapi import Request

logger = logging.getLogger(__name__)

SLOW_REQUEST_SECONDS = 1.0


async def log_requests(request: Request, call_next: Callable):
    """Tag each request with an id and log failed or slow ones."""
    start_time = time.time()
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:12]

    try:
        response = await call_next(request)
    except Exception as e:
        process_time = time.time() - start_time
        logger.error(f"[{request_id}] {request.method} {request.url.path} - ERROR: {e} - {process_time:.2f}s")
        raise
    process_time = time.time() - start_time
    response.headers["X-Request-ID"] = request_id

    # Only log slow requests or errors
    if process_time > SLOW_REQUEST_SECONDS or response.status_code >= 400:
        logger.info(
            f"[{request_id}] {request.method} {request.url.path} - {response.status_code} - {process_time:.2f}s",
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": round(process_time * 1000, 1),
            },
        )
    return response
