import time
import uuid

from fastapi import Request

from kiosk.core.logger import get_logger

logger = get_logger("kiosk.request")

REQUEST_ID_HEADER = "X-Request-ID"


async def log_requests(request: Request, call_next):
    request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:12]
    start_time = time.perf_counter()
    logger.info(f"[{request_id}] {request.method} {request.url.path} started")

    response = await call_next(request)

    duration = time.perf_counter() - start_time
    logger.info(
        f"[{request_id}] {request.method} {request.url.path} "
        f"-> {response.status_code} in {duration:.3f}s"
    )
    response.headers[REQUEST_ID_HEADER] = request_id
    return response
