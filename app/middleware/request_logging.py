import time
import logging
from fastapi import Request

logger = logging.getLogger("access")

STORE_HEADER = "X-Shop-Domain"


def _store_name(request: Request) -> str:
    return (
        request.headers.get(STORE_HEADER)
        or request.query_params.get("storeName")
        or "-"
    )


async def request_logging_middleware(request: Request, call_next):
    start_time = time.perf_counter()

    response = await call_next(request)

    process_time = (time.perf_counter() - start_time) * 1000

    logger.info(
        "",
        extra={
            "client_addr": request.client.host if request.client else "unknown",
            "store_name": _store_name(request),
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "process_time_ms": round(process_time, 2),
        },
    )

    return response
