"""Request correlation and request/response logging for HTTP entry points."""
import time
from functools import wraps
from typing import Callable

from flask import Request

from .observability import get_correlation_id


def with_correlation(logger):
    """Decorator that tags a request with a correlation ID and logs its lifecycle.

    The wrapped handler must return a ``(body, status)`` or
    ``(body, status, headers)`` tuple. The correlation ID is echoed back in
    the ``X-Correlation-ID`` response header.

    Usage:
        @with_correlation(logger)
        def handler(request: Request):
            # request.correlation_id is available here
            ...
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(request: Request, *args, **kwargs):
            correlation_id = get_correlation_id(request)
            request.correlation_id = correlation_id
            start_time = time.time()

            logger.info(
                "Request started",
                correlation_id=correlation_id,
                method=request.method,
                path=request.path,
                user_agent=request.headers.get('User-Agent', '')
            )

            try:
                result = func(request, *args, **kwargs)
            except Exception as e:
                logger.error(
                    "Request failed",
                    error=e,
                    correlation_id=correlation_id,
                    method=request.method,
                    path=request.path,
                    duration_ms=round((time.time() - start_time) * 1000, 2)
                )
                raise

            body, status = result[0], result[1]
            headers = dict(result[2]) if len(result) > 2 else {}
            headers['X-Correlation-ID'] = correlation_id

            logger.info(
                "Request completed",
                correlation_id=correlation_id,
                method=request.method,
                path=request.path,
                status_code=status,
                duration_ms=round((time.time() - start_time) * 1000, 2)
            )
            return body, status, headers

        return wrapper
    return decorator
