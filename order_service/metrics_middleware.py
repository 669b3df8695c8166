"""
Metrics middleware for FastAPI applications.

Automatically tracks HTTP request metrics for all endpoints.
"""

import time
from typing import Callable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware


class PrometheusMiddleware(BaseHTTPMiddleware):
    """
    Track request count and duration for every HTTP request.

    Endpoints are labelled with the matched route template
    (`/orders/{order_id}`) rather than the raw path, so ids do not
    create one label per record.
    """

    def __init__(self, app, track_func: Callable):
        """
        Initialize the middleware.

        Args:
            app: FastAPI application
            track_func: Called with method, endpoint, status_code and duration
        """
        super().__init__(app)
        self.track_func = track_func

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        # Unhandled exceptions propagate past this middleware and become 500s
        status_code = 500

        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            duration = time.time() - start_time
            route = request.scope.get("route")
            endpoint = getattr(route, "path", request.url.path)

            self.track_func(
                method=request.method,
                endpoint=endpoint,
                status_code=status_code,
                duration=duration,
            )
