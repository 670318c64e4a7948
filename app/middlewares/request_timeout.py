# app/middlewares/request_timeout.py
import asyncio

from fastapi import Request, status
from starlette.middleware.base import BaseHTTPMiddleware

from app.platform.logger import get_logger
from app.platform.response import error_response

logger = get_logger(__name__)


class RequestTimeoutMiddleware(BaseHTTPMiddleware):
    """Answers 504 once a request runs past its budget."""

    def __init__(self, app, timeout: float = 120.0, message: str = "Request timed out"):
        super().__init__(app)
        self.timeout = timeout
        self.message = message

    async def dispatch(self, request: Request, call_next):
        try:
            return await asyncio.wait_for(call_next(request), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.error(f"Request to {request.url.path} exceeded {self.timeout:g}s")
            return error_response(
                error=self.message,
                status_code=status.HTTP_504_GATEWAY_TIMEOUT,
            )
