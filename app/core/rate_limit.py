"""
Simple in-memory rate limiter for API endpoints.

Counts are per client IP and per limiter name, kept in process memory. Each
worker keeps its own counts.
"""
import logging
import time
from collections import defaultdict
from typing import Dict, List, Tuple
from fastapi import Request, HTTPException, status

logger = logging.getLogger(__name__)

# {(limiter name, ip): [request timestamps]}
rate_limit_store: Dict[Tuple[str, str], List[float]] = defaultdict(list)


def get_client_ip(request: Request) -> str:
    """Extract client IP address from request."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        # First hop is the original client
        return forwarded.split(",")[0].strip()

    if request.client:
        return request.client.host

    return "unknown"


class RateLimiter:
    """
    FastAPI dependency enforcing a sliding-window request limit.

    Usage:
        @router.post("/signin", dependencies=[Depends(RateLimiter("auth", 20, 60))])
    """

    def __init__(self, name: str, max_requests: int = 10, window_seconds: int = 60):
        self.name = name
        self.max_requests = max_requests
        self.window_seconds = window_seconds

    def __call__(self, request: Request) -> None:
        ip = get_client_ip(request)
        key = (self.name, ip)
        now = time.time()

        cutoff = now - self.window_seconds
        rate_limit_store[key] = [timestamp for timestamp in rate_limit_store[key] if timestamp > cutoff]

        request_count = len(rate_limit_store[key])
        if request_count >= self.max_requests:
            logger.warning(
                f"Rate limit '{self.name}' exceeded for IP: {ip} "
                f"({request_count} requests in {self.window_seconds}s)"
            )
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail=f"Rate limit exceeded. Maximum {self.max_requests} requests per {self.window_seconds} seconds."
            )

        rate_limit_store[key].append(now)


auth_rate_limit = RateLimiter("auth", max_requests=20, window_seconds=60)
llm_rate_limit = RateLimiter("llm", max_requests=30, window_seconds=60)
