import time
import uuid
import logging
import hashlib
from typing import Dict, Optional
from collections import defaultdict, deque
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

logger = logging.getLogger(__name__)

MAX_BODY_SIZE = 10 * 1024 * 1024  # 10MB

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Content-Security-Policy": "default-src 'self'; img-src 'self' data: https:; frame-ancestors 'none';",
    "Server": "TournamentRegistration",
}

# Idle client windows are dropped every PRUNE_EVERY requests
PRUNE_EVERY = 1000

# Per path prefix, first match wins
DEFAULT_RATE_LIMITS = {
    "/auth/login": {"calls": 5, "period": 300},
    "/auth/refresh": {"calls": 10, "period": 60},
    # Registration pages load many athlete pictures at once
    "/api/v1/images": {"calls": 300, "period": 60},
}


class LoggingMiddleware(BaseHTTPMiddleware):
    """One log line per request and per response, tagged with a request id."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:12]
        started = time.perf_counter()
        logger.info(f"[{request_id}] {request.method} {request.url.path}")

        response = await call_next(request)

        elapsed = time.perf_counter() - started
        logger.info(f"[{request_id}] {response.status_code} {request.method} {request.url.path} in {elapsed:.3f}s")
        response.headers["X-Process-Time"] = f"{elapsed:.6f}"
        response.headers["X-Request-ID"] = request_id
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers.update(SECURITY_HEADERS)
        # The frontend embeds proxied pictures from its own origin
        if request.url.path.startswith("/api/v1/images/fig/"):
            response.headers["Cross-Origin-Resource-Policy"] = "cross-origin"
        return response


class AdvancedRateLimitMiddleware(BaseHTTPMiddleware):
    """
    Sliding window rate limiting.

    Clients are identified by IP and User-Agent. Every path prefix in
    ``limits`` has its own window; other paths share the default one.
    """

    def __init__(self, app, default_calls: int = 100, default_period: int = 60, limits: Optional[Dict] = None):
        super().__init__(app)
        self.default_calls = default_calls
        self.default_period = default_period
        self.limits = DEFAULT_RATE_LIMITS if limits is None else limits
        self.windows: Dict[str, deque] = defaultdict(deque)
        self.longest_period = max([default_period] + [limit["period"] for limit in self.limits.values()])
        self._requests_since_prune = 0

    def prune(self, now: float) -> int:
        """Forget clients whose latest request is older than every window."""
        idle = [key for key, window in self.windows.items() if not window or now - window[-1] > self.longest_period]
        for key in idle:
            del self.windows[key]
        return len(idle)

    def _limit_for(self, path: str) -> Dict:
        for prefix, limit in self.limits.items():
            if path.startswith(prefix):
                return {"bucket": prefix, **limit}
        return {"bucket": "default", "calls": self.default_calls, "period": self.default_period}

    def _window_key(self, request: Request, bucket: str) -> str:
        ip = request.client.host if request.client else "unknown"
        fingerprint = f"{ip}:{request.headers.get('user-agent', '')}:{bucket}"
        return hashlib.sha256(fingerprint.encode()).hexdigest()[:16]

    async def dispatch(self, request: Request, call_next):
        if request.url.path == "/health":
            return await call_next(request)

        now = time.time()
        self._requests_since_prune += 1
        if self._requests_since_prune >= PRUNE_EVERY:
            self._requests_since_prune = 0
            self.prune(now)

        limit = self._limit_for(request.url.path)
        key = self._window_key(request, limit["bucket"])
        window = self.windows[key]

        while window and now - window[0] > limit["period"]:
            window.popleft()

        if len(window) >= limit["calls"]:
            retry_after = max(1, int(limit["period"] - (now - window[0])))
            logger.warning(f"Rate limit hit by {key} on {request.url.path} ({limit['calls']}/{limit['period']}s)")
            return JSONResponse(
                status_code=429,
                content={"detail": "Rate limit exceeded", "code": "RATE_LIMIT_ERROR"},
                headers={"Retry-After": str(retry_after)},
            )

        window.append(now)
        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(limit["calls"])
        response.headers["X-RateLimit-Remaining"] = str(max(0, limit["calls"] - len(window)))
        return response


class InputValidationMiddleware(BaseHTTPMiddleware):
    """Reject path traversal and script injection attempts, and oversized bodies."""

    suspicious_patterns = ("<script", "javascript:", "../", "..\\", "etc/passwd")

    async def dispatch(self, request: Request, call_next):
        target = f"{request.url.path}?{request.url.query}".lower()
        match = next((pattern for pattern in self.suspicious_patterns if pattern in target), None)
        if match:
            logger.warning(f"Rejected request containing {match!r}: {request.method} {request.url.path}")
            return JSONResponse(status_code=400, content={"detail": "Invalid request", "code": "VALIDATION_ERROR"})

        if request.method in ("POST", "PUT", "PATCH"):
            declared = request.headers.get("content-length", "")
            if declared.isdigit() and int(declared) > MAX_BODY_SIZE:
                return JSONResponse(
                    status_code=413,
                    content={"detail": "Request entity too large", "code": "PAYLOAD_TOO_LARGE"},
                )

        return await call_next(request)
