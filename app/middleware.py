"""
Middleware installers for Flask.

- Request ID injection
- IP-based rate limiting (simple token bucket)
- CORS for the configured front-end origins (flask-cors)
- Timing log per request
"""

from __future__ import annotations
import logging
import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Dict, Optional

from flask import Flask, g, request, abort
from flask_cors import CORS

from app.config import Settings

log = logging.getLogger("Runtime")


def install_request_id(app: Flask) -> None:
    @app.before_request
    def _req_id():
        g.request_id = request.headers.get("X-Request-ID") or f"req_{uuid.uuid4().hex[:12]}"

    @app.after_request
    def _stamp(response):
        response.headers["X-Request-ID"] = g.get("request_id", "-")
        return response


@dataclass
class _Bucket:
    tokens: float
    last: float


@dataclass
class RateLimiter:
    """
    Per-key token bucket (in-proc, per worker).

    Idle buckets are swept once they would have refilled completely, so the
    map stays bounded by the number of recently active clients.
    """
    capacity: int
    refill_per_sec: float
    sweep_every: float = 60.0
    _buckets: Dict[str, _Bucket] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock)
    _last_sweep: float = field(default_factory=time.time)

    def allow(self, key: str, now: Optional[float] = None) -> bool:
        now = time.time() if now is None else now
        with self._lock:
            if now - self._last_sweep >= self.sweep_every:
                self._sweep(now)
            b = self._buckets.get(key)
            if b is None:
                b = self._buckets[key] = _Bucket(tokens=self.capacity, last=now)
            elapsed = max(0.0, now - b.last)
            b.tokens = min(self.capacity, b.tokens + elapsed * self.refill_per_sec)
            b.last = now
            if b.tokens >= 1.0:
                b.tokens -= 1.0
                return True
            return False

    def __len__(self) -> int:
        return len(self._buckets)

    def _sweep(self, now: float) -> None:
        # a bucket idle this long is full again; dropping it changes nothing
        full_after = self.capacity / self.refill_per_sec if self.refill_per_sec > 0 else float("inf")
        for key in [k for k, b in self._buckets.items() if now - b.last >= full_after]:
            del self._buckets[key]
        self._last_sweep = now


def install_rate_limit(app: Flask, settings: Settings) -> RateLimiter:
    limiter = RateLimiter(
        capacity=settings.RATE_LIMIT_PER_MIN + settings.RATE_LIMIT_BURST,
        refill_per_sec=settings.RATE_LIMIT_PER_MIN / 60.0,
    )
    app.extensions["rate_limiter"] = limiter

    @app.before_request
    def _rl():
        # liveness probes are never limited
        if request.path == "/api/health" or request.method == "OPTIONS":
            return
        ip = request.headers.get("X-Forwarded-For", request.remote_addr) or "unknown"
        if not limiter.allow(ip):
            abort(429)

    return limiter


def install_cors(app: Flask, settings: Settings) -> None:
    CORS(
        app,
        origins=list(settings.CORS_ORIGINS),
        methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
        supports_credentials=False,
    )


def install_timing_log(app: Flask) -> None:
    @app.before_request
    def _start_timer():
        g._t0 = time.time()

    @app.after_request
    def _stop_timer(response):
        t0 = getattr(g, "_t0", None)
        if t0 is not None:
            ms = int((time.time() - t0) * 1000)
            log.info(
                "%s %s -> %s in %dms",
                request.method, request.path, response.status_code, ms,
                extra={"request_id": g.get("request_id", "-")},
            )
        return response
