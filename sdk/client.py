"""
Enhancement backend: Python client

Purpose:
- Thin wrapper around GET /api/health and POST /api/enhance.
- Separates transport failures (raise TransportError) from application
  errors the backend explains with a JSON {"error": ...} body (raise
  UpstreamError / ValidationError with the backend's message).

Dependencies:
- requests

Typical usage:
    from sdk.client import BackendClient
    c = BackendClient(base_url="http://localhost:3000")
    if c.health().get("aiEnabled"):
        r = c.enhance({"content": "...", "tone": "friendly", "targetWords": 50, "inputType": "email"})
        print(r["enhancedContent"])
"""

from __future__ import annotations
import logging
import time
from typing import Any, Dict, Optional

import requests

from service.errors import (
    BackendUnavailableError,
    TransportError,
    UpstreamError,
    ValidationError,
)

log = logging.getLogger("Backend")


class BackendClient:
    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        """
        :param base_url: Server root (e.g., https://makeitshorter.example.com)
        :param timeout: Request timeout in seconds; a timeout is a transport failure
        :param session: Optional preconfigured requests.Session
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()

    # -------- Liveness --------
    def health(self) -> Dict[str, Any]:
        """
        Returns { status, timestamp, aiEnabled }.
        Raises TransportError if the backend is unreachable or unhealthy.
        """
        url = f"{self.base_url}/api/health"
        try:
            resp = self._session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise TransportError(f"Health check failed: {e}") from e
        if not resp.ok:
            raise TransportError(f"Health check failed: HTTP {resp.status_code}")
        return self._json(resp)

    # -------- Enhancement --------
    def enhance(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        POST the enhancement payload and return { enhancedContent, wordCount }.
        """
        url = f"{self.base_url}/api/enhance"
        t0 = time.time()
        try:
            resp = self._session.post(url, json=payload, headers=self._headers(), timeout=self.timeout)
        except requests.RequestException as e:
            raise TransportError(f"Enhance request failed: {e}") from e

        if not resp.ok:
            self._raise_for_error(resp)

        out = self._json(resp)
        if not isinstance(out.get("enhancedContent"), str) or not out["enhancedContent"].strip():
            raise TransportError("Malformed response: missing enhancedContent")
        out["_latency_ms"] = round((time.time() - t0) * 1000, 2)
        return out

    # -------- Helpers --------
    @staticmethod
    def _headers() -> Dict[str, str]:
        return {"Content-Type": "application/json"}

    @staticmethod
    def _json(resp: requests.Response) -> Dict[str, Any]:
        try:
            data = resp.json()
        except ValueError as e:
            raise TransportError("Malformed response from server") from e
        if not isinstance(data, dict):
            raise TransportError("Malformed response from server")
        return data

    @staticmethod
    def _raise_for_error(resp: requests.Response) -> None:
        status = resp.status_code
        try:
            message = (resp.json() or {}).get("error")
        except (ValueError, AttributeError):
            message = None

        if status == 503:
            raise BackendUnavailableError(message or "AI enhancement is currently unavailable")
        if not message:
            # nothing the user can act on: treat as a transport failure
            raise TransportError(f"Server error (HTTP {status})", status=status)

        log.warning("backend rejected enhance: HTTP %s %s", status, message)
        if status == 400:
            raise ValidationError(message)
        raise UpstreamError(message, status=status)
