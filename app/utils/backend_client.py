"""
Backend HTTP Client
Client for forwarding requests from the edge to the backend service

Every call resolves to a BackendCallOutcome; transport failures, timeouts
and non-2xx responses are returned, never raised.
"""

import asyncio
import time
import httpx
import structlog
from opentelemetry.propagate import inject
from typing import Optional

from app.models.outcomes import (
    BackendCallOutcome,
    BackendConfig,
    BackendError,
    Success,
    Timeout,
    TransportError,
)
from app.utils.observability import ObservabilitySink

logger = structlog.get_logger(__name__)


class BackendClient:
    """
    HTTP client for backend operations.

    Lifecycle:
        - Call start() during app startup (FastAPI lifespan)
        - Call stop() during app shutdown
        - If not started, falls back to a per-call client
    """

    # Connection pool settings (per worker)
    MAX_CONNECTIONS = 100
    MAX_KEEPALIVE = 20
    KEEPALIVE_EXPIRY = 5.0

    def __init__(
        self,
        config: BackendConfig,
        sink: Optional[ObservabilitySink] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config
        self.sink = sink
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def base_url(self) -> str:
        return self.config.base_url

    async def start(self):
        """Initialize the shared HTTP client"""
        if self._client is not None:
            logger.warning("BackendClient already started")
            return

        limits = httpx.Limits(
            max_connections=self.MAX_CONNECTIONS,
            max_keepalive_connections=self.MAX_KEEPALIVE,
            keepalive_expiry=self.KEEPALIVE_EXPIRY
        )
        self._client = httpx.AsyncClient(limits=limits, transport=self._transport)
        logger.info("BackendClient started", base_url=self.base_url, max_connections=self.MAX_CONNECTIONS)

    async def stop(self):
        """Close the HTTP client and release resources"""
        if self._client:
            await self._client.aclose()
            self._client = None
            logger.info("BackendClient stopped")

    def _build_url(self, path: str) -> str:
        if not path.startswith("/") or "://" in path:
            raise ValueError(f"Backend path must be relative and start with '/': {path!r}")
        return f"{self.base_url}{path}"

    async def call(
        self,
        method: str,
        path: str,
        body: Optional[bytes] = None,
        timeout_ms: Optional[int] = None,
    ) -> BackendCallOutcome:
        """
        Issue one call to the backend.

        Args:
            method: HTTP method
            path: Path relative to the backend base URL, e.g. "/api/users"
            body: Raw JSON bytes to send, if any
            timeout_ms: Total deadline for the call; defaults to the configured one

        Returns:
            The classified outcome of the call
        """
        if timeout_ms is None:
            timeout_ms = self.config.default_timeout_ms
        if isinstance(timeout_ms, bool) or not isinstance(timeout_ms, int) or timeout_ms <= 0:
            raise ValueError(f"timeout_ms must be a positive integer, got {timeout_ms!r}")

        url = self._build_url(path)
        headers = {}
        kwargs = {"timeout": httpx.Timeout(timeout_ms / 1000), "headers": headers}
        if body is not None:
            kwargs["content"] = body
            headers["Content-Type"] = "application/json"

        start = time.perf_counter()
        if self.sink is not None:
            with self.sink.backend_span(method, url) as span:
                # W3C trace context for the backend's server span
                inject(headers)
                outcome = await self._send(method, url, timeout_ms, kwargs)
                span.set_attribute("backend.outcome", outcome.kind)
            self.sink.record_backend_call(method, path, outcome, (time.perf_counter() - start) * 1000)
        else:
            outcome = await self._send(method, url, timeout_ms, kwargs)
        return outcome

    async def _send(self, method: str, url: str, timeout_ms: int, kwargs: dict) -> BackendCallOutcome:
        deadline = timeout_ms / 1000
        try:
            if self._client:
                response = await asyncio.wait_for(
                    self._client.request(method, url, **kwargs), timeout=deadline
                )
            else:
                async with httpx.AsyncClient(transport=self._transport) as client:
                    response = await asyncio.wait_for(
                        client.request(method, url, **kwargs), timeout=deadline
                    )
        except (asyncio.TimeoutError, httpx.TimeoutException):
            return Timeout(timeout_ms=timeout_ms)
        except (httpx.RequestError, httpx.InvalidURL) as e:
            return TransportError(message=str(e) or type(e).__name__)

        if 200 <= response.status_code <= 299:
            return Success(status_code=response.status_code, body=response.content)
        return BackendError(status_code=response.status_code, body=response.content)
