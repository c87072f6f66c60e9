"""HTTP ingest client.

Posts each record as JSON to ``{api_endpoint}/event``,
``{api_endpoint}/screen-view`` or ``{api_endpoint}/performance``. Any 2xx
is a successful delivery. Transient transport errors (timeouts, refused
connections) are retried a few times inside one send; everything else is
reported to the caller as an ``IngestError`` subclass.
"""

import logging
from typing import Any, Dict, Optional

import httpx
from tenacity import AsyncRetrying, retry_if_exception, stop_after_attempt, wait_exponential

from gradepath_telemetry.core.events import PerformanceMetric, ScreenViewEvent, TelemetryEvent
from gradepath_telemetry.core.exceptions import (
    IngestError,
    IngestRejectedError,
    IngestUnavailableError,
)

logger = logging.getLogger(__name__)

EVENT_PATH = "/event"
SCREEN_VIEW_PATH = "/screen-view"
PERFORMANCE_PATH = "/performance"

# 4xx responses that still mean "try again later"
_RETRYABLE_CLIENT_STATUSES = {408, 429}


def should_retry_on_transport_error(exception: BaseException) -> bool:
    """Check if exception is a timeout or connection error worth retrying immediately.

    Args:
        exception: Exception to check

    Returns:
        True if this is a timeout or transient connection exception
    """
    return isinstance(
        exception,
        (
            httpx.ConnectTimeout,
            httpx.ReadTimeout,
            httpx.WriteTimeout,
            httpx.PoolTimeout,
            httpx.ConnectError,
        ),
    )


def error_for_status(status_code: int, message: str) -> IngestError:
    """Map a non-2xx status onto the retryable/non-retryable error split."""
    if 400 <= status_code < 500 and status_code not in _RETRYABLE_CLIENT_STATUSES:
        return IngestRejectedError(message, status_code=status_code)
    return IngestUnavailableError(message, status_code=status_code)


class HttpIngestClient:
    """httpx implementation of the IngestClient protocol.

    The underlying ``httpx.AsyncClient`` is created lazily and recreated
    after ``close()``, so a service can be destroyed and initialized again.
    """

    def __init__(
        self,
        api_endpoint: str,
        timeout: float = 10.0,
        retry_attempts: int = 3,
        headers: Optional[Dict[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """Initialize the client.

        Args:
            api_endpoint: Base URL, e.g. ``https://api.example.com/telemetry``
            timeout: Per-request timeout in seconds
            retry_attempts: Attempts per send on transient transport errors
            headers: Extra headers sent with every request (auth tokens etc.)
            transport: Custom transport, mainly ``httpx.MockTransport`` in tests
        """
        self.base_url = api_endpoint.rstrip("/")
        self._timeout = timeout
        self._retry_attempts = retry_attempts
        self._headers = {"Content-Type": "application/json", **(headers or {})}
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self._timeout),
                headers=self._headers,
                transport=self._transport,
            )
        return self._client

    async def send_event(self, event: TelemetryEvent) -> None:
        """POST a generic event."""
        await self._post(EVENT_PATH, event.to_wire())

    async def send_screen_view(self, screen_view: ScreenViewEvent) -> None:
        """POST a screen-view record."""
        await self._post(SCREEN_VIEW_PATH, screen_view.to_wire())

    async def send_performance(self, metric: PerformanceMetric) -> None:
        """POST a performance metric."""
        await self._post(PERFORMANCE_PATH, metric.to_wire())

    async def close(self) -> None:
        """Close the underlying HTTP client if one is open."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _post(self, path: str, payload: Dict[str, Any]) -> None:
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self._retry_attempts),
                retry=retry_if_exception(should_retry_on_transport_error),
                wait=wait_exponential(multiplier=0.2, max=2),
                reraise=True,
            ):
                with attempt:
                    response = await self._get_client().post(path, json=payload)
        except httpx.HTTPError as e:
            raise IngestUnavailableError(f"POST {path} failed: {e!r}")

        if response.is_success:
            return

        logger.debug(f"POST {path} returned HTTP {response.status_code}: {response.text[:200]}")
        raise error_for_status(
            response.status_code, f"POST {path} returned HTTP {response.status_code}"
        )
