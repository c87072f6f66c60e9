"""Event queue and delivery engine.

``TelemetryService`` accepts tracking calls, keeps an at-least-once queue of
pending events mirrored into a ``KeyValueStore``, and flushes it to an
``IngestClient`` on a timer or when the queue reaches ``batch_size``.

Telemetry is best-effort: no tracking call raises into the host application.
Storage failures degrade durability only, delivery failures put the event
back on the queue for the next flush, and calls made while disabled or before
``initialize()`` are ignored.

Usage:
    service = TelemetryService(storage, platform, ingest, TelemetryConfig())
    async with service:
        await service.track("button_press", {"button": "save"})
"""

import asyncio
import json
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from pydantic import ValidationError
from pydantic_core import PydanticSerializationError

from gradepath_telemetry.core.config import TelemetryConfig
from gradepath_telemetry.core.events import (
    SCREEN_VIEW,
    SCREEN_VIEW_END,
    PerformanceMetric,
    ScreenViewEvent,
    TelemetryEvent,
    now_ms,
)
from gradepath_telemetry.core.exceptions import IngestError, IngestUnavailableError
from gradepath_telemetry.core.flush_scheduler import FlushScheduler
from gradepath_telemetry.core.logging import LoggerConfigurator
from gradepath_telemetry.core.protocols import IngestClient, KeyValueStore, PlatformInfo
from gradepath_telemetry.core.session import QUEUE_KEY, SessionBootstrap, SessionIdentity, new_id

UNKNOWN_ID = "unknown"


class ServiceState(str, Enum):
    """Lifecycle of a TelemetryService instance."""

    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    DESTROYED = "destroyed"


class _Outcome(Enum):
    DELIVERED = "delivered"
    REQUEUE = "requeue"
    DROP = "drop"


@dataclass
class _PendingEvent:
    """Queue entry. ``attempts`` counts failed sends in this process only."""

    event: TelemetryEvent
    attempts: int = 0


class TelemetryService:
    """Buffers, persists and delivers telemetry events.

    Args:
        storage: Durable key-value store for the user id and pending queue.
        platform: Reports platform id and app version for every event.
        ingest: Transport to the ingest endpoint.
        config: Immutable service configuration.
        clock: Returns the current time in epoch milliseconds.
        id_factory: Generates user and session ids.
        owns_ingest: Close ``ingest`` when the service is destroyed.
    """

    def __init__(
        self,
        storage: KeyValueStore,
        platform: PlatformInfo,
        ingest: IngestClient,
        config: Optional[TelemetryConfig] = None,
        *,
        clock: Callable[[], int] = now_ms,
        id_factory: Callable[[], str] = new_id,
        owns_ingest: bool = False,
    ) -> None:
        self._storage = storage
        self._platform = platform
        self._ingest = ingest
        self._config = config or TelemetryConfig()
        self._clock = clock
        self._id_factory = id_factory
        self._owns_ingest = owns_ingest

        self._state = ServiceState.UNINITIALIZED
        self._identity: Optional[SessionIdentity] = None
        self._queue: List[_PendingEvent] = []
        self._queue_lock = asyncio.Lock()
        self._flush_lock = asyncio.Lock()
        self._screen_starts: Dict[str, int] = {}
        self._scheduler = FlushScheduler(self.flush, self._config.flush_interval_seconds)
        self._logger = LoggerConfigurator.configure_logger(
            __name__, dimensions={"component": "telemetry"}
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def initialize(self) -> None:
        """Load identity and pending queue, then start periodic flushing.

        Idempotent: a second call while initializing or ready does nothing.
        """
        if self._state in (ServiceState.INITIALIZING, ServiceState.READY):
            return

        self._state = ServiceState.INITIALIZING

        if not self._config.enabled:
            self._logger.info("Telemetry disabled")
            self._state = ServiceState.READY
            return

        try:
            bootstrap = SessionBootstrap(self._storage, self._id_factory, self._logger)
            identity = await bootstrap.bootstrap()
            restored = await self._load_queue()
        except Exception as e:
            self._logger.error(f"Telemetry initialization failed: {e}", exc_info=True)
            self._state = ServiceState.UNINITIALIZED
            return

        self._identity = identity
        self._screen_starts.clear()
        if restored is not None:
            async with self._queue_lock:
                self._queue = restored

        self._logger = self._logger.with_context(
            user_id=identity.user_id, session_id=identity.session_id
        )
        await self._scheduler.start()
        self._state = ServiceState.READY

        self._logger.info(
            f"Initialized (platform={self._platform.platform_id().value}, "
            f"app_version={self._platform.app_version()}, pending={len(self._queue)})"
        )

    async def destroy(self) -> None:
        """Stop the timer, attempt one final flush, and release resources.

        The final flush is bounded by ``destroy_flush_timeout_ms``; events it
        could not deliver stay queued and persisted. Safe to call repeatedly.
        """
        if self._state == ServiceState.DESTROYED:
            return

        await self._scheduler.stop()

        timeout = self._config.destroy_flush_timeout_ms / 1000
        try:
            await asyncio.wait_for(self.flush(), timeout=timeout)
        except asyncio.TimeoutError:
            self._logger.warning(
                f"Final flush did not finish within {self._config.destroy_flush_timeout_ms}ms, "
                f"{len(self._queue)} events remain queued"
            )

        if self._owns_ingest:
            try:
                await self._ingest.close()
            except Exception as e:
                self._logger.warning(f"Failed to close ingest client: {e}")

        self._screen_starts.clear()
        self._state = ServiceState.DESTROYED
        self._logger.info("Destroyed")

    async def __aenter__(self) -> "TelemetryService":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.destroy()

    # ------------------------------------------------------------------
    # Tracking API
    # ------------------------------------------------------------------

    async def track(
        self,
        event_type: str,
        metadata: Optional[Dict] = None,
        screen_name: Optional[str] = None,
    ) -> None:
        """Queue an event and persist the queue.

        Triggers an immediate flush once the queue holds ``batch_size``
        events. Ignored while disabled or not initialized.
        """
        if not self._accepting():
            return

        try:
            event = TelemetryEvent(
                event_type=event_type,
                user_id=self._identity.user_id,
                session_id=self._identity.session_id,
                screen_name=screen_name,
                metadata=metadata,
                timestamp=self._clock(),
                platform=self._platform.platform_id().value,
                app_version=self._platform.app_version(),
            )
            event.to_wire()
        except (ValidationError, PydanticSerializationError) as e:
            self._logger.warning(f"Discarding invalid event '{event_type}': {e}")
            return

        async with self._queue_lock:
            self._queue.append(_PendingEvent(event))
            self._enforce_capacity()
            await self._persist_queue()
            should_flush = len(self._queue) >= self._config.batch_size

        if should_flush:
            await self.flush()

    async def track_screen_view(self, screen_name: str, properties: Optional[Dict] = None) -> None:
        """Record when ``screen_name`` was opened and emit ``screen_view``."""
        if not self._accepting():
            return

        self._screen_starts[screen_name] = self._clock()
        metadata = {"screenName": screen_name, **(properties or {})}
        await self.track(SCREEN_VIEW, metadata, screen_name)

    async def track_screen_end(self, screen_name: str) -> None:
        """Emit ``screen_view_end`` with the time spent on ``screen_name``.

        Does nothing when no matching ``track_screen_view`` call is open.
        """
        start = self._screen_starts.pop(screen_name, None)
        if start is None:
            return

        duration = max(0, self._clock() - start)
        await self.track(
            SCREEN_VIEW_END, {"screenName": screen_name, "duration": duration}, screen_name
        )

    async def track_performance(
        self,
        metric_name: str,
        value: float,
        unit: str = "ms",
        context: Optional[Dict] = None,
    ) -> None:
        """Send a performance metric immediately, bypassing the queue.

        Failures are logged and swallowed; the metric is not retried.
        """
        if not self._config.enabled:
            return

        try:
            metric = PerformanceMetric(
                metric_name=metric_name,
                user_id=self._identity.user_id if self._identity else UNKNOWN_ID,
                session_id=self._identity.session_id if self._identity else UNKNOWN_ID,
                value=value,
                unit=unit,
                context=context,
                timestamp=self._clock(),
            )
            await self._ingest.send_performance(metric)
        except (IngestError, ValidationError) as e:
            self._logger.warning(f"Failed to send performance metric '{metric_name}': {e}")
            return
        except Exception as e:
            self._logger.error(f"Failed to send performance metric '{metric_name}': {e}")
            return

        self._logger.debug(f"Performance metric sent: {metric_name}")

    # ------------------------------------------------------------------
    # Delivery
    # ------------------------------------------------------------------

    async def flush(self) -> None:
        """Deliver every pending event.

        The queue is swapped out and persisted empty before sending. Events
        that fail go back to the front of the queue in their original order
        and the queue is persisted again. Never raises delivery errors.
        """
        async with self._flush_lock:
            batch = await self._take_batch()
            if not batch:
                return

            self._logger.debug(f"Flushing {len(batch)} events")
            semaphore = asyncio.Semaphore(self._config.max_concurrent_sends)

            async def deliver_with_limit(pending: _PendingEvent) -> _Outcome:
                async with semaphore:
                    return await self._deliver(pending)

            try:
                outcomes = await asyncio.gather(*[deliver_with_limit(p) for p in batch])
            except asyncio.CancelledError:
                self._logger.warning(f"Flush cancelled, returning {len(batch)} events to the queue")
                await self._requeue(batch)
                raise

            retry = [p for p, outcome in zip(batch, outcomes) if outcome is _Outcome.REQUEUE]
            delivered = sum(1 for outcome in outcomes if outcome is _Outcome.DELIVERED)
            await self._requeue(retry)

            if retry:
                self._logger.warning(
                    f"Flushed {delivered}/{len(batch)} events, {len(retry)} re-queued"
                )
            else:
                self._logger.debug(f"Flushed {delivered}/{len(batch)} events")

    async def _deliver(self, pending: _PendingEvent) -> _Outcome:
        event = pending.event
        try:
            if event.is_screen_view:
                await self._ingest.send_screen_view(ScreenViewEvent.from_event(event))
            else:
                await self._ingest.send_event(event)
        except ValidationError as e:
            # No retry can make this record valid
            self._logger.error(f"Dropping undeliverable event '{event.event_type}': {e}")
            return _Outcome.DROP
        except IngestError as e:
            return self._on_failure(pending, e)
        except Exception as e:
            self._logger.error(f"Unexpected error sending '{event.event_type}': {e}")
            return self._on_failure(pending, IngestUnavailableError(str(e)))

        self._logger.debug(f"Event sent: {event.event_type}")
        return _Outcome.DELIVERED

    def _on_failure(self, pending: _PendingEvent, error: IngestError) -> _Outcome:
        pending.attempts += 1
        event_type = pending.event.event_type

        if not error.retryable and self._config.drop_rejected_events:
            self._logger.warning(f"Dropping event '{event_type}' rejected by ingest: {error}")
            return _Outcome.DROP

        max_attempts = self._config.max_delivery_attempts
        if max_attempts is not None and pending.attempts >= max_attempts:
            self._logger.warning(
                f"Dropping event '{event_type}' after {pending.attempts} failed attempts: {error}"
            )
            return _Outcome.DROP

        self._logger.warning(f"Failed to send event '{event_type}', will retry: {error}")
        return _Outcome.REQUEUE

    # ------------------------------------------------------------------
    # Queue and persistence
    # ------------------------------------------------------------------

    async def _take_batch(self) -> List[_PendingEvent]:
        async with self._queue_lock:
            if not self._queue:
                return []
            batch, self._queue = self._queue, []
            try:
                await self._persist_queue()
            except asyncio.CancelledError:
                self._queue = batch + self._queue
                raise
            return batch

    async def _requeue(self, items: List[_PendingEvent]) -> None:
        async with self._queue_lock:
            self._queue = list(items) + self._queue
            self._enforce_capacity()
            await self._persist_queue()

    def _enforce_capacity(self) -> None:
        """Drop the oldest entries beyond ``max_queue_size``. Caller holds the lock."""
        limit = self._config.max_queue_size
        if limit is None or len(self._queue) <= limit:
            return

        overflow = len(self._queue) - limit
        del self._queue[:overflow]
        self._logger.warning(f"Queue exceeded {limit} events, dropped {overflow} oldest")

    async def _persist_queue(self) -> None:
        """Mirror the queue into storage. Caller holds the lock."""
        try:
            payload = json.dumps([p.event.to_wire() for p in self._queue])
            await self._storage.set(QUEUE_KEY, payload)
        except Exception as e:
            self._logger.warning(f"Failed to persist queue: {e}")

    async def _load_queue(self) -> Optional[List[_PendingEvent]]:
        """Read the persisted queue. None means storage could not be read."""
        try:
            raw = await self._storage.get(QUEUE_KEY)
        except Exception as e:
            self._logger.warning(f"Failed to load persisted queue: {e}")
            return None

        if not raw:
            return []

        try:
            items = json.loads(raw)
        except json.JSONDecodeError as e:
            self._logger.error(f"Failed to parse persisted queue: {e}")
            return []

        if not isinstance(items, list):
            self._logger.error("Persisted queue is not a list, ignoring it")
            return []

        restored: List[_PendingEvent] = []
        for item in items:
            try:
                restored.append(_PendingEvent(TelemetryEvent.model_validate(item)))
            except ValidationError as e:
                self._logger.warning(f"Skipping malformed persisted event: {e}")

        if restored:
            self._logger.info(f"Restored {len(restored)} pending events from storage")
        return restored

    def _accepting(self) -> bool:
        if not self._config.enabled:
            return False
        if self._state is not ServiceState.READY or self._identity is None:
            self._logger.debug("Tracking call ignored, telemetry not initialized")
            return False
        return True

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def config(self) -> TelemetryConfig:
        """The immutable configuration this service was built with."""
        return self._config

    @property
    def state(self) -> ServiceState:
        """Current lifecycle state."""
        return self._state

    def is_initialized(self) -> bool:
        """True once ``initialize()`` completed and until ``destroy()``."""
        return self._state is ServiceState.READY

    def get_user_id(self) -> Optional[str]:
        """Durable user id, or None before initialization."""
        return self._identity.user_id if self._identity else None

    def get_session_id(self) -> Optional[str]:
        """Id of the current run, or None before initialization."""
        return self._identity.session_id if self._identity else None

    def pending_events(self) -> Tuple[TelemetryEvent, ...]:
        """Snapshot of queued events in delivery order."""
        return tuple(p.event for p in self._queue)
