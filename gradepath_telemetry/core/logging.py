"""Logging for the telemetry client.

Provides the package-wide ``logger`` and ``ContextualLogger``, a
``LoggerAdapter`` that carries key/value dimensions (user_id, session_id,
component, ...) into every record.

Usage:
    from gradepath_telemetry.core.logging import logger

    service_logger = logger.with_context(session_id=session_id)
    service_logger.info("Initialized")
"""

import json
import logging
import sys
from typing import Any, Dict, MutableMapping, Optional, Tuple

from gradepath_telemetry.core.config import Environment, settings

ROOT_LOGGER_NAME = "gradepath_telemetry"


class ContextualLogger(logging.LoggerAdapter):
    """Logger adapter that attaches dimensions and an optional message prefix."""

    def __init__(
        self,
        logger: logging.Logger,
        dimensions: Optional[Dict[str, Any]] = None,
        prefix: str = "",
    ) -> None:
        """Wrap a stdlib logger with fixed dimensions."""
        super().__init__(logger, dict(dimensions or {}))
        self.dimensions: Dict[str, Any] = dict(dimensions or {})
        self.prefix = prefix

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> Tuple[Any, MutableMapping[str, Any]]:
        extra = dict(kwargs.get("extra") or {})
        extra["dimensions"] = {**self.dimensions, **extra.get("dimensions", {})}
        kwargs["extra"] = extra
        return f"{self.prefix}{msg}", kwargs

    def with_context(self, **dimensions: Any) -> "ContextualLogger":
        """Return a new logger with extra dimensions merged in."""
        merged = {**self.dimensions, **{k: v for k, v in dimensions.items() if v is not None}}
        return ContextualLogger(self.logger, merged, self.prefix)

    def with_prefix(self, prefix: str) -> "ContextualLogger":
        """Return a new logger that prepends ``prefix`` to every message."""
        return ContextualLogger(self.logger, self.dimensions, prefix)


class _DimensionFormatter(logging.Formatter):
    """Plain-text formatter that appends dimensions as ``key=value`` pairs."""

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        dimensions = getattr(record, "dimensions", None)
        if not dimensions:
            return base
        rendered = " ".join(f"{k}={v}" for k, v in dimensions.items())
        return f"{base} [{rendered}]"


class _JsonFormatter(logging.Formatter):
    """One JSON object per line, dimensions flattened into the top level."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(getattr(record, "dimensions", None) or {})
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class LoggerConfigurator:
    """Configures the package logger once and hands out contextual loggers."""

    _configured = False

    @classmethod
    def _configure_root(cls) -> None:
        if cls._configured:
            return

        root = logging.getLogger(ROOT_LOGGER_NAME)
        root.setLevel(settings.LOG_LEVEL.upper())

        handler = logging.StreamHandler(sys.stderr)
        if settings.LOG_JSON or settings.ENVIRONMENT in (Environment.DEV, Environment.PRD):
            handler.setFormatter(_JsonFormatter())
        else:
            handler.setFormatter(
                _DimensionFormatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
            )
        root.addHandler(handler)
        root.propagate = False
        cls._configured = True

    @classmethod
    def configure_logger(
        cls, name: str, dimensions: Optional[Dict[str, Any]] = None
    ) -> ContextualLogger:
        """Return a ContextualLogger for ``name`` with the given dimensions.

        Args:
            name: Logger name, normally under ``gradepath_telemetry``.
            dimensions: Key/value pairs attached to every record.

        Returns:
            ContextualLogger bound to the named stdlib logger.
        """
        cls._configure_root()
        return ContextualLogger(logging.getLogger(name), dimensions)


logger = LoggerConfigurator.configure_logger(ROOT_LOGGER_NAME)
