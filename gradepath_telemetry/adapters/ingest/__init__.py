"""Ingest client adapters."""

from gradepath_telemetry.adapters.ingest.fake import FakeIngestClient, SentRecord
from gradepath_telemetry.adapters.ingest.http import HttpIngestClient

__all__ = ["HttpIngestClient", "FakeIngestClient", "SentRecord"]
