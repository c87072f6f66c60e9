"""Base class for telemetry records.

Every record is a validated, frozen Pydantic model whose JSON form uses
camelCase keys, which is what the ingest endpoint and the persisted queue
expect.
"""

import time
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def now_ms() -> int:
    """Current wall-clock time as integer milliseconds since the epoch."""
    return int(time.time() * 1000)


class TelemetryRecord(BaseModel):
    """Frozen record with camelCase aliases.

    Accepts both ``user_id`` and ``userId`` on construction so persisted
    snapshots load back without a separate decoder.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_wire(self) -> Dict[str, Any]:
        """JSON-ready dict: camelCase keys, unset optionals omitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
