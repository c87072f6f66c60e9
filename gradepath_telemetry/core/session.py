"""Session and identity bootstrap.

Produces the durable user id (generated once, persisted indefinitely) and a
fresh session id for every run. The read-modify-write on the user id slot is
not transactional: one caller per process is expected.
"""

import uuid
from dataclasses import dataclass
from typing import Callable, Optional

from gradepath_telemetry.core.logging import ContextualLogger
from gradepath_telemetry.core.logging import logger as default_logger
from gradepath_telemetry.core.protocols.storage import KeyValueStore

SESSION_ID_KEY = "@telemetry_session_id"
USER_ID_KEY = "@telemetry_user_id"
QUEUE_KEY = "@telemetry_queue"


def new_id() -> str:
    """Random UUID4 string. Not security sensitive."""
    return str(uuid.uuid4())


@dataclass(frozen=True)
class SessionIdentity:
    """Identity stamped on every tracked event."""

    user_id: str
    session_id: str


class SessionBootstrap:
    """Loads or creates the user id and mints a session id.

    Storage failures never abort the bootstrap: an unreadable user id slot
    yields a freshly generated id, an unwritable one keeps it in memory only.
    """

    def __init__(
        self,
        storage: KeyValueStore,
        id_factory: Callable[[], str] = new_id,
        logger: Optional[ContextualLogger] = None,
    ) -> None:
        self._storage = storage
        self._id_factory = id_factory
        self._logger = logger or default_logger

    async def bootstrap(self) -> SessionIdentity:
        """Return the identity for this run, persisting what is new."""
        user_id = await self._load_user_id()
        if not user_id:
            user_id = self._id_factory()
            self._logger.info("Generated new durable user id")
            await self._write(USER_ID_KEY, user_id)

        session_id = self._id_factory()
        await self._write(SESSION_ID_KEY, session_id)

        return SessionIdentity(user_id=user_id, session_id=session_id)

    async def _load_user_id(self) -> Optional[str]:
        try:
            value = await self._storage.get(USER_ID_KEY)
        except Exception as e:
            self._logger.warning(f"Failed to read user id, generating a new one: {e}")
            return None
        return value.strip() if value else None

    async def _write(self, key: str, value: str) -> None:
        try:
            await self._storage.set(key, value)
        except Exception as e:
            self._logger.warning(f"Failed to persist '{key}', keeping it in memory: {e}")
