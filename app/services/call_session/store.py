"""Redis-backed call session store."""
import logging
from datetime import datetime, timezone
from typing import Callable, Optional

import redis.asyncio as redis_async
from pydantic import ValidationError
from redis.exceptions import RedisError

from app.services.call_session.models import CallSession

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "telephony:sess:"
DEFAULT_TTL_SECONDS = 7200


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionStore:
    """Persists call sessions under a key prefix with a sliding expiry.

    The Redis client is created on first use unless one is injected. Backend
    failures are logged and never raised: a failed load reads as "no session"
    and a failed save or clear returns ``False`` so the call can carry on.
    """

    def __init__(
        self,
        redis_url: Optional[str] = None,
        *,
        prefix: str = DEFAULT_PREFIX,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        socket_timeout_seconds: float = 2.0,
        client=None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        if client is None and not redis_url:
            raise ValueError("SessionStore needs either a redis_url or a client")
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self.redis_url = redis_url
        self.prefix = prefix
        self.ttl_seconds = ttl_seconds
        self.socket_timeout_seconds = socket_timeout_seconds
        self._client = client
        self._clock = clock

    def _get_client(self):
        if self._client is None:
            logger.info(f"[SESSION STORE] Creating Redis client - Prefix: {self.prefix}")
            self._client = redis_async.from_url(
                self.redis_url,
                decode_responses=True,
                socket_connect_timeout=self.socket_timeout_seconds,
                socket_timeout=self.socket_timeout_seconds,
            )
        return self._client

    def key(self, call_id: str) -> str:
        """Storage key for a call."""
        return f"{self.prefix}{call_id}"

    async def load(self, call_id: str) -> Optional[CallSession]:
        """Fetch the session for ``call_id``, or ``None`` if absent, expired or unreadable."""
        try:
            raw = await self._get_client().get(self.key(call_id))
        except RedisError as e:
            logger.error(
                f"[SESSION STORE] Load failed, treating as new call - CallSid: {call_id}, "
                f"Error: {type(e).__name__}: {e}",
                exc_info=True,
            )
            return None

        if raw is None:
            return None

        try:
            return CallSession.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(
                f"[SESSION STORE] Discarding unreadable session record - CallSid: {call_id}, "
                f"Error: {e.error_count()} validation error(s)"
            )
            return None

    async def save(self, session: CallSession) -> bool:
        """Store ``session`` and restart its expiry window.

        Sets ``started_at`` on first save and refreshes ``updated_at`` on every
        save. Returns ``False`` when the backend could not be written.
        """
        now = self._clock()
        if session.started_at is None:
            session.started_at = now
        session.updated_at = now

        try:
            await self._get_client().set(
                self.key(session.call_id), session.to_json(), ex=self.ttl_seconds
            )
        except RedisError as e:
            logger.error(
                f"[SESSION STORE] Save failed, continuing without persistence - "
                f"CallSid: {session.call_id}, Step: {session.step}, "
                f"Error: {type(e).__name__}: {e}",
                exc_info=True,
            )
            return False

        logger.debug(
            f"[SESSION STORE] Saved session - CallSid: {session.call_id}, "
            f"Step: {session.step}, TTL: {self.ttl_seconds}s"
        )
        return True

    async def clear(self, call_id: str) -> bool:
        """Delete the session for ``call_id``. Clearing a missing session is not an error."""
        try:
            await self._get_client().delete(self.key(call_id))
        except RedisError as e:
            logger.warning(
                f"[SESSION STORE] Clear failed - CallSid: {call_id}, "
                f"Error: {type(e).__name__}: {e}"
            )
            return False
        return True

    async def close(self) -> None:
        """Release the Redis client if one was created."""
        if self._client is None:
            return
        try:
            await self._client.aclose()
        except RedisError as e:
            logger.warning(f"[SESSION STORE] Error closing Redis client: {e}")
        self._client = None
