"""Redis-backed handoff between the time input form and the confirmation form.

The two forms are separate, stateless interactions, so the parsed time is
parked in Redis under `<actor_id>::<target_id>`, read and deleted by the
confirmation step, and expires after HANDOFF_TTL_SECONDS if the user never
confirms.

Read-then-delete is not atomic: two concurrent confirmations for the same pair
can both read the record before either deletes it.
"""

from typing import Optional

import redis.asyncio as redis

from config import settings
from logger_config import setup_logger
from schemas import FlowContext, ReminderRequest
from time_utils import from_epoch_ms, to_epoch_ms

logger = setup_logger(__name__, 'flow.log')

REMINDER_TIMESTAMP_FIELD = "reminderTimestamp"
HANDOFF_FIELDS = [REMINDER_TIMESTAMP_FIELD]


def handoff_key(actor_id: str, target_id: str) -> str:
    return f"{actor_id}::{target_id}"


class HandoffStore:
    """Single-slot, single-use store keyed by (actor, target)."""

    def __init__(self, client: redis.Redis, ttl_seconds: int = settings.HANDOFF_TTL_SECONDS):
        # client must be created with decode_responses=True
        self.redis = client
        self.ttl_seconds = ttl_seconds

    async def put(
        self,
        context: FlowContext,
        request: ReminderRequest,
        ttl: Optional[int] = None
    ) -> None:
        """Store (or overwrite) the pending request for the context's pair.

        The record expires after `ttl` seconds (default: the store's ttl_seconds).
        No-op when the context has no actor or no target.
        """
        if not context.actor_id or not context.target_id:
            return
        key = handoff_key(context.actor_id, context.target_id)
        ttl = ttl or self.ttl_seconds

        await self.redis.hset(key, mapping={
            REMINDER_TIMESTAMP_FIELD: str(to_epoch_ms(request.scheduled_at)),
        })
        await self.redis.expire(key, ttl)
        logger.info(f"Stored handoff {key} (expires in {ttl}s)")

    async def take_and_delete(self, context: FlowContext) -> Optional[ReminderRequest]:
        """Read the pending request for the context's pair and delete it.

        The key is deleted even when the record is missing or incomplete.

        Returns:
            ReminderRequest, or None when there is nothing usable to take
        """
        if not context.actor_id or not context.target_id:
            return None
        key = handoff_key(context.actor_id, context.target_id)

        values = await self.redis.hmget(key, HANDOFF_FIELDS)
        await self.redis.delete(key)

        record = dict(zip(HANDOFF_FIELDS, values))
        if any(not record.get(field) for field in HANDOFF_FIELDS):
            logger.info(f"No handoff data for {key}")
            return None

        try:
            timestamp_ms = int(record[REMINDER_TIMESTAMP_FIELD])
        except ValueError:
            logger.warning(f"Malformed handoff data for {key}: {record}")
            return None

        return ReminderRequest(
            actor_id=context.actor_id,
            target_id=context.target_id,
            scheduled_at=from_epoch_ms(timestamp_ms),
        )
