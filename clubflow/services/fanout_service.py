# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Broadcast fan-out via an outbox.

A broadcast persists one intent (the message to deliver), then walks every
member. Each member gets the message through ``MemberService.deliver`` and
the pair (intent, member) is recorded afterwards. A crash between the two
writes is harmless: on resume the inbox already holds a message carrying the
intent id, so ``deliver`` is a no-op and only the record is written.
"""

import time
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from clubflow.core.errors import ClubflowError
from clubflow.core.logging import get_logger
from clubflow.metrics import FANOUT_DELIVERIES, FANOUT_DURATION
from clubflow.models.domain import Message, new_id
from clubflow.repositories.fanout_repository import FanoutRepository
from clubflow.repositories.member_repository import MemberRepository
from clubflow.services.member_service import MemberService

logger = get_logger(__name__)


class FanoutService:
    """Delivers one message to every member inbox, resumably."""

    def __init__(
        self,
        member_repo: MemberRepository,
        member_service: MemberService,
        fanout_repo: FanoutRepository,
    ) -> None:
        self._members = member_repo
        self._member_service = member_service
        self._fanout = fanout_repo

    def broadcast(self, announcement_id: str, message: Message) -> dict[str, Any]:
        """Persist a fan-out intent for ``message`` and deliver it."""
        payload = message.model_dump(mode="json", exclude={"id", "intent_id"})
        intent = self._fanout.create_intent(new_id(), announcement_id, payload)
        logger.info("Broadcast intent created: intent=%s announcement=%s",
                    intent["id"], announcement_id)
        return self.deliver(intent)

    def deliver(self, intent: dict[str, Any]) -> dict[str, Any]:
        """
        Deliver an intent to every member not yet recorded for it.
        Per-member failures are counted, not raised; the intent ends up
        ``completed`` or ``partial``.
        """
        intent_id = intent["id"]
        already = self._fanout.delivered_member_ids(intent_id)
        delivered = skipped = 0
        failed_members: list[str] = []

        start = time.time()
        for member_id in self._members.list_ids():
            if member_id in already:
                skipped += 1
                continue
            message = Message(**intent["payload"], intent_id=intent_id)
            try:
                self._member_service.deliver(member_id, message)
                self._fanout.record_delivery(intent_id, member_id)
            except (ClubflowError, SQLAlchemyError) as exc:
                failed_members.append(member_id)
                FANOUT_DELIVERIES.labels(result="failed").inc()
                logger.warning("Inbox delivery failed: intent=%s member=%s error=%s",
                               intent_id, member_id, exc)
                continue
            delivered += 1
            FANOUT_DELIVERIES.labels(result="delivered").inc()
        FANOUT_DURATION.observe(time.time() - start)

        status = "partial" if failed_members else "completed"
        self._fanout.finish_intent(intent_id, status, len(failed_members))
        if failed_members:
            logger.error("Broadcast %s partial: %d delivered, %d failed",
                         intent_id, delivered, len(failed_members))
        else:
            logger.info("Broadcast %s completed: %d delivered, %d skipped",
                        intent_id, delivered, skipped)
        return {
            "intent_id": intent_id,
            "status": status,
            "delivered": delivered,
            "skipped": skipped,
            "failed": len(failed_members),
            "failed_member_ids": failed_members,
        }

    def resume_pending(self) -> list[dict[str, Any]]:
        """Re-run every intent that did not complete."""
        summaries = [self.deliver(intent) for intent in self._fanout.list_unfinished()]
        if summaries:
            logger.info("Resumed %d unfinished broadcast(s)", len(summaries))
        return summaries
