# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Announcements and their inbox broadcasts.

Every create and every update broadcasts a fresh message; earlier messages
are never retracted. Expiry is lazy: the list operations delete expired
records before answering, there is no background sweeper.
"""

from datetime import datetime
from typing import Any, Optional

from clubflow.core.config import settings
from clubflow.core.errors import NotFound
from clubflow.core.logging import get_logger
from clubflow.metrics import ANNOUNCEMENTS_EXPIRED, ANNOUNCEMENTS_TOTAL
from clubflow.models.domain import Announcement, Member, Message, MessageLink, Track, utcnow
from clubflow.repositories.announcement_repository import AnnouncementRepository
from clubflow.repositories.track_repository import TrackRepository
from clubflow.services.authorization import AuthorizationGate
from clubflow.services.fanout_service import FanoutService
from clubflow.services.unit_of_work import retry_on_conflict

logger = get_logger(__name__)


def broadcast_message(announcement: Announcement, track: Optional[Track]) -> Message:
    links = []
    if track is not None:
        links.append(MessageLink(
            name=track.name,
            url=settings.APPLY_LINK_TEMPLATE.format(track_id=track.id),
        ))
    return Message(title=announcement.title, body=announcement.content, links=links)


class AnnouncementService:
    """Business logic for announcements."""

    def __init__(
        self,
        announcement_repo: AnnouncementRepository,
        track_repo: TrackRepository,
        gate: AuthorizationGate,
        fanout: FanoutService,
    ) -> None:
        self._announcements = announcement_repo
        self._tracks = track_repo
        self._gate = gate
        self._fanout = fanout

    def get_announcement(self, announcement_id: str) -> Announcement:
        announcement = self._announcements.get(announcement_id)
        if announcement is None:
            raise NotFound(f"Announcement '{announcement_id}' not found")
        return announcement

    # ── Writes ──

    def create(self, requester_email: str, title: str, content: str,
               expiry_date: datetime, track_id: Optional[str] = None) -> dict[str, Any]:
        requester = self._gate.resolve(requester_email)
        track = self._authorize(requester, track_id, "create announcements")
        announcement = Announcement(
            title=title, content=content, expiry_date=expiry_date,
            creator_id=requester.id, track_id=track_id,
        )
        self._announcements.insert(announcement)
        ANNOUNCEMENTS_TOTAL.labels(action="create").inc()
        logger.info("Announcement created: id=%s track=%s by=%s",
                    announcement.id, track_id, requester.email)

        broadcast = self._fanout.broadcast(announcement.id, broadcast_message(announcement, track))
        return {"announcement": announcement, "broadcast": broadcast}

    def update(self, requester_email: str, announcement_id: str,
               title: Optional[str] = None, content: Optional[str] = None,
               expiry_date: Optional[datetime] = None) -> dict[str, Any]:
        """Change fields, then broadcast the updated message as a new, independent fan-out."""
        track_holder: dict[str, Optional[Track]] = {}

        def attempt() -> Announcement:
            requester = self._gate.resolve(requester_email)
            announcement = self.get_announcement(announcement_id)
            track_holder["track"] = self._authorize(
                requester, announcement.track_id, "update announcements", orphan_ok=True
            )
            if title is not None:
                announcement.title = title
            if content is not None:
                announcement.content = content
            if expiry_date is not None:
                announcement.expiry_date = expiry_date
            announcement.updated_at = utcnow()
            self._announcements.save(announcement)
            return announcement

        announcement = retry_on_conflict(attempt, "update_announcement")
        ANNOUNCEMENTS_TOTAL.labels(action="update").inc()
        broadcast = self._fanout.broadcast(
            announcement.id, broadcast_message(announcement, track_holder.get("track"))
        )
        return {"announcement": announcement, "broadcast": broadcast}

    def delete(self, requester_email: str, announcement_id: str) -> Announcement:
        """Remove the record only; delivered messages stay in the inboxes."""
        requester = self._gate.resolve(requester_email)
        announcement = self.get_announcement(announcement_id)
        self._authorize(requester, announcement.track_id, "delete announcements",
                        orphan_ok=True)
        self._announcements.delete(announcement_id)
        ANNOUNCEMENTS_TOTAL.labels(action="delete").inc()
        logger.info("Announcement deleted: id=%s by=%s", announcement_id, requester.email)
        return announcement

    # ── Reads (with lazy expiry) ──

    def sweep_expired(self, track_id: Optional[str] = None) -> int:
        expired = self._announcements.delete_expired(utcnow(), track_id)
        if expired:
            ANNOUNCEMENTS_EXPIRED.inc(len(expired))
            logger.info("Expired announcements removed: %d (track=%s)", len(expired), track_id)
        return len(expired)

    def list_for_committee(self, requester_email: str) -> list[Announcement]:
        """Announcements on the requester's committee tracks plus global ones.

        Announcements whose track has been deleted count as global.
        """
        requester = self._gate.resolve(requester_email)
        self._gate.require_role(requester, {"head"}, "list announcements")
        self.sweep_expired()
        track_ids = {t.id for t in self._tracks.get_by_committee(requester.committee)}
        existing = {t.id for t in self._tracks.get_all()}
        return [
            a for a in self._announcements.get_all()
            if a.track_id is None or a.track_id in track_ids or a.track_id not in existing
        ]

    def list_for_track(self, track_id: str, requester_email: str) -> list[Announcement]:
        requester = self._gate.resolve(requester_email)
        track = self._tracks.get(track_id)
        if track is None:
            raise NotFound(f"Track '{track_id}' not found")
        self._gate.require_head_of_committee(requester, track.committee,
                                             "list announcements for this track")
        self.sweep_expired(track_id)
        return self._announcements.get_by_track(track_id)

    # ── Recovery ──

    def resume_pending_broadcasts(self, requester_email: Optional[str] = None) -> list[dict[str, Any]]:
        if requester_email is not None:
            requester = self._gate.resolve(requester_email)
            self._gate.require_role(requester, {"head"}, "resume broadcasts")
        return self._fanout.resume_pending()

    # ── Internal ──

    def _authorize(self, requester: Member, track_id: Optional[str],
                   action: str, orphan_ok: bool = False) -> Optional[Track]:
        """Track-scoped: head of that track's committee. Global: any head.

        A deleted track makes an existing announcement global; new
        announcements still need a live track.
        """
        if track_id is None:
            self._gate.require_role(requester, {"head"}, action)
            return None
        track = self._tracks.get(track_id)
        if track is None:
            if not orphan_ok:
                raise NotFound(f"Track '{track_id}' not found")
            self._gate.require_role(requester, {"head"}, action)
            return None
        self._gate.require_head_of_committee(requester, track.committee, action)
        return track
