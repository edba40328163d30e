# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Repository: Announcement records."""

from datetime import datetime
from typing import Optional

from clubflow.models.domain import Announcement
from clubflow.repositories.document_repository import DocumentRepository


class AnnouncementRepository(DocumentRepository[Announcement]):
    table = "announcements"
    model = Announcement
    index_columns = {"track_id": "track_id"}

    def get_by_track(self, track_id: str) -> list[Announcement]:
        return sorted(self.find_by("track_id", track_id), key=lambda a: a.created_at)

    def delete_expired(self, now: datetime, track_id: Optional[str] = None) -> list[Announcement]:
        """Delete every announcement (optionally of one track) expired at ``now``."""
        candidates = self.get_by_track(track_id) if track_id else self.get_all()
        expired = [a for a in candidates if a.is_expired(now)]
        for announcement in expired:
            self.delete(announcement.id)
        return expired
