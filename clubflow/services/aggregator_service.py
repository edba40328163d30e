# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Track-system rollups — read only, never writes.
"""

from typing import Any, Iterable, Optional

from clubflow.core.config import settings
from clubflow.core.errors import NotFound
from clubflow.models.domain import ACCEPTED_ROLES, Member, Track
from clubflow.repositories.course_repository import CourseRepository
from clubflow.repositories.member_repository import MemberRepository
from clubflow.repositories.track_repository import TrackRepository
from clubflow.services.authorization import AuthorizationGate


def rank(members: Iterable[Member], limit: int) -> list[dict[str, Any]]:
    """Rated members by descending rate (name breaks ties); unrated ones are left out."""
    rated = sorted(
        (m for m in members if m.rate is not None),
        key=lambda m: (-m.rate, m.name),
    )
    return [
        {
            "rank": position,
            "member_id": m.id,
            "name": m.name,
            "email": m.email,
            "committee": m.committee,
            "rate": m.rate,
            "completed_tasks": m.completed_task_count(),
        }
        for position, m in enumerate(rated[:limit], start=1)
    ]


class AggregatorService:
    """System snapshot and leaderboards."""

    def __init__(
        self,
        member_repo: MemberRepository,
        track_repo: TrackRepository,
        course_repo: CourseRepository,
        gate: AuthorizationGate,
    ) -> None:
        self._members = member_repo
        self._tracks = track_repo
        self._courses = course_repo
        self._gate = gate

    def snapshot(self, requester_email: str) -> dict[str, Any]:
        self._gate.resolve(requester_email)
        tracks = self._tracks.get_all()
        courses = self._courses.get_all()
        members = [m for m in self._members.get_all() if m.role in ACCEPTED_ROLES]
        return {
            "tracks": tracks,
            "courses": courses,
            "members": members,
            "summary": {
                "total_tracks": len(tracks),
                "total_courses": len(courses),
                "total_members": len(members),
                "total_applicants": sum(len(t.applicants) for t in tracks),
            },
        }

    def leaderboard(self, requester_email: str,
                    track_id: Optional[str] = None) -> dict[str, Any]:
        self._gate.resolve(requester_email)
        by_id = {m.id: m for m in self._members.get_all()}

        if track_id is not None:
            track = self._tracks.get(track_id)
            if track is None:
                raise NotFound(f"Track '{track_id}' not found")
            return self._track_board(track, by_id)

        return {
            "tracks": [self._track_board(t, by_id) for t in self._tracks.get_all()],
            "overall": rank(
                (m for m in by_id.values() if m.role in ACCEPTED_ROLES),
                settings.OVERALL_LEADERBOARD_SIZE,
            ),
        }

    def _track_board(self, track: Track, by_id: dict[str, Member]) -> dict[str, Any]:
        members = [by_id[mid] for mid in track.members if mid in by_id]
        return {
            "track_id": track.id,
            "track_name": track.name,
            "committee": track.committee,
            "top_performers": rank(members, settings.TRACK_LEADERBOARD_SIZE),
        }
