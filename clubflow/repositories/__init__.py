# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Repository package — re-exports every repository."""
from clubflow.repositories.announcement_repository import AnnouncementRepository
from clubflow.repositories.course_repository import CourseRepository
from clubflow.repositories.fanout_repository import FanoutRepository
from clubflow.repositories.member_repository import MemberRepository
from clubflow.repositories.track_repository import TrackRepository

__all__ = [
    "AnnouncementRepository",
    "CourseRepository",
    "FanoutRepository",
    "MemberRepository",
    "TrackRepository",
]
