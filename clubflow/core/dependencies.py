# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""FastAPI dependency injection wiring."""
from clubflow.core.database import engine
from clubflow.repositories import (
    AnnouncementRepository,
    CourseRepository,
    FanoutRepository,
    MemberRepository,
    TrackRepository,
)
from clubflow.services.aggregator_service import AggregatorService
from clubflow.services.announcement_service import AnnouncementService
from clubflow.services.authorization import AuthorizationGate
from clubflow.services.course_service import CourseService
from clubflow.services.fanout_service import FanoutService
from clubflow.services.member_service import MemberService
from clubflow.services.notification_client import NotificationClient
from clubflow.services.track_service import TrackService

_member_repo = MemberRepository(engine)
_track_repo = TrackRepository(engine)
_course_repo = CourseRepository(engine)
_announcement_repo = AnnouncementRepository(engine)
_fanout_repo = FanoutRepository(engine)

_gate = AuthorizationGate(_member_repo)
_notification_client = NotificationClient()
_member_service = MemberService(_member_repo, _gate)
_track_service = TrackService(_track_repo, _course_repo, _member_service, _gate, _notification_client)
_course_service = CourseService(_course_repo, _track_repo, _member_repo, _gate)
_fanout_service = FanoutService(_member_repo, _member_service, _fanout_repo)
_announcement_service = AnnouncementService(_announcement_repo, _track_repo, _gate, _fanout_service)
_aggregator_service = AggregatorService(_member_repo, _track_repo, _course_repo, _gate)

ALL_REPOSITORIES = (_fanout_repo, _announcement_repo, _course_repo, _track_repo, _member_repo)


def get_member_repo() -> MemberRepository:
    return _member_repo


def get_member_service() -> MemberService:
    return _member_service


def get_track_service() -> TrackService:
    return _track_service


def get_course_service() -> CourseService:
    return _course_service


def get_announcement_service() -> AnnouncementService:
    return _announcement_service


def get_aggregator_service() -> AggregatorService:
    return _aggregator_service
