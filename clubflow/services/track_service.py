# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Tracks — creation, membership sets, and the applicant pipeline.

Applicant state machine:
    pending ─► accepted
    pending ─► rejected
A decision on an already decided entry is accepted and overwrites the
status (and notifies again); it is logged as a re-decision.
"""

from typing import Any, Optional

from clubflow.core.errors import Conflict, NotFound, ValidationFailure
from clubflow.core.logging import get_logger
from clubflow.metrics import APPLICATIONS_TOTAL, DECISIONS_TOTAL
from clubflow.models.domain import DECISIONS, Applicant, Message, Track, utcnow
from clubflow.repositories.course_repository import CourseRepository
from clubflow.repositories.track_repository import TrackRepository
from clubflow.services.authorization import AuthorizationGate
from clubflow.services.member_service import MemberService
from clubflow.services.notification_client import NotificationClient
from clubflow.services.unit_of_work import retry_on_conflict

logger = get_logger(__name__)

# Track attribute holding each member-id set
MEMBER_SETS = {"members": "members", "supervisors": "supervisors", "hrs": "hrs"}


def decision_message(track: Track, decision: str) -> Message:
    if decision == "accepted":
        return Message(
            title=f"Application Accepted - {track.name}",
            body=(
                f"Congratulations! Your application to join {track.name} track "
                f"has been accepted. Welcome to the team!"
            ),
        )
    return Message(
        title=f"Application Update - {track.name}",
        body=(
            f"Thank you for your interest in joining {track.name} track. "
            f"Unfortunately, your application was not accepted at this time. "
            f"We encourage you to apply again in the future."
        ),
    )


class TrackService:
    """Business logic for the Track aggregate."""

    def __init__(
        self,
        track_repo: TrackRepository,
        course_repo: CourseRepository,
        member_service: MemberService,
        gate: AuthorizationGate,
        notification_client: NotificationClient,
    ) -> None:
        self._tracks = track_repo
        self._courses = course_repo
        self._members = member_service
        self._gate = gate
        self._notifications = notification_client

    # ── Queries ──

    def get_track(self, track_id: str) -> Track:
        track = self._tracks.get(track_id)
        if track is None:
            raise NotFound(f"Track '{track_id}' not found")
        return track

    def list_tracks(self, committee: Optional[str] = None) -> list[Track]:
        if committee:
            return self._tracks.get_by_committee(committee)
        return self._tracks.get_all()

    # ── Track CRUD ──

    def create_track(self, requester_email: str, name: str, description: str = "") -> Track:
        """Only heads create tracks; the committee is the creator's, forever."""
        requester = self._gate.resolve(requester_email)
        self._gate.require_role(requester, {"head"}, "create tracks")
        track = Track(name=name.strip(), description=description, committee=requester.committee)
        self._tracks.insert(track)
        logger.info("Track created: id=%s name=%s committee=%s by=%s",
                    track.id, track.name, track.committee, requester.email)
        return track

    def update_track(self, requester_email: str, track_id: str,
                     name: Optional[str] = None,
                     description: Optional[str] = None) -> Track:
        """Rename or re-describe a track. The committee never changes."""
        def attempt() -> Track:
            requester = self._gate.resolve(requester_email)
            track = self.get_track(track_id)
            self._gate.require_head_of_committee(requester, track.committee, "edit tracks")
            if name is not None:
                track.name = name.strip()
            if description is not None:
                track.description = description
            self._tracks.save(track)
            return track

        return retry_on_conflict(attempt, "update_track")

    def delete_track(self, requester_email: str, track_id: str) -> Track:
        """Delete a track, then drop it from every course that mirrors it."""
        requester = self._gate.resolve(requester_email)
        track = self.get_track(track_id)
        self._gate.require_head_of_committee(requester, track.committee, "delete tracks")
        self._tracks.delete(track_id)
        for course_id in track.courses:
            self._unlink_course(course_id, track_id)
        logger.info("Track deleted: id=%s by=%s", track_id, requester.email)
        return track

    # ── Applicant pipeline ──

    def apply(self, track_id: str, requester_email: str) -> Track:
        """Append a pending applicant entry; Conflict if the member already applied."""
        def attempt() -> Track:
            member = self._gate.resolve(requester_email)
            track = self.get_track(track_id)
            if track.find_applicant(member.id) is not None:
                APPLICATIONS_TOTAL.labels(outcome="duplicate").inc()
                raise Conflict("Member has already applied to this track")
            track.applicants.append(Applicant(member_id=member.id))
            self._tracks.save(track)
            return track

        track = retry_on_conflict(attempt, "apply")
        APPLICATIONS_TOTAL.labels(outcome="created").inc()
        logger.info("Application received: track=%s member=%s", track_id, requester_email)
        return track

    def decide(self, track_id: str, member_id: str, decision: str,
               requester_email: str) -> dict[str, Any]:
        """
        Set the applicant status, then notify the applicant in a separate
        write. The second write is not rolled back into the first.
        """
        if decision not in DECISIONS:
            raise ValidationFailure(f"decision must be one of {DECISIONS}")

        def attempt() -> Track:
            track = self.get_track(track_id)
            self._members.get_member(member_id)
            requester = self._gate.resolve(requester_email)
            self._gate.require_head_of_committee(
                requester, track.committee, "decide applications for this track"
            )
            applicant = track.find_applicant(member_id)
            if applicant is None:
                raise NotFound("Applicant not found in this track")
            if applicant.status != "pending":
                logger.warning(
                    "Re-deciding applicant: track=%s member=%s %s -> %s",
                    track_id, member_id, applicant.status, decision,
                )
            applicant.status = decision
            applicant.decided_at = utcnow()
            self._tracks.save(track)
            return track

        track = retry_on_conflict(attempt, "decide")
        DECISIONS_TOTAL.labels(decision=decision).inc()

        message = decision_message(track, decision)
        self._members.deliver(member_id, message)
        member = self._members.get_member(member_id)
        self._notifications.send(member.email, message.title, message.body)
        logger.info("Applicant %s: track=%s member=%s", decision, track_id, member_id)
        return {"track": track, "message": message}

    def list_applicants(self, track_id: str, requester_email: str) -> dict[str, Any]:
        requester = self._gate.resolve(requester_email)
        track = self.get_track(track_id)
        self._gate.require_head_of_committee(
            requester, track.committee, "view applicants for this track"
        )
        return {
            "track": {"id": track.id, "name": track.name, "committee": track.committee},
            "applicants": track.applicants,
        }

    def list_committee_applicants(self, requester_email: str) -> list[dict[str, Any]]:
        requester = self._gate.resolve(requester_email)
        self._gate.require_role(requester, {"head"}, "view applicants")
        return [
            {"track_id": t.id, "name": t.name, "committee": t.committee,
             "applicants": t.applicants}
            for t in self._tracks.get_by_committee(requester.committee)
        ]

    def my_applications(self, requester_email: str) -> list[dict[str, Any]]:
        member = self._gate.resolve(requester_email)
        applications = []
        for track in self._tracks.get_all():
            entry = track.find_applicant(member.id)
            if entry is None:
                continue
            applications.append({
                "track": {"id": track.id, "name": track.name,
                          "description": track.description, "committee": track.committee},
                "application": {"status": entry.status, "applied_at": entry.applied_at,
                                "decided_at": entry.decided_at},
            })
        return applications

    # ── Member sets ──

    def add_to_set(self, track_id: str, member_id: str, set_name: str,
                   requester_email: str) -> Track:
        return self._update_set(track_id, member_id, set_name, requester_email, add=True)

    def remove_from_set(self, track_id: str, member_id: str, set_name: str,
                        requester_email: str) -> Track:
        return self._update_set(track_id, member_id, set_name, requester_email, add=False)

    def add_member(self, track_id: str, member_id: str, requester_email: str) -> Track:
        return self.add_to_set(track_id, member_id, "members", requester_email)

    def remove_member(self, track_id: str, member_id: str, requester_email: str) -> Track:
        return self.remove_from_set(track_id, member_id, "members", requester_email)

    def add_supervisor(self, track_id: str, member_id: str, requester_email: str) -> Track:
        return self.add_to_set(track_id, member_id, "supervisors", requester_email)

    def remove_supervisor(self, track_id: str, member_id: str, requester_email: str) -> Track:
        return self.remove_from_set(track_id, member_id, "supervisors", requester_email)

    def add_hr(self, track_id: str, member_id: str, requester_email: str) -> Track:
        return self.add_to_set(track_id, member_id, "hrs", requester_email)

    def remove_hr(self, track_id: str, member_id: str, requester_email: str) -> Track:
        return self.remove_from_set(track_id, member_id, "hrs", requester_email)

    # ── Internal ──

    def _update_set(self, track_id: str, member_id: str, set_name: str,
                    requester_email: str, add: bool) -> Track:
        if set_name not in MEMBER_SETS:
            raise ValidationFailure(f"Unknown member set '{set_name}'")
        attr = MEMBER_SETS[set_name]

        def attempt() -> Track:
            requester = self._gate.resolve(requester_email)
            track = self.get_track(track_id)
            self._gate.require_head_of_committee(
                requester, track.committee, f"modify {set_name} of this track"
            )
            ids: list[str] = getattr(track, attr)
            if add:
                self._members.get_member(member_id)
                if member_id in ids:
                    return track
                ids.append(member_id)
            else:
                if member_id not in ids:
                    return track
                ids.remove(member_id)
            self._tracks.save(track)
            return track

        track = retry_on_conflict(attempt, f"track_{set_name}")
        logger.info("Track %s %s: track=%s member=%s",
                    set_name, "add" if add else "remove", track_id, member_id)
        return track

    def _unlink_course(self, course_id: str, track_id: str) -> None:
        def attempt() -> None:
            course = self._courses.get(course_id)
            if course is None or track_id not in course.tracks:
                return
            course.tracks.remove(track_id)
            self._courses.save(course)

        retry_on_conflict(attempt, "unlink_course")
