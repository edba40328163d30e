# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Courses — tasks, submissions, rating, and the Track↔Course mirror.

The mirror is kept as two lists (``course.tracks`` and ``track.courses``).
Every link change writes both sides inside one retryable unit of work; a
crash between the two writes leaves drift that ``reconcile_mirror`` repairs,
treating ``course.tracks`` as authoritative.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from clubflow.core.errors import ClubflowError, NotFound, PartialFailure, ValidationFailure
from clubflow.core.logging import get_logger
from clubflow.metrics import MIRROR_REPAIRS, RATINGS_TOTAL, SUBMISSIONS_TOTAL
from clubflow.models.domain import Course, Member, Submission, Task
from clubflow.repositories.course_repository import CourseRepository
from clubflow.repositories.member_repository import MemberRepository
from clubflow.repositories.track_repository import TrackRepository
from clubflow.services.authorization import AuthorizationGate
from clubflow.services.task_status import derive_status, first_submission, weighted_rate
from clubflow.services.unit_of_work import retry_on_conflict

logger = get_logger(__name__)

TASK_FIELDS = ("title", "description", "start_date", "due_date", "task_url",
               "head_percent", "deadline_percent")
REQUIRED_TASK_FIELDS = ("title", "head_percent", "deadline_percent")


class CourseService:
    """Business logic for the Course aggregate."""

    def __init__(
        self,
        course_repo: CourseRepository,
        track_repo: TrackRepository,
        member_repo: MemberRepository,
        gate: AuthorizationGate,
    ) -> None:
        self._courses = course_repo
        self._tracks = track_repo
        self._members = member_repo
        self._gate = gate

    # ── Queries ──

    def get_course(self, course_id: str) -> Course:
        course = self._courses.get(course_id)
        if course is None:
            raise NotFound(f"Course '{course_id}' not found")
        return course

    def list_courses(self, committee: Optional[str] = None) -> list[Course]:
        if committee:
            return self._courses.get_by_committee(committee)
        return self._courses.get_all()

    def get_task(self, course: Course, task_id: str) -> Task:
        task = course.find_task(task_id)
        if task is None:
            raise NotFound(f"Task '{task_id}' not found in course '{course.id}'")
        return task

    def list_tasks(self, course_id: str) -> list[Task]:
        return self.get_course(course_id).tasks

    # ── Course CRUD ──

    def create_course(self, requester_email: str, name: str, description: str,
                      track_id: str, admins: Optional[list[str]] = None,
                      committee: Optional[str] = None) -> Course:
        """
        Create a course linked to ``track_id``, then mirror it into the track.
        Raises PartialFailure when the course exists but the mirror write failed.
        """
        requester = self._gate.resolve(requester_email)
        self._gate.require_role(requester, {"head"}, "create courses")
        track = self._tracks.get(track_id)
        if track is None:
            raise NotFound(f"Track '{track_id}' not found")
        self._gate.require_head_of_committee(requester, track.committee, "create courses for this track")
        if committee is not None and committee != track.committee:
            raise ValidationFailure(
                f"Course committee '{committee}' does not match track committee '{track.committee}'"
            )
        admin_ids: list[str] = []
        for admin_id in admins or []:
            if not self._members.exists(admin_id):
                raise NotFound(f"Admin member '{admin_id}' not found")
            if admin_id not in admin_ids:
                admin_ids.append(admin_id)

        course = Course(
            name=name.strip(), description=description,
            committee=track.committee, tracks=[track_id], admins=admin_ids,
        )
        self._courses.insert(course)
        logger.info("Course created: id=%s name=%s track=%s", course.id, course.name, track_id)

        try:
            self._link_track_side(track_id, course.id)
        except (ClubflowError, SQLAlchemyError) as exc:
            logger.error("Course %s created but track %s mirror write failed: %s",
                         course.id, track_id, exc)
            raise PartialFailure(
                f"Course '{course.id}' was created but could not be linked into track "
                f"'{track_id}'; run mirror reconciliation",
                committed={"course_id": course.id},
            ) from exc
        return course

    def delete_course(self, requester_email: str, course_id: str) -> Course:
        requester = self._gate.resolve(requester_email)
        course = self.get_course(course_id)
        self._gate.require_head_of_committee(requester, course.committee, "delete courses")
        self._courses.delete(course_id)
        for track_id in course.tracks:
            self._unlink_track_side(track_id, course_id)
        logger.info("Course deleted: id=%s by=%s", course_id, requester.email)
        return course

    # ── Track mirror ──

    def add_track_to_course(self, requester_email: str, course_id: str, track_id: str) -> Course:
        return self._set_link(requester_email, course_id, track_id, linked=True)

    def remove_track_from_course(self, requester_email: str, course_id: str,
                                 track_id: str) -> Course:
        return self._set_link(requester_email, course_id, track_id, linked=False)

    def reconcile_mirror(self, requester_email: Optional[str] = None) -> dict[str, Any]:
        """
        Bring every ``track.courses`` in line with ``course.tracks``.
        Links to tracks that no longer exist are dropped from the course.
        """
        if requester_email is not None:
            requester = self._gate.resolve(requester_email)
            self._gate.require_role(requester, {"head"}, "reconcile course links")

        track_ids = {t.id for t in self._tracks.get_all()}
        report: dict[str, list] = {"track_links_added": [], "track_links_removed": [],
                                   "dangling_course_links_removed": []}

        for course in self._courses.get_all():
            dangling = [t for t in course.tracks if t not in track_ids]
            if dangling:
                def drop(course_id=course.id, dangling=dangling) -> None:
                    fresh = self.get_course(course_id)
                    fresh.tracks = [t for t in fresh.tracks if t not in dangling]
                    self._courses.save(fresh)

                retry_on_conflict(drop, "reconcile_course")
                report["dangling_course_links_removed"].extend(
                    {"course_id": course.id, "track_id": t} for t in dangling
                )
                MIRROR_REPAIRS.labels(side="course").inc(len(dangling))

        desired: dict[str, set] = {t: set() for t in track_ids}
        for course in self._courses.get_all():
            for track_id in course.tracks:
                desired.setdefault(track_id, set()).add(course.id)

        for track in self._tracks.get_all():
            want = desired.get(track.id, set())
            missing = [c for c in want if c not in track.courses]
            stale = [c for c in track.courses if c not in want]
            if not missing and not stale:
                continue

            def fix(track_id=track.id, want=want) -> None:
                fresh = self._tracks.get(track_id)
                if fresh is None:
                    return
                kept = [c for c in fresh.courses if c in want]
                fresh.courses = kept + sorted(c for c in want if c not in kept)
                self._tracks.save(fresh)

            retry_on_conflict(fix, "reconcile_track")
            report["track_links_added"].extend(
                {"track_id": track.id, "course_id": c} for c in missing
            )
            report["track_links_removed"].extend(
                {"track_id": track.id, "course_id": c} for c in stale
            )
            MIRROR_REPAIRS.labels(side="track").inc(len(missing) + len(stale))

        repaired = sum(len(v) for v in report.values())
        if repaired:
            logger.warning("Mirror reconciliation repaired %d link(s)", repaired)
        return report

    # ── Tasks ──

    def add_task(self, requester_email: str, course_id: str, title: str,
                 description: Optional[str] = None,
                 start_date: Optional[datetime] = None,
                 due_date: Optional[datetime] = None,
                 task_url: Optional[str] = None,
                 head_percent: float = 50,
                 deadline_percent: float = 20) -> Task:
        _check_split(head_percent, deadline_percent)
        task = Task(
            title=title, description=description, start_date=start_date,
            due_date=due_date, task_url=task_url,
            head_percent=head_percent, deadline_percent=deadline_percent,
        )

        def attempt() -> Task:
            requester = self._gate.resolve(requester_email)
            course = self.get_course(course_id)
            self._require_manager(requester, course, "add tasks")
            course.tasks.append(task)
            self._courses.save(course)
            return task

        result = retry_on_conflict(attempt, "add_task")
        logger.info("Task added: course=%s task=%s", course_id, task.id)
        return result

    def update_task(self, requester_email: str, course_id: str, task_id: str,
                    changes: dict[str, Any]) -> Task:
        """Overwrite descriptive task fields; submissions are never touched."""
        unknown = set(changes) - set(TASK_FIELDS)
        if unknown:
            raise ValidationFailure(f"Cannot update task fields: {sorted(unknown)}")
        nulled = sorted(f for f in REQUIRED_TASK_FIELDS if f in changes and changes[f] is None)
        if nulled:
            raise ValidationFailure(f"Task fields cannot be null: {nulled}")

        def attempt() -> Task:
            requester = self._gate.resolve(requester_email)
            course = self.get_course(course_id)
            self._require_manager(requester, course, "update tasks")
            task = self.get_task(course, task_id)
            try:
                updated = Task.model_validate({**task.model_dump(), **changes})
            except ValidationError as exc:
                raise ValidationFailure(f"Invalid task update: {exc.errors()[0]['msg']}") from exc
            _check_split(updated.head_percent, updated.deadline_percent)
            course.tasks = [updated if t.id == task_id else t for t in course.tasks]
            self._courses.save(course)
            return updated

        return retry_on_conflict(attempt, "update_task")

    def remove_task(self, requester_email: str, course_id: str, task_id: str) -> Task:
        def attempt() -> Task:
            requester = self._gate.resolve(requester_email)
            course = self.get_course(course_id)
            self._require_manager(requester, course, "remove tasks")
            task = self.get_task(course, task_id)
            course.tasks = [t for t in course.tasks if t.id != task_id]
            self._courses.save(course)
            return task

        task = retry_on_conflict(attempt, "remove_task")
        logger.info("Task removed: course=%s task=%s", course_id, task_id)
        return task

    # ── Submissions & rating ──

    def submit_task(self, course_id: str, task_id: str, requester_email: str,
                    link: str) -> Submission:
        """Append a submission. Repeat submissions are kept as separate records."""
        if not link or not link.strip():
            raise ValidationFailure("submission link is required")

        def attempt() -> Submission:
            member = self._gate.resolve(requester_email)
            course = self.get_course(course_id)
            task = self.get_task(course, task_id)
            submission = Submission(member_id=member.id, link=link.strip())
            task.submissions.append(submission)
            self._courses.save(course)
            return submission

        submission = retry_on_conflict(attempt, "submit_task")
        SUBMISSIONS_TOTAL.inc()
        logger.info("Task submitted: course=%s task=%s submission=%s",
                    course_id, task_id, submission.id)
        return submission

    def list_submissions(self, course_id: str, task_id: str,
                         requester_email: str) -> list[Submission]:
        requester = self._gate.resolve(requester_email)
        course = self.get_course(course_id)
        self._require_manager(requester, course, "view submissions")
        return self.get_task(course, task_id).submissions

    def rate_submission(self, course_id: str, task_id: str, submission_id: str,
                        requester_email: str,
                        rating: Optional[float] = None,
                        head_evaluation: Optional[float] = None,
                        deadline_evaluation: Optional[float] = None,
                        notes: Optional[str] = None) -> Submission:
        """
        Set (or overwrite) a submission's rate. Without an explicit ``rating``
        both evaluations are required and the rate is their weighted sum.
        """
        if rating is None and (head_evaluation is None or deadline_evaluation is None):
            raise ValidationFailure(
                "rating, or both head_evaluation and deadline_evaluation, is required"
            )

        def attempt() -> Submission:
            requester = self._gate.resolve(requester_email)
            course = self.get_course(course_id)
            self._require_manager(requester, course, "rate submissions")
            task = self.get_task(course, task_id)
            submission = next((s for s in task.submissions if s.id == submission_id), None)
            if submission is None:
                raise NotFound(f"Submission '{submission_id}' not found")
            if head_evaluation is not None:
                submission.head_evaluation = head_evaluation
            if deadline_evaluation is not None:
                submission.deadline_evaluation = deadline_evaluation
            if notes is not None:
                submission.notes = notes
            submission.rate = (
                rating if rating is not None
                else weighted_rate(task, head_evaluation, deadline_evaluation)
            )
            self._courses.save(course)
            return submission

        submission = retry_on_conflict(attempt, "rate_submission")
        RATINGS_TOTAL.inc()
        logger.info("Submission rated: task=%s submission=%s rate=%s",
                    task_id, submission_id, submission.rate)
        return submission

    def derive_status(self, member_id: str, task: Task) -> str:
        return derive_status(member_id, task)

    def get_completed_tasks(self, course_id: Optional[str] = None,
                            member_id: Optional[str] = None) -> list[dict[str, Any]]:
        """Every rated submission, optionally narrowed to one course and/or member."""
        courses = [self.get_course(course_id)] if course_id else self._courses.get_all()
        completed = []
        for course in courses:
            for task in course.tasks:
                for sub in task.submissions:
                    if sub.rate is None:
                        continue
                    if member_id and sub.member_id != member_id:
                        continue
                    completed.append({
                        "course_id": course.id,
                        "course_name": course.name,
                        "task_id": task.id,
                        "title": task.title,
                        "member_id": sub.member_id,
                        "submission_id": sub.id,
                        "rate": sub.rate,
                        "submitted_at": sub.submission_date,
                    })
        return completed

    def my_tasks(self, requester_email: str) -> list[dict[str, Any]]:
        """Status of every task the member can see: courses of their tracks plus anything submitted."""
        member = self._gate.resolve(requester_email)
        member_track_ids = {t.id for t in self._tracks.get_all() if member.id in t.members}
        rows = []
        for course in self._courses.get_all():
            on_track = any(t in member_track_ids for t in course.tracks)
            for task in course.tasks:
                submission = first_submission(member.id, task)
                if not on_track and submission is None:
                    continue
                rows.append({
                    "course_id": course.id,
                    "course_name": course.name,
                    "task_id": task.id,
                    "title": task.title,
                    "due_date": task.due_date,
                    "status": derive_status(member.id, task),
                    "submission": submission,
                })
        return rows

    # ── Internal ──

    def _require_manager(self, requester: Member, course: Course, action: str) -> None:
        """Course admins, or the head of the course's committee."""
        if requester.id in course.admins:
            return
        self._gate.require_head_of_committee(requester, course.committee, action)

    def _set_link(self, requester_email: str, course_id: str, track_id: str,
                  linked: bool) -> Course:
        action = "link tracks to courses" if linked else "unlink tracks from courses"

        def attempt() -> Course:
            requester = self._gate.resolve(requester_email)
            course = self.get_course(course_id)
            track = self._tracks.get(track_id)
            if track is None:
                raise NotFound(f"Track '{track_id}' not found")
            self._gate.require_head_of_committee(requester, course.committee, action)
            self._gate.require_head_of_committee(requester, track.committee, action)

            if linked and track_id not in course.tracks:
                course.tracks.append(track_id)
                self._courses.save(course)
            elif not linked and track_id in course.tracks:
                course.tracks.remove(track_id)
                self._courses.save(course)

            if linked and course_id not in track.courses:
                track.courses.append(course_id)
                self._tracks.save(track)
            elif not linked and course_id in track.courses:
                track.courses.remove(course_id)
                self._tracks.save(track)
            return course

        course = retry_on_conflict(attempt, "course_track_link")
        logger.info("Course/track %s: course=%s track=%s",
                    "linked" if linked else "unlinked", course_id, track_id)
        return course

    def _link_track_side(self, track_id: str, course_id: str) -> None:
        def attempt() -> None:
            track = self._tracks.get(track_id)
            if track is None:
                raise NotFound(f"Track '{track_id}' not found")
            if course_id not in track.courses:
                track.courses.append(course_id)
                self._tracks.save(track)

        retry_on_conflict(attempt, "track_course_mirror")

    def _unlink_track_side(self, track_id: str, course_id: str) -> None:
        def attempt() -> None:
            track = self._tracks.get(track_id)
            if track is None or course_id not in track.courses:
                return
            track.courses.remove(course_id)
            self._tracks.save(track)

        retry_on_conflict(attempt, "track_course_mirror")


def _check_split(head_percent: float, deadline_percent: float) -> None:
    if head_percent < 0 or deadline_percent < 0 or head_percent + deadline_percent > 100:
        raise ValidationFailure(
            "head_percent and deadline_percent must be non-negative and sum to at most 100"
        )
