# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Domain models — pure data structures, NO FastAPI dependency.

Each aggregate (Member, Track, Course, Announcement) is stored as one
document; its child collections (inbox, tasks, applicants, submissions) are
addressed by stable ids and only ever written through the parent's save.
"""

import uuid
from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import BaseModel, Field

ROLES = ("not-accepted", "member", "head", "Vice")
ACCEPTED_ROLES = ("member", "head", "Vice")
DECISIONS = ("accepted", "rejected")
MESSAGE_STATUSES = ("unread", "read", "archived")

# Link value of a submission that carries no real link yet
UNSUBMITTED = "unsubmitted"

Role = Literal["not-accepted", "member", "head", "Vice"]
ApplicantStatus = Literal["pending", "accepted", "rejected"]
MessageStatus = Literal["unread", "read", "archived"]


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Document(BaseModel):
    """Base for every stored aggregate; ``version`` drives optimistic concurrency."""

    id: str = Field(default_factory=new_id)
    version: int = Field(default=0, exclude=True)


# ── Member ──

class MessageLink(BaseModel):
    name: str
    url: str


class Message(BaseModel):
    """One inbox entry. ``intent_id`` is set for fan-out deliveries."""
    id: str = Field(default_factory=new_id)
    title: str
    body: str
    date: datetime = Field(default_factory=utcnow)
    status: MessageStatus = "unread"
    links: list[MessageLink] = Field(default_factory=list)
    intent_id: Optional[str] = None


class MemberTask(BaseModel):
    """A task assigned directly to a member, with its own weighted evaluation."""
    id: str = Field(default_factory=new_id)
    title: str
    description: Optional[str] = None
    start_date: Optional[datetime] = None
    deadline: Optional[datetime] = None
    task_url: Optional[str] = None
    submission_link: str = UNSUBMITTED
    submission_date: Optional[datetime] = None
    head_evaluation: float = -1
    head_percent: float = 60
    deadline_evaluation: float = 0
    deadline_percent: float = 40
    rate: Optional[float] = None

    @property
    def is_submitted(self) -> bool:
        return bool(self.submission_link) and self.submission_link != UNSUBMITTED


class Member(Document):
    name: str
    email: str
    committee: str
    role: Role = "not-accepted"
    inbox: list[Message] = Field(default_factory=list)
    tasks: list[MemberTask] = Field(default_factory=list)
    rate: Optional[float] = None
    created_at: datetime = Field(default_factory=utcnow)

    def completed_task_count(self) -> int:
        return sum(1 for task in self.tasks if task.is_submitted)


# ── Track ──

class Applicant(BaseModel):
    id: str = Field(default_factory=new_id)
    member_id: str
    status: ApplicantStatus = "pending"
    applied_at: datetime = Field(default_factory=utcnow)
    decided_at: Optional[datetime] = None


class Track(Document):
    name: str
    description: str = ""
    committee: str
    members: list[str] = Field(default_factory=list)
    applicants: list[Applicant] = Field(default_factory=list)
    supervisors: list[str] = Field(default_factory=list)
    hrs: list[str] = Field(default_factory=list)
    courses: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)

    def find_applicant(self, member_id: str) -> Optional[Applicant]:
        """First applicant entry for ``member_id`` in list order."""
        return next((a for a in self.applicants if a.member_id == member_id), None)


# ── Course ──

class Submission(BaseModel):
    id: str = Field(default_factory=new_id)
    member_id: str
    link: str = UNSUBMITTED
    submission_date: datetime = Field(default_factory=utcnow)
    head_evaluation: float = Field(default=0, ge=0, le=100)
    deadline_evaluation: float = Field(default=0, ge=0, le=100)
    rate: Optional[float] = None
    notes: Optional[str] = None


class Task(BaseModel):
    id: str = Field(default_factory=new_id)
    title: str
    description: Optional[str] = None
    start_date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    task_url: Optional[str] = None
    head_percent: float = 50
    deadline_percent: float = 20
    submissions: list[Submission] = Field(default_factory=list)


class Course(Document):
    name: str
    description: str = ""
    committee: str
    tracks: list[str] = Field(default_factory=list)
    admins: list[str] = Field(default_factory=list)
    tasks: list[Task] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)

    def find_task(self, task_id: str) -> Optional[Task]:
        return next((t for t in self.tasks if t.id == task_id), None)


# ── Announcement ──

class Announcement(Document):
    title: str
    content: str
    expiry_date: datetime
    creator_id: str
    track_id: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: Optional[datetime] = None

    def is_expired(self, now: datetime) -> bool:
        expiry = self.expiry_date
        if expiry.tzinfo is None:
            expiry = expiry.replace(tzinfo=timezone.utc)
        return expiry < now
