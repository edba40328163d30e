# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Pydantic request/response schemas."""
from datetime import datetime
from typing import Any, List, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator

from clubflow.models.domain import MESSAGE_STATUSES, ROLES


def envelope(data: Any = None, message: str = "") -> dict:
    """Success envelope shared by every business route."""
    return {"success": True, "data": data, "message": message}


# ── Members ──

class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    email: str = Field(..., min_length=3, max_length=255)
    committee: str = Field(..., min_length=1, max_length=100)

    @field_validator("email")
    @classmethod
    def normalise_email(cls, v: str) -> str:
        v = v.strip().lower()
        if "@" not in v:
            raise ValueError("email must contain '@'")
        return v


class RoleChange(BaseModel):
    role: str

    @field_validator("role")
    @classmethod
    def check_role(cls, v: str) -> str:
        if v not in ROLES:
            raise ValueError(f"role must be one of {ROLES}")
        return v


class MessageStatusUpdate(BaseModel):
    status: str

    @field_validator("status")
    @classmethod
    def normalise_status(cls, v: str) -> str:
        v = v.lower().strip()
        if v not in MESSAGE_STATUSES:
            raise ValueError(f"status must be one of {MESSAGE_STATUSES}")
        return v


class MemberTaskCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=300)
    description: Optional[str] = Field(None, max_length=5000)
    start_date: Optional[datetime] = None
    deadline: Optional[datetime] = None
    task_url: Optional[str] = None
    head_percent: float = Field(60, ge=0, le=100)
    deadline_percent: float = Field(40, ge=0, le=100)


class SubmissionRequest(BaseModel):
    link: str = Field(..., min_length=1, max_length=2000,
                      validation_alias=AliasChoices("link", "submission_link"))


class EvaluationRequest(BaseModel):
    head_evaluation: float = Field(..., ge=0, le=100)
    deadline_evaluation: float = Field(..., ge=0, le=100)


# ── Tracks ──

class TrackCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field("", max_length=5000)


class TrackUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=5000)


# ── Courses ──

class CourseCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field("", max_length=5000)
    track_id: str = Field(..., min_length=1, validation_alias=AliasChoices("track_id", "trackId"))
    admins: List[str] = Field(default_factory=list)
    committee: Optional[str] = None


class TaskCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=300)
    description: Optional[str] = Field(None, max_length=5000)
    start_date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    task_url: Optional[str] = None
    head_percent: float = Field(50, ge=0, le=100)
    deadline_percent: float = Field(20, ge=0, le=100)


class TaskUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=300)
    description: Optional[str] = Field(None, max_length=5000)
    start_date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    task_url: Optional[str] = None
    head_percent: Optional[float] = Field(None, ge=0, le=100)
    deadline_percent: Optional[float] = Field(None, ge=0, le=100)


class RatingRequest(BaseModel):
    rating: Optional[float] = Field(None, ge=0, le=100)
    head_evaluation: Optional[float] = Field(None, ge=0, le=100)
    deadline_evaluation: Optional[float] = Field(None, ge=0, le=100)
    notes: Optional[str] = Field(None, max_length=5000)


# ── Announcements ──

class AnnouncementCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=300)
    content: str = Field(..., min_length=1, max_length=10000)
    expiry_date: datetime = Field(
        ..., validation_alias=AliasChoices("expiry_date", "date_of_delete", "dateOfDelete")
    )
    track_id: Optional[str] = Field(None, validation_alias=AliasChoices("track_id", "trackId"))


class AnnouncementUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=300)
    content: Optional[str] = Field(None, min_length=1, max_length=10000)
    expiry_date: Optional[datetime] = Field(
        None, validation_alias=AliasChoices("expiry_date", "date_of_delete", "dateOfDelete")
    )


class ErrorResponse(BaseModel):
    success: bool = False
    message: str
    request_id: Optional[str] = None
    data: Optional[Any] = None
