# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Controller: Members — registration, profile, inbox, roles, assigned tasks."""
from typing import Optional

from fastapi import APIRouter, Depends

from clubflow.core.dependencies import get_member_service
from clubflow.core.security import get_current_email
from clubflow.schemas import (
    EvaluationRequest,
    MemberTaskCreate,
    MessageStatusUpdate,
    RegisterRequest,
    RoleChange,
    SubmissionRequest,
    envelope,
)
from clubflow.services.member_service import MemberService

router = APIRouter(prefix="/api/v1/members", tags=["Members"])


@router.post("/register", status_code=201)
def register(body: RegisterRequest,
             service: MemberService = Depends(get_member_service)):
    member = service.register(body.name, body.email, body.committee)
    return envelope(member, "Member registered successfully")


@router.get("/me")
def get_profile(email: str = Depends(get_current_email),
                service: MemberService = Depends(get_member_service)):
    return envelope(service.get_profile(email), "Profile retrieved successfully")


@router.get("/me/inbox")
def list_inbox(status: Optional[str] = None,
               email: str = Depends(get_current_email),
               service: MemberService = Depends(get_member_service)):
    return envelope(service.list_inbox(email, status), "Inbox retrieved successfully")


@router.patch("/me/inbox/{message_id}")
def set_message_status(message_id: str, body: MessageStatusUpdate,
                       email: str = Depends(get_current_email),
                       service: MemberService = Depends(get_member_service)):
    message = service.set_message_status(email, message_id, body.status)
    return envelope(message, "Message updated successfully")


@router.post("/me/tasks/{task_id}/submit")
def submit_member_task(task_id: str, body: SubmissionRequest,
                       email: str = Depends(get_current_email),
                       service: MemberService = Depends(get_member_service)):
    task = service.submit_member_task(email, task_id, body.link)
    return envelope(task, "Task submitted successfully")


@router.patch("/{member_id}/role")
def change_role(member_id: str, body: RoleChange,
                email: str = Depends(get_current_email),
                service: MemberService = Depends(get_member_service)):
    member = service.change_role(email, member_id, body.role)
    return envelope(member, "Role updated successfully")


@router.post("/{member_id}/tasks", status_code=201)
def assign_task(member_id: str, body: MemberTaskCreate,
                email: str = Depends(get_current_email),
                service: MemberService = Depends(get_member_service)):
    task = service.assign_task(
        email, member_id, body.title,
        description=body.description, start_date=body.start_date,
        deadline=body.deadline, task_url=body.task_url,
        head_percent=body.head_percent, deadline_percent=body.deadline_percent,
    )
    return envelope(task, "Task assigned successfully")


@router.put("/{member_id}/tasks/{task_id}/evaluate")
def evaluate_member_task(member_id: str, task_id: str, body: EvaluationRequest,
                         email: str = Depends(get_current_email),
                         service: MemberService = Depends(get_member_service)):
    result = service.evaluate_member_task(
        email, member_id, task_id, body.head_evaluation, body.deadline_evaluation,
    )
    return envelope(result, "Task evaluated successfully")
