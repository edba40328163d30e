# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Members — registration, inbox, role changes, assigned tasks.
Every inbox write in the system goes through ``deliver``.
"""

from datetime import datetime
from typing import Any, Optional

from sqlalchemy.exc import IntegrityError

from clubflow.core.errors import Conflict, NotFound, ValidationFailure
from clubflow.core.logging import get_logger
from clubflow.metrics import MEMBERS_REGISTERED
from clubflow.models.domain import (
    MESSAGE_STATUSES,
    ROLES,
    Member,
    MemberTask,
    Message,
    utcnow,
)
from clubflow.repositories.member_repository import MemberRepository
from clubflow.services.authorization import AuthorizationGate
from clubflow.services.unit_of_work import retry_on_conflict

logger = get_logger(__name__)


class MemberService:
    """Business logic for member records and their inboxes."""

    def __init__(self, member_repo: MemberRepository, gate: AuthorizationGate) -> None:
        self._members = member_repo
        self._gate = gate

    # ── Registration ──

    def register(self, name: str, email: str, committee: str,
                 role: str = "not-accepted") -> Member:
        """Create a member. Raises Conflict when the email is taken."""
        if role not in ROLES:
            raise ValidationFailure(f"role must be one of {ROLES}")
        email = email.strip().lower()
        if self._members.email_exists(email):
            raise Conflict(f"Email '{email}' is already registered")
        member = Member(name=name.strip(), email=email, committee=committee.strip(), role=role)
        try:
            self._members.insert(member)
        except IntegrityError:
            raise Conflict(f"Email '{email}' is already registered")
        MEMBERS_REGISTERED.set(self._members.count())
        logger.info("Member registered: email=%s committee=%s role=%s", email, committee, role)
        return member

    def seed_heads(self, raw: str) -> int:
        """Create head accounts from ``name|email|committee`` entries; existing emails are skipped."""
        created = 0
        for entry in raw.split(","):
            parts = [p.strip() for p in entry.split("|")]
            if len(parts) != 3 or not all(parts):
                continue
            name, email, committee = parts
            if self._members.email_exists(email.lower()):
                continue
            self.register(name, email, committee, role="head")
            created += 1
        if created:
            logger.info("Seeded %d head accounts", created)
        return created

    # ── Queries ──

    def get_member(self, member_id: str) -> Member:
        member = self._members.get(member_id)
        if member is None:
            raise NotFound(f"Member '{member_id}' not found")
        return member

    def get_profile(self, requester_email: str) -> Member:
        return self._gate.resolve(requester_email)

    def list_inbox(self, requester_email: str, status: Optional[str] = None) -> list[Message]:
        member = self._gate.resolve(requester_email)
        if status is not None and status not in MESSAGE_STATUSES:
            raise ValidationFailure(f"status must be one of {MESSAGE_STATUSES}")
        return [m for m in member.inbox if status is None or m.status == status]

    # ── Inbox ──

    def deliver(self, member_id: str, message: Message) -> bool:
        """
        Append ``message`` to a member's inbox.
        Returns False without writing when a message of the same fan-out
        intent is already there.
        """
        def attempt() -> bool:
            member = self.get_member(member_id)
            if message.intent_id and any(
                m.intent_id == message.intent_id for m in member.inbox
            ):
                return False
            member.inbox.append(message.model_copy())
            self._members.save(member)
            return True

        return retry_on_conflict(attempt, "inbox_delivery")

    def set_message_status(self, requester_email: str, message_id: str, status: str) -> Message:
        if status not in MESSAGE_STATUSES:
            raise ValidationFailure(f"status must be one of {MESSAGE_STATUSES}")

        def attempt() -> Message:
            member = self._gate.resolve(requester_email)
            message = next((m for m in member.inbox if m.id == message_id), None)
            if message is None:
                raise NotFound(f"Message '{message_id}' not found")
            message.status = status
            self._members.save(member)
            return message

        return retry_on_conflict(attempt, "message_status")

    # ── Role changes ──

    def change_role(self, requester_email: str, member_id: str, role: str) -> Member:
        """Head of the target member's committee sets their role."""
        if role not in ROLES:
            raise ValidationFailure(f"role must be one of {ROLES}")

        def attempt() -> Member:
            requester = self._gate.resolve(requester_email)
            member = self.get_member(member_id)
            self._gate.require_head_of_committee(requester, member.committee, "change member roles")
            if member.role != role:
                logger.info("Role change: member=%s %s -> %s by %s",
                            member.email, member.role, role, requester.email)
                member.role = role
                self._members.save(member)
            return member

        return retry_on_conflict(attempt, "change_role")

    # ── Assigned tasks ──

    def assign_task(self, requester_email: str, member_id: str, title: str,
                    description: Optional[str] = None,
                    start_date: Optional[datetime] = None,
                    deadline: Optional[datetime] = None,
                    task_url: Optional[str] = None,
                    head_percent: float = 60,
                    deadline_percent: float = 40) -> MemberTask:
        if head_percent + deadline_percent > 100:
            raise ValidationFailure("head_percent + deadline_percent must not exceed 100")
        task = MemberTask(
            title=title, description=description, start_date=start_date,
            deadline=deadline, task_url=task_url,
            head_percent=head_percent, deadline_percent=deadline_percent,
        )

        def attempt() -> MemberTask:
            requester = self._gate.resolve(requester_email)
            member = self.get_member(member_id)
            self._gate.require_head_of_committee(requester, member.committee, "assign tasks")
            member.tasks.append(task)
            self._members.save(member)
            return task

        result = retry_on_conflict(attempt, "assign_task")
        logger.info("Task assigned: member=%s task=%s", member_id, task.id)
        return result

    def submit_member_task(self, requester_email: str, task_id: str, link: str) -> MemberTask:
        if not link or not link.strip():
            raise ValidationFailure("submission link is required")

        def attempt() -> MemberTask:
            member = self._gate.resolve(requester_email)
            task = next((t for t in member.tasks if t.id == task_id), None)
            if task is None:
                raise NotFound(f"Task '{task_id}' not found")
            task.submission_link = link.strip()
            task.submission_date = utcnow()
            self._members.save(member)
            return task

        return retry_on_conflict(attempt, "submit_member_task")

    def evaluate_member_task(self, requester_email: str, member_id: str, task_id: str,
                             head_evaluation: float,
                             deadline_evaluation: float) -> dict[str, Any]:
        """Score a member task and refresh the member's overall rate."""
        def attempt() -> dict[str, Any]:
            requester = self._gate.resolve(requester_email)
            member = self.get_member(member_id)
            self._gate.require_head_of_committee(requester, member.committee, "evaluate tasks")
            task = next((t for t in member.tasks if t.id == task_id), None)
            if task is None:
                raise NotFound(f"Task '{task_id}' not found")
            task.head_evaluation = head_evaluation
            task.deadline_evaluation = deadline_evaluation
            task.rate = round(
                (head_evaluation * task.head_percent
                 + deadline_evaluation * task.deadline_percent) / 100,
                2,
            )
            rated = [t.rate for t in member.tasks if t.rate is not None]
            member.rate = round(sum(rated) / len(rated), 2) if rated else None
            self._members.save(member)
            return {"task": task, "member_rate": member.rate}

        return retry_on_conflict(attempt, "evaluate_member_task")
