# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Task status and rate logic — pure computation, no side effects.
"""

from typing import Optional

from clubflow.models.domain import Submission, Task


def first_submission(member_id: str, task: Task) -> Optional[Submission]:
    """The member's first submission in list order, if any."""
    return next((s for s in task.submissions if s.member_id == member_id), None)


def derive_status(member_id: str, task: Task) -> str:
    """
    pending   — no submission by the member
    submitted — the member's first submission has no rate yet
    completed — the member's first submission is rated
    Later submissions by the same member do not change the outcome.
    """
    submission = first_submission(member_id, task)
    if submission is None:
        return "pending"
    return "submitted" if submission.rate is None else "completed"


def weighted_rate(task: Task, head_evaluation: float, deadline_evaluation: float) -> float:
    """Rate from the two evaluations using the task's percentage split."""
    return round(
        (head_evaluation * task.head_percent + deadline_evaluation * task.deadline_percent) / 100,
        2,
    )
