# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Controller: Courses — CRUD, track links, tasks, submissions, rating."""
from typing import Optional

from fastapi import APIRouter, Depends

from clubflow.core.dependencies import get_course_service
from clubflow.core.security import get_current_email
from clubflow.schemas import (
    CourseCreate,
    RatingRequest,
    SubmissionRequest,
    TaskCreate,
    TaskUpdate,
    envelope,
)
from clubflow.services.course_service import CourseService

router = APIRouter(prefix="/api/v1/courses", tags=["Courses"])


# ── Cross-course reads and repair (declared before /{course_id}) ──

@router.post("/reconcile")
def reconcile_mirror(email: str = Depends(get_current_email),
                     service: CourseService = Depends(get_course_service)):
    return envelope(service.reconcile_mirror(email), "Course/track links reconciled")


@router.get("/tasks/completed")
def completed_tasks(course_id: Optional[str] = None,
                    member_id: Optional[str] = None,
                    email: str = Depends(get_current_email),
                    service: CourseService = Depends(get_course_service)):
    return envelope(service.get_completed_tasks(course_id, member_id),
                    "Completed tasks retrieved successfully")


@router.get("/tasks/mine")
def my_tasks(email: str = Depends(get_current_email),
             service: CourseService = Depends(get_course_service)):
    return envelope(service.my_tasks(email), "Tasks retrieved successfully")


# ── Course CRUD ──

@router.post("", status_code=201)
def create_course(body: CourseCreate,
                  email: str = Depends(get_current_email),
                  service: CourseService = Depends(get_course_service)):
    course = service.create_course(
        email, body.name, body.description, body.track_id,
        admins=body.admins, committee=body.committee,
    )
    return envelope(course, "Course created successfully")


@router.get("")
def list_courses(committee: Optional[str] = None,
                 email: str = Depends(get_current_email),
                 service: CourseService = Depends(get_course_service)):
    return envelope(service.list_courses(committee), "Courses retrieved successfully")


@router.get("/{course_id}")
def get_course(course_id: str,
               email: str = Depends(get_current_email),
               service: CourseService = Depends(get_course_service)):
    return envelope(service.get_course(course_id), "Course retrieved successfully")


@router.delete("/{course_id}")
def delete_course(course_id: str,
                  email: str = Depends(get_current_email),
                  service: CourseService = Depends(get_course_service)):
    course = service.delete_course(email, course_id)
    return envelope({"id": course.id}, "Course deleted successfully")


# ── Track links ──

@router.post("/{course_id}/tracks/{track_id}")
def add_track(course_id: str, track_id: str,
              email: str = Depends(get_current_email),
              service: CourseService = Depends(get_course_service)):
    course = service.add_track_to_course(email, course_id, track_id)
    return envelope(course, "Track linked to course")


@router.delete("/{course_id}/tracks/{track_id}")
def remove_track(course_id: str, track_id: str,
                 email: str = Depends(get_current_email),
                 service: CourseService = Depends(get_course_service)):
    course = service.remove_track_from_course(email, course_id, track_id)
    return envelope(course, "Track unlinked from course")


# ── Tasks ──

@router.post("/{course_id}/tasks", status_code=201)
def add_task(course_id: str, body: TaskCreate,
             email: str = Depends(get_current_email),
             service: CourseService = Depends(get_course_service)):
    task = service.add_task(email, course_id, **body.model_dump())
    return envelope(task, "Task added successfully")


@router.get("/{course_id}/tasks")
def list_tasks(course_id: str,
               email: str = Depends(get_current_email),
               service: CourseService = Depends(get_course_service)):
    return envelope(service.list_tasks(course_id), "Tasks retrieved successfully")


@router.put("/{course_id}/tasks/{task_id}")
def update_task(course_id: str, task_id: str, body: TaskUpdate,
                email: str = Depends(get_current_email),
                service: CourseService = Depends(get_course_service)):
    task = service.update_task(email, course_id, task_id, body.model_dump(exclude_unset=True))
    return envelope(task, "Task updated successfully")


@router.delete("/{course_id}/tasks/{task_id}")
def remove_task(course_id: str, task_id: str,
                email: str = Depends(get_current_email),
                service: CourseService = Depends(get_course_service)):
    task = service.remove_task(email, course_id, task_id)
    return envelope({"id": task.id}, "Task removed successfully")


# ── Submissions ──

@router.post("/{course_id}/tasks/{task_id}/submit")
def submit_task(course_id: str, task_id: str, body: SubmissionRequest,
                email: str = Depends(get_current_email),
                service: CourseService = Depends(get_course_service)):
    submission = service.submit_task(course_id, task_id, email, body.link)
    return envelope(submission, "Task submitted successfully")


@router.get("/{course_id}/tasks/{task_id}/submissions")
def list_submissions(course_id: str, task_id: str,
                     email: str = Depends(get_current_email),
                     service: CourseService = Depends(get_course_service)):
    return envelope(service.list_submissions(course_id, task_id, email),
                    "Submissions retrieved successfully")


@router.put("/{course_id}/tasks/{task_id}/submissions/{submission_id}/rate")
def rate_submission(course_id: str, task_id: str, submission_id: str, body: RatingRequest,
                    email: str = Depends(get_current_email),
                    service: CourseService = Depends(get_course_service)):
    submission = service.rate_submission(
        course_id, task_id, submission_id, email,
        rating=body.rating, head_evaluation=body.head_evaluation,
        deadline_evaluation=body.deadline_evaluation, notes=body.notes,
    )
    return envelope(submission, "Submission rated successfully")
