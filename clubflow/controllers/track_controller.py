# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Controller: Tracks — CRUD, member sets, and the applicant pipeline."""
from typing import Optional

from fastapi import APIRouter, Depends

from clubflow.core.dependencies import get_track_service
from clubflow.core.security import get_current_email
from clubflow.schemas import TrackCreate, TrackUpdate, envelope
from clubflow.services.track_service import TrackService

router = APIRouter(prefix="/api/v1", tags=["Tracks"])


# ── Track CRUD ──

@router.post("/tracks", status_code=201)
def create_track(body: TrackCreate,
                 email: str = Depends(get_current_email),
                 service: TrackService = Depends(get_track_service)):
    track = service.create_track(email, body.name, body.description)
    return envelope(track, "Track created successfully")


@router.get("/tracks")
def list_tracks(committee: Optional[str] = None,
                email: str = Depends(get_current_email),
                service: TrackService = Depends(get_track_service)):
    return envelope(service.list_tracks(committee), "Tracks retrieved successfully")


@router.get("/tracks/{track_id}")
def get_track(track_id: str,
              email: str = Depends(get_current_email),
              service: TrackService = Depends(get_track_service)):
    return envelope(service.get_track(track_id), "Track retrieved successfully")


@router.patch("/tracks/{track_id}")
def update_track(track_id: str, body: TrackUpdate,
                 email: str = Depends(get_current_email),
                 service: TrackService = Depends(get_track_service)):
    track = service.update_track(email, track_id, name=body.name, description=body.description)
    return envelope(track, "Track updated successfully")


@router.delete("/tracks/{track_id}")
def delete_track(track_id: str,
                 email: str = Depends(get_current_email),
                 service: TrackService = Depends(get_track_service)):
    track = service.delete_track(email, track_id)
    return envelope({"id": track.id}, "Track deleted successfully")


# ── Applicants ──

@router.post("/tracks/{track_id}/apply")
def apply(track_id: str,
          email: str = Depends(get_current_email),
          service: TrackService = Depends(get_track_service)):
    track = service.apply(track_id, email)
    return envelope(track, "Application submitted successfully")


@router.put("/tracks/{track_id}/applicants/{member_id}/accept")
def accept_applicant(track_id: str, member_id: str,
                     email: str = Depends(get_current_email),
                     service: TrackService = Depends(get_track_service)):
    result = service.decide(track_id, member_id, "accepted", email)
    return envelope(result, "Applicant accepted and notified")


@router.put("/tracks/{track_id}/applicants/{member_id}/reject")
def reject_applicant(track_id: str, member_id: str,
                     email: str = Depends(get_current_email),
                     service: TrackService = Depends(get_track_service)):
    result = service.decide(track_id, member_id, "rejected", email)
    return envelope(result, "Applicant rejected and notified")


@router.get("/tracks/{track_id}/applicants")
def list_applicants(track_id: str,
                    email: str = Depends(get_current_email),
                    service: TrackService = Depends(get_track_service)):
    return envelope(service.list_applicants(track_id, email), "Applicants retrieved successfully")


@router.get("/applicants")
def list_committee_applicants(email: str = Depends(get_current_email),
                              service: TrackService = Depends(get_track_service)):
    return envelope(service.list_committee_applicants(email), "Applicants retrieved successfully")


@router.get("/applicants/mine")
def my_applications(email: str = Depends(get_current_email),
                    service: TrackService = Depends(get_track_service)):
    return envelope(service.my_applications(email), "Applications retrieved successfully")


# ── Member sets (members | supervisors | hrs) ──

@router.put("/tracks/{track_id}/{set_name}/{member_id}")
def add_to_set(track_id: str, set_name: str, member_id: str,
               email: str = Depends(get_current_email),
               service: TrackService = Depends(get_track_service)):
    track = service.add_to_set(track_id, member_id, set_name, email)
    return envelope(track, f"Member added to {set_name}")


@router.delete("/tracks/{track_id}/{set_name}/{member_id}")
def remove_from_set(track_id: str, set_name: str, member_id: str,
                    email: str = Depends(get_current_email),
                    service: TrackService = Depends(get_track_service)):
    track = service.remove_from_set(track_id, member_id, set_name, email)
    return envelope(track, f"Member removed from {set_name}")
