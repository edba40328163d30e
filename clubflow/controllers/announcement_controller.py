# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Controller: Announcements — create/update broadcast, lazy-expiring lists."""
from fastapi import APIRouter, Depends

from clubflow.core.dependencies import get_announcement_service
from clubflow.core.security import get_current_email
from clubflow.schemas import AnnouncementCreate, AnnouncementUpdate, envelope
from clubflow.services.announcement_service import AnnouncementService

router = APIRouter(prefix="/api/v1/announcements", tags=["Announcements"])


@router.post("", status_code=201)
def create_announcement(body: AnnouncementCreate,
                        email: str = Depends(get_current_email),
                        service: AnnouncementService = Depends(get_announcement_service)):
    result = service.create(email, body.title, body.content, body.expiry_date, body.track_id)
    return envelope(result, "Announcement created and broadcast")


@router.get("")
def list_for_committee(email: str = Depends(get_current_email),
                       service: AnnouncementService = Depends(get_announcement_service)):
    return envelope(service.list_for_committee(email), "Announcements retrieved successfully")


@router.get("/track/{track_id}")
def list_for_track(track_id: str,
                   email: str = Depends(get_current_email),
                   service: AnnouncementService = Depends(get_announcement_service)):
    return envelope(service.list_for_track(track_id, email), "Announcements retrieved successfully")


@router.post("/broadcasts/resume")
def resume_broadcasts(email: str = Depends(get_current_email),
                      service: AnnouncementService = Depends(get_announcement_service)):
    return envelope(service.resume_pending_broadcasts(email), "Pending broadcasts resumed")


@router.put("/{announcement_id}")
def update_announcement(announcement_id: str, body: AnnouncementUpdate,
                        email: str = Depends(get_current_email),
                        service: AnnouncementService = Depends(get_announcement_service)):
    result = service.update(
        email, announcement_id,
        title=body.title, content=body.content, expiry_date=body.expiry_date,
    )
    return envelope(result, "Announcement updated and broadcast")


@router.delete("/{announcement_id}")
def delete_announcement(announcement_id: str,
                        email: str = Depends(get_current_email),
                        service: AnnouncementService = Depends(get_announcement_service)):
    announcement = service.delete(email, announcement_id)
    return envelope({"id": announcement.id}, "Announcement deleted successfully")
