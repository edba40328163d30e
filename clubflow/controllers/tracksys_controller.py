# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Controller: Track system — snapshot and leaderboards (awa2l)."""
from fastapi import APIRouter, Depends

from clubflow.core.dependencies import get_aggregator_service
from clubflow.core.security import get_current_email
from clubflow.schemas import envelope
from clubflow.services.aggregator_service import AggregatorService

router = APIRouter(prefix="/api/v1/tracksys", tags=["Track system"])


@router.get("/all")
def snapshot(email: str = Depends(get_current_email),
             service: AggregatorService = Depends(get_aggregator_service)):
    return envelope(service.snapshot(email), "Track system data retrieved successfully")


@router.get("/awa2l")
def leaderboard(email: str = Depends(get_current_email),
                service: AggregatorService = Depends(get_aggregator_service)):
    return envelope(service.leaderboard(email), "Top performers data retrieved successfully")


@router.get("/awa2l/{track_id}")
def track_leaderboard(track_id: str,
                      email: str = Depends(get_current_email),
                      service: AggregatorService = Depends(get_aggregator_service)):
    return envelope(service.leaderboard(email, track_id),
                    "Track top performers retrieved successfully")
