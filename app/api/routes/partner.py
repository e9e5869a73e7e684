"""
Partner-facing routes; every query is scoped to the caller's partner profile.
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from app.db.session import get_db
from app.models.partner import Partner
from app.schemas.partner import PartnerTrackResponse, PartnerProfile
from app.schemas.settlement import (
    PartnerSettlementResponse, SettlementWithDetailsResponse,
    DashboardResponse, DashboardSummary
)
from app.schemas.notification import NotificationResponse, MarkAllReadResponse
from app.services import contract_service, notification_service, settlement_service
from app.api.dependencies import get_current_partner
from app.api.routes.partner_admin import (
    settlement_response, settlement_detail_response, partner_track_response
)

router = APIRouter(prefix="/partner", tags=["partner"])


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(
    partner: Partner = Depends(get_current_partner),
    db: Session = Depends(get_db)
):
    """Lifetime totals and the last six months for the current partner."""
    data = settlement_service.partner_dashboard(db, partner.id)
    recent = data.pop("recent_settlements")
    return DashboardResponse(
        partner_id=partner.id,
        business_name=partner.business_name,
        summary=DashboardSummary(**data),
        recent_settlements=[settlement_response(s) for s in recent]
    )


@router.get("/settlements", response_model=List[PartnerSettlementResponse])
async def list_my_settlements(
    year: Optional[str] = Query(default=None, pattern=r"^\d{4}$"),
    partner: Partner = Depends(get_current_partner),
    db: Session = Depends(get_db)
):
    """List the current partner's settlements, optionally for one year."""
    settlements = settlement_service.list_settlements(db, partner_id=partner.id, year=year)
    return [settlement_response(s) for s in settlements]


@router.get("/settlements/{settlement_id}", response_model=SettlementWithDetailsResponse)
async def get_my_settlement(
    settlement_id: int,
    partner: Partner = Depends(get_current_partner),
    db: Session = Depends(get_db)
):
    """Get one of the current partner's settlements with its track lines."""
    settlement = settlement_service.get_settlement_with_details(db, settlement_id, partner_id=partner.id)
    return settlement_detail_response(settlement)


@router.get("/tracks", response_model=List[PartnerTrackResponse])
async def list_my_tracks(
    partner: Partner = Depends(get_current_partner),
    db: Session = Depends(get_db)
):
    """List the current partner's track contracts."""
    return [partner_track_response(t) for t in contract_service.list_partner_tracks(db, partner.id)]


@router.get("/notifications", response_model=List[NotificationResponse])
async def list_notifications(
    partner: Partner = Depends(get_current_partner),
    db: Session = Depends(get_db)
):
    """Most recent settlement notifications."""
    return notification_service.list_for_partner(db, partner.id)


@router.put("/notifications/read-all", response_model=MarkAllReadResponse)
async def mark_all_notifications_read(
    partner: Partner = Depends(get_current_partner),
    db: Session = Depends(get_db)
):
    """Mark every notification as read."""
    updated = notification_service.mark_all_read(db, partner.id)
    return MarkAllReadResponse(message="All notifications marked as read", updated=updated)


@router.put("/notifications/{notification_id}/read", response_model=NotificationResponse)
async def mark_notification_read(
    notification_id: int,
    partner: Partner = Depends(get_current_partner),
    db: Session = Depends(get_db)
):
    """Mark one notification as read."""
    return notification_service.mark_read(db, partner.id, notification_id)


@router.get("/profile", response_model=PartnerProfile)
async def get_profile(partner: Partner = Depends(get_current_partner)):
    """Get the current partner's profile."""
    return partner
