"""
Admin console routes: partners, track contracts, allocation and settlement status.
"""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, or_
from sqlalchemy.orm import Session
from typing import List, Optional
from app.db.session import get_db
from app.models.user import User
from app.models.partner import Partner, PartnerTrack, PartnerType
from app.models.partner_settlement import PartnerSettlement, SettlementStatus
from app.schemas.partner import (
    PartnerSummary, PartnerProfile, PartnerDetailResponse,
    PartnerTrackCreate, PartnerTrackResponse
)
from app.schemas.settlement import (
    AllocateRequest, AllocateResponse, StatusUpdateRequest,
    PartnerSettlementResponse, SettlementDetailResponse, SettlementWithDetailsResponse
)
from app.services import allocation_service, contract_service, lifecycle_service, settlement_service
from app.api.dependencies import require_admin

router = APIRouter(prefix="/partner/admin", tags=["partner-admin"])


def settlement_response(settlement: PartnerSettlement) -> PartnerSettlementResponse:
    """Build the list representation of a settlement."""
    response = PartnerSettlementResponse.model_validate(settlement)
    if settlement.partner is not None:
        response.business_name = settlement.partner.business_name
    return response


def settlement_detail_response(settlement: PartnerSettlement) -> SettlementWithDetailsResponse:
    """Build the settlement representation including its track lines."""
    details = []
    for line in sorted(settlement.details, key=lambda d: d.partner_share, reverse=True):
        detail = SettlementDetailResponse.model_validate(line)
        if line.track is not None:
            detail.track_title = line.track.title
            detail.track_artist = line.track.artist
        if line.distributor is not None:
            detail.distributor_name = line.distributor.name
        details.append(detail)
    return SettlementWithDetailsResponse(
        settlement=settlement_response(settlement),
        memo=settlement.memo,
        details=details
    )


def partner_track_response(contract: PartnerTrack) -> PartnerTrackResponse:
    response = PartnerTrackResponse.model_validate(contract)
    if contract.track is not None:
        response.title = contract.track.title
        response.artist = contract.track.artist
        response.album = contract.track.album
    return response


def get_partner_or_404(partner_id: int, db: Session) -> Partner:
    partner = settlement_service.get_partner(db, partner_id)
    if not partner:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Partner not found"
        )
    return partner


# Partners

@router.get("/partners", response_model=List[PartnerSummary])
async def list_partners(
    type: Optional[PartnerType] = None,
    status_filter: Optional[str] = Query(default=None, alias="status", pattern="^(active|inactive)$"),
    search: Optional[str] = None,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """List partners with their active track count and lifetime settlement total."""
    track_count = db.query(func.count(PartnerTrack.id)).filter(
        PartnerTrack.partner_id == Partner.id,
        PartnerTrack.is_active.is_(True)
    ).correlate(Partner).scalar_subquery()
    
    query = db.query(Partner, User.email, track_count).outerjoin(User, Partner.user_id == User.id)
    
    if type is not None:
        query = query.filter(Partner.partner_type == type)
    if status_filter == "active":
        query = query.filter(Partner.is_active.is_(True))
    elif status_filter == "inactive":
        query = query.filter(Partner.is_active.is_(False))
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(
            Partner.business_name.ilike(pattern),
            Partner.representative_name.ilike(pattern),
            User.email.ilike(pattern)
        ))
    
    rows = query.order_by(Partner.created_at.desc(), Partner.id.desc()).all()
    
    partners = []
    for partner, email, count in rows:
        summary = PartnerSummary.model_validate(partner)
        summary.email = email
        summary.track_count = count or 0
        summary.total_settlement = settlement_service.partner_settlement_total(db, partner.id)
        partners.append(summary)
    return partners


@router.get("/partners/{partner_id}", response_model=PartnerDetailResponse)
async def get_partner(
    partner_id: int,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Get a partner with its tracks and the last twelve settlements."""
    partner = get_partner_or_404(partner_id, db)
    tracks = contract_service.list_partner_tracks(db, partner_id)
    recent = db.query(PartnerSettlement).filter(
        PartnerSettlement.partner_id == partner_id
    ).order_by(PartnerSettlement.year_month.desc()).limit(12).all()
    
    return PartnerDetailResponse(
        partner=PartnerProfile.model_validate(partner),
        tracks=[partner_track_response(t) for t in tracks],
        recent_settlements=[settlement_response(s) for s in recent]
    )


# Partner tracks

@router.get("/partners/{partner_id}/tracks", response_model=List[PartnerTrackResponse])
async def list_partner_tracks(
    partner_id: int,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """List every contract of a partner, active ones first."""
    get_partner_or_404(partner_id, db)
    return [partner_track_response(t) for t in contract_service.list_partner_tracks(db, partner_id)]


@router.post(
    "/partners/{partner_id}/tracks",
    response_model=PartnerTrackResponse,
    status_code=status.HTTP_201_CREATED
)
async def assign_track(
    partner_id: int,
    track_data: PartnerTrackCreate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Assign a track to a partner, or update and reactivate the existing contract."""
    contract = contract_service.assign_track(
        db,
        partner_id=partner_id,
        track_id=track_data.track_id,
        share_rate=track_data.share_rate,
        role=track_data.role,
        contract_start_date=track_data.contract_start_date,
        contract_end_date=track_data.contract_end_date
    )
    return partner_track_response(contract)


@router.delete("/partners/{partner_id}/tracks/{track_id}")
async def unassign_track(
    partner_id: int,
    track_id: int,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Deactivate a partner's contract on a track."""
    contract_service.unassign_track(db, partner_id, track_id)
    return {"message": "Track unassigned successfully"}


# Settlements

@router.post("/settlements/allocate", response_model=AllocateResponse)
async def allocate_settlements(
    request: AllocateRequest,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Allocate a month of ledger revenue to partner settlements."""
    result = allocation_service.allocate(
        db, request.year_month, force=request.force, run_by=admin.id
    )
    return AllocateResponse(
        message="Settlement allocation completed",
        year_month=result.year_month,
        allocated_partners=result.allocated_partners,
        created_partner_ids=result.created,
        updated_partner_ids=result.updated,
        unallocated_net_revenue=result.unallocated_net_revenue
    )


@router.get("/settlements", response_model=List[PartnerSettlementResponse])
async def list_settlements(
    partner_id: Optional[int] = Query(default=None, alias="partnerId"),
    year_month: Optional[str] = Query(default=None, alias="yearMonth"),
    status_filter: Optional[SettlementStatus] = Query(default=None, alias="status"),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """List partner settlements, newest month first."""
    settlements = settlement_service.list_settlements(
        db, partner_id=partner_id, year_month=year_month, status=status_filter
    )
    return [settlement_response(s) for s in settlements]


@router.get("/settlements/{settlement_id}", response_model=SettlementWithDetailsResponse)
async def get_settlement(
    settlement_id: int,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Get a settlement with its per-track lines."""
    settlement = settlement_service.get_settlement_with_details(db, settlement_id)
    return settlement_detail_response(settlement)


@router.put("/settlements/{settlement_id}/status", response_model=PartnerSettlementResponse)
async def update_settlement_status(
    settlement_id: int,
    request: StatusUpdateRequest,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Confirm a pending settlement or mark a confirmed one as paid."""
    settlement = lifecycle_service.transition(
        db, settlement_id, request.status, payment_ref=request.payment_ref
    )
    return settlement_response(settlement)
