"""
Read-side queries over partner settlements for the admin console and the
partner dashboard.
"""
from typing import List, Optional, Dict, Any
from decimal import Decimal
from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload
from app.core.exceptions import SettlementNotFoundError
from app.core.utils import validate_year_month
from app.models.partner import Partner, PartnerTrack
from app.models.partner_settlement import PartnerSettlement, PartnerSettlementDetail, SettlementStatus
from app.services.notification_service import count_unread


def list_settlements(
    db: Session,
    partner_id: Optional[int] = None,
    year_month: Optional[str] = None,
    status: Optional[SettlementStatus] = None,
    year: Optional[str] = None
) -> List[PartnerSettlement]:
    """Settlements filtered by partner, month, year or status; newest month first."""
    query = db.query(PartnerSettlement).options(joinedload(PartnerSettlement.partner))
    
    if partner_id is not None:
        query = query.filter(PartnerSettlement.partner_id == partner_id)
    if year_month:
        validate_year_month(year_month)
        query = query.filter(PartnerSettlement.year_month == year_month)
    if year:
        query = query.filter(PartnerSettlement.year_month.startswith(year, autoescape=True))
    if status is not None:
        query = query.filter(PartnerSettlement.status == status)
    
    return query.order_by(
        PartnerSettlement.year_month.desc(),
        PartnerSettlement.partner_share.desc()
    ).all()


def get_settlement_with_details(
    db: Session,
    settlement_id: int,
    partner_id: Optional[int] = None
) -> PartnerSettlement:
    """
    Load a settlement with its detail lines.
    
    When partner_id is given, settlements of other partners are reported as
    not found.
    """
    query = db.query(PartnerSettlement).options(
        joinedload(PartnerSettlement.details).joinedload(PartnerSettlementDetail.track),
        joinedload(PartnerSettlement.details).joinedload(PartnerSettlementDetail.distributor),
    ).filter(PartnerSettlement.id == settlement_id)
    if partner_id is not None:
        query = query.filter(PartnerSettlement.partner_id == partner_id)
    
    settlement = query.first()
    if settlement is None:
        raise SettlementNotFoundError(settlement_id)
    return settlement


def partner_dashboard(db: Session, partner_id: int) -> Dict[str, Any]:
    """Lifetime totals, last six months, track and unread counts for a partner."""
    totals = db.query(
        func.coalesce(func.sum(PartnerSettlement.partner_share), 0),
        func.coalesce(func.sum(PartnerSettlement.total_gross_revenue), 0),
        func.coalesce(func.sum(PartnerSettlement.total_streams), 0),
        func.coalesce(func.sum(PartnerSettlement.total_downloads), 0),
    ).filter(PartnerSettlement.partner_id == partner_id).one()
    
    recent = db.query(PartnerSettlement).filter(
        PartnerSettlement.partner_id == partner_id
    ).order_by(PartnerSettlement.year_month.desc()).limit(6).all()
    
    track_count = db.query(PartnerTrack).filter(
        PartnerTrack.partner_id == partner_id,
        PartnerTrack.is_active.is_(True)
    ).count()
    
    return {
        "total_partner_share": Decimal(str(totals[0])),
        "total_gross_revenue": Decimal(str(totals[1])),
        "total_streams": int(totals[2]),
        "total_downloads": int(totals[3]),
        "track_count": track_count,
        "unread_notifications": count_unread(db, partner_id),
        "recent_settlements": recent,
    }


def partner_settlement_total(db: Session, partner_id: int) -> Decimal:
    """Sum of every settlement share ever allocated to a partner."""
    total = db.query(
        func.coalesce(func.sum(PartnerSettlement.partner_share), 0)
    ).filter(PartnerSettlement.partner_id == partner_id).scalar()
    return Decimal(str(total))


def get_partner(db: Session, partner_id: int) -> Optional[Partner]:
    return db.query(Partner).options(joinedload(Partner.user)).filter(Partner.id == partner_id).first()
