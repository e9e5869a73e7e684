"""
Partner-track contract resolution and assignment.
"""
import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional
from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload
from app.core.exceptions import PartnerNotFoundError, TrackNotFoundError, ContractNotFoundError
from app.models.partner import Partner, PartnerTrack
from app.models.track import Track

logger = logging.getLogger(__name__)


def active_contracts_for(db: Session, track_id: int, as_of: date) -> List[PartnerTrack]:
    """
    Contracts entitled to a track's revenue on the given date.
    
    A contract qualifies when it and its partner are active and as_of lies in
    [contract_start_date, contract_end_date); a missing start or end date leaves
    that side unbounded. An empty list means the revenue stays unallocated.
    """
    return db.query(PartnerTrack).join(
        Partner, PartnerTrack.partner_id == Partner.id
    ).filter(
        PartnerTrack.track_id == track_id,
        PartnerTrack.is_active.is_(True),
        Partner.is_active.is_(True),
        or_(PartnerTrack.contract_start_date.is_(None), PartnerTrack.contract_start_date <= as_of),
        or_(PartnerTrack.contract_end_date.is_(None), PartnerTrack.contract_end_date > as_of),
    ).order_by(PartnerTrack.partner_id).all()


def list_partner_tracks(db: Session, partner_id: int) -> List[PartnerTrack]:
    """All contracts of a partner, active ones first."""
    return db.query(PartnerTrack).join(
        Track, PartnerTrack.track_id == Track.id
    ).options(joinedload(PartnerTrack.track)).filter(
        PartnerTrack.partner_id == partner_id
    ).order_by(PartnerTrack.is_active.desc(), Track.title.asc()).all()


def assign_track(
    db: Session,
    partner_id: int,
    track_id: int,
    share_rate: Decimal,
    role: str = "artist",
    contract_start_date: Optional[date] = None,
    contract_end_date: Optional[date] = None
) -> PartnerTrack:
    """Create or reactivate the contract between a partner and a track."""
    if not db.query(Partner).filter(Partner.id == partner_id).first():
        raise PartnerNotFoundError(partner_id)
    if not db.query(Track).filter(Track.id == track_id).first():
        raise TrackNotFoundError(track_id)
    
    contract = db.query(PartnerTrack).filter(
        PartnerTrack.partner_id == partner_id,
        PartnerTrack.track_id == track_id
    ).first()
    
    if contract is None:
        contract = PartnerTrack(partner_id=partner_id, track_id=track_id)
        db.add(contract)
    
    contract.share_rate = share_rate
    contract.role = role
    contract.contract_start_date = contract_start_date
    contract.contract_end_date = contract_end_date
    contract.is_active = True
    
    db.commit()
    db.refresh(contract)
    logger.info(f"Assigned track {track_id} to partner {partner_id} at {share_rate}%")
    return contract


def unassign_track(db: Session, partner_id: int, track_id: int) -> PartnerTrack:
    """Deactivate a contract; the row is kept for history."""
    contract = db.query(PartnerTrack).filter(
        PartnerTrack.partner_id == partner_id,
        PartnerTrack.track_id == track_id
    ).first()
    if contract is None:
        raise ContractNotFoundError(partner_id, track_id)
    
    contract.is_active = False
    db.commit()
    db.refresh(contract)
    logger.info(f"Unassigned track {track_id} from partner {partner_id}")
    return contract
