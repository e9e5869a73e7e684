"""
Settlement status lifecycle: pending -> confirmed -> paid.
"""
import logging
from typing import Optional, Union
from sqlalchemy.orm import Session
from app.core.exceptions import (
    SettlementNotFoundError, InvalidTransitionError, MissingPaymentRefError,
    ConcurrentModificationError
)
from app.core.utils import utcnow
from app.models.notification import NotificationType
from app.models.partner_settlement import PartnerSettlement, SettlementStatus
from app.services.notification_service import emit_safely

logger = logging.getLogger(__name__)

# The only legal move out of each status.
NEXT_STATUS = {
    SettlementStatus.PENDING: SettlementStatus.CONFIRMED,
    SettlementStatus.CONFIRMED: SettlementStatus.PAID,
}


def _get_settlement(db: Session, settlement_id: int) -> PartnerSettlement:
    settlement = db.query(PartnerSettlement).filter(PartnerSettlement.id == settlement_id).first()
    if settlement is None:
        raise SettlementNotFoundError(settlement_id)
    return settlement


def transition(
    db: Session,
    settlement_id: int,
    to_status: Union[SettlementStatus, str],
    payment_ref: Optional[str] = None
) -> PartnerSettlement:
    """
    Move a settlement one step forward and notify its partner.
    
    The status write only applies if the row still holds the status read at
    the start of the call; otherwise ConcurrentModificationError is raised.
    """
    settlement = _get_settlement(db, settlement_id)
    current = SettlementStatus(settlement.status)
    
    try:
        requested = SettlementStatus(to_status)
    except ValueError:
        raise InvalidTransitionError(current.value, str(to_status))
    
    if NEXT_STATUS.get(current) != requested:
        raise InvalidTransitionError(current.value, requested.value)
    
    now = utcnow()
    values = {"status": requested, "updated_at": now}
    if requested == SettlementStatus.CONFIRMED:
        values["confirmed_at"] = now
    else:
        ref = (payment_ref or "").strip()
        if not ref:
            raise MissingPaymentRefError(settlement_id)
        values["paid_at"] = now
        values["payment_ref"] = ref
    
    updated = db.query(PartnerSettlement).filter(
        PartnerSettlement.id == settlement_id,
        PartnerSettlement.status == current
    ).update(values, synchronize_session=False)
    
    if updated == 0:
        db.rollback()
        logger.warning(f"Settlement {settlement_id} changed concurrently; expected '{current.value}'")
        raise ConcurrentModificationError(settlement_id, current.value)
    
    if requested == SettlementStatus.CONFIRMED:
        notification_type = NotificationType.SETTLEMENT_CONFIRMED
        title = f"{settlement.year_month} settlement has been confirmed"
    else:
        notification_type = NotificationType.PAYMENT_COMPLETE
        title = f"{settlement.year_month} settlement has been paid"
    emit_safely(db, settlement, notification_type, title)
    
    db.commit()
    db.refresh(settlement)
    logger.info(f"Settlement {settlement_id} moved from '{current.value}' to '{requested.value}'")
    return settlement


def confirm(db: Session, settlement_id: int) -> PartnerSettlement:
    return transition(db, settlement_id, SettlementStatus.CONFIRMED)


def mark_paid(db: Session, settlement_id: int, payment_ref: str) -> PartnerSettlement:
    return transition(db, settlement_id, SettlementStatus.PAID, payment_ref)
