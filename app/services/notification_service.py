"""
Settlement notification emitter and partner inbox operations.

Rows written here are picked up by the partner dashboard and the e-mail
sender; nothing is pushed from this module.
"""
import logging
from typing import List, Optional
from sqlalchemy.orm import Session
from app.core.config import settings
from app.core.exceptions import NotificationNotFoundError
from app.core.utils import utcnow
from app.models.notification import SettlementNotification, NotificationType
from app.models.partner_settlement import PartnerSettlement

logger = logging.getLogger(__name__)


def emit(
    db: Session,
    settlement: PartnerSettlement,
    notification_type: NotificationType,
    title: str,
    message: Optional[str] = None
) -> SettlementNotification:
    """Insert a notification for the settlement's partner (flushed, not committed)."""
    notification = SettlementNotification(
        partner_id=settlement.partner_id,
        partner_settlement_id=settlement.id,
        notification_type=notification_type,
        title=title,
        message=message
    )
    db.add(notification)
    db.flush()
    return notification


def emit_safely(
    db: Session,
    settlement: PartnerSettlement,
    notification_type: NotificationType,
    title: str,
    message: Optional[str] = None
) -> Optional[SettlementNotification]:
    """
    Emit inside a savepoint so a failed insert never rolls back the caller.
    
    Returns None when the notification could not be written.
    """
    try:
        with db.begin_nested():
            return emit(db, settlement, notification_type, title, message)
    except Exception as e:
        logger.error(
            f"Failed to emit {notification_type.value} notification for settlement {settlement.id}: {e}",
            exc_info=True
        )
        return None


def list_for_partner(db: Session, partner_id: int, limit: Optional[int] = None) -> List[SettlementNotification]:
    """Most recent notifications of a partner."""
    return db.query(SettlementNotification).filter(
        SettlementNotification.partner_id == partner_id
    ).order_by(
        SettlementNotification.created_at.desc(),
        SettlementNotification.id.desc()
    ).limit(limit or settings.NOTIFICATION_LIST_LIMIT).all()


def count_unread(db: Session, partner_id: int) -> int:
    return db.query(SettlementNotification).filter(
        SettlementNotification.partner_id == partner_id,
        SettlementNotification.is_read.is_(False)
    ).count()


def mark_read(db: Session, partner_id: int, notification_id: int) -> SettlementNotification:
    """Mark one of the partner's notifications as read."""
    notification = db.query(SettlementNotification).filter(
        SettlementNotification.id == notification_id,
        SettlementNotification.partner_id == partner_id
    ).first()
    if notification is None:
        raise NotificationNotFoundError(notification_id)
    
    if not notification.is_read:
        notification.is_read = True
        notification.read_at = utcnow()
        db.commit()
        db.refresh(notification)
    return notification


def mark_all_read(db: Session, partner_id: int) -> int:
    """Mark every unread notification of the partner as read; returns how many changed."""
    updated = db.query(SettlementNotification).filter(
        SettlementNotification.partner_id == partner_id,
        SettlementNotification.is_read.is_(False)
    ).update({"is_read": True, "read_at": utcnow()}, synchronize_session=False)
    db.commit()
    return updated
