"""
Settlement notification model.
"""
from sqlalchemy import Column, String, Text, Boolean, DateTime, ForeignKey, Integer, Enum as SQLEnum
from sqlalchemy.orm import relationship
from app.db.base import BaseModel
import enum


class NotificationType(str, enum.Enum):
    """Notification type enumeration."""
    SETTLEMENT_READY = "settlement_ready"
    SETTLEMENT_CONFIRMED = "settlement_confirmed"
    PAYMENT_COMPLETE = "payment_complete"
    GENERAL = "general"


class SettlementNotification(BaseModel):
    """Notice shown to a partner when one of its settlements changes."""
    __tablename__ = "settlement_notifications"
    
    partner_id = Column(Integer, ForeignKey("partners.id", ondelete="CASCADE"), nullable=False, index=True)
    partner_settlement_id = Column(
        Integer, ForeignKey("partner_settlements.id", ondelete="CASCADE"), nullable=True, index=True
    )
    notification_type = Column(
        SQLEnum(NotificationType, values_callable=lambda e: [m.value for m in e]),
        default=NotificationType.SETTLEMENT_READY,
        nullable=False
    )
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=True)
    is_read = Column(Boolean, default=False, nullable=False, index=True)
    read_at = Column(DateTime, nullable=True)
    
    # Relationships
    settlement = relationship("PartnerSettlement", back_populates="notifications")
