"""Models package - Import all models for SQLAlchemy registration."""
from app.models.user import User, UserRole
from app.models.track import Track
from app.models.distributor import Distributor, MonthlySettlement
from app.models.partner import Partner, PartnerTrack, PartnerType
from app.models.partner_settlement import (
    PartnerSettlement, PartnerSettlementDetail, SettlementStatus, AllocationRun
)
from app.models.notification import SettlementNotification, NotificationType

__all__ = [
    "User",
    "UserRole",
    "Track",
    "Distributor",
    "MonthlySettlement",
    "Partner",
    "PartnerTrack",
    "PartnerType",
    "PartnerSettlement",
    "PartnerSettlementDetail",
    "SettlementStatus",
    "AllocationRun",
    "SettlementNotification",
    "NotificationType",
]
