"""
Partner settlement aggregate, its per-track detail lines and the
per-month allocation run record.
"""
from sqlalchemy import (
    Column, String, Text, Numeric, BigInteger, DateTime, ForeignKey, Integer,
    UniqueConstraint, Enum as SQLEnum
)
from sqlalchemy.orm import relationship
from app.db.base import BaseModel
import enum


class SettlementStatus(str, enum.Enum):
    """Settlement status enumeration."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PAID = "paid"


class PartnerSettlement(BaseModel):
    """One partner's aggregated payout for one month."""
    __tablename__ = "partner_settlements"
    __table_args__ = (
        UniqueConstraint("partner_id", "year_month", name="uq_partner_settlement_month"),
    )
    
    partner_id = Column(Integer, ForeignKey("partners.id", ondelete="CASCADE"), nullable=False, index=True)
    year_month = Column(String(7), nullable=False, index=True)
    total_gross_revenue = Column(Numeric(15, 2), nullable=False, default=0)
    total_net_revenue = Column(Numeric(15, 2), nullable=False, default=0)
    partner_share = Column(Numeric(15, 2), nullable=False, default=0)
    management_fee = Column(Numeric(15, 2), nullable=False, default=0)
    total_streams = Column(BigInteger, nullable=False, default=0)
    total_downloads = Column(BigInteger, nullable=False, default=0)
    status = Column(
        SQLEnum(SettlementStatus, values_callable=lambda e: [m.value for m in e]),
        default=SettlementStatus.PENDING,
        nullable=False,
        index=True
    )
    confirmed_at = Column(DateTime, nullable=True)
    paid_at = Column(DateTime, nullable=True)
    payment_ref = Column(String(255), nullable=True)
    memo = Column(Text, nullable=True)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    
    # Relationships
    partner = relationship("Partner", back_populates="settlements")
    details = relationship(
        "PartnerSettlementDetail",
        back_populates="settlement",
        cascade="all, delete-orphan",
        order_by="PartnerSettlementDetail.id"
    )
    notifications = relationship("SettlementNotification", back_populates="settlement", cascade="all, delete-orphan")


class PartnerSettlementDetail(BaseModel):
    """Per-track line derived from a single ledger row."""
    __tablename__ = "partner_settlement_details"
    __table_args__ = (
        UniqueConstraint(
            "partner_settlement_id", "track_id", "source_settlement_id",
            name="uq_partner_settlement_detail_source"
        ),
    )
    
    partner_settlement_id = Column(
        Integer, ForeignKey("partner_settlements.id", ondelete="CASCADE"), nullable=False, index=True
    )
    track_id = Column(Integer, ForeignKey("tracks.id", ondelete="CASCADE"), nullable=False, index=True)
    distributor_id = Column(Integer, ForeignKey("distributors.id", ondelete="SET NULL"), nullable=True)
    source_settlement_id = Column(Integer, ForeignKey("monthly_settlements.id", ondelete="SET NULL"), nullable=True)
    gross_revenue = Column(Numeric(15, 2), nullable=False, default=0)
    net_revenue = Column(Numeric(15, 2), nullable=False, default=0)
    share_rate = Column(Numeric(5, 2), nullable=False, default=0)
    partner_share = Column(Numeric(15, 2), nullable=False, default=0)
    stream_count = Column(BigInteger, nullable=False, default=0)
    download_count = Column(BigInteger, nullable=False, default=0)
    
    # Relationships
    settlement = relationship("PartnerSettlement", back_populates="details")
    track = relationship("Track")
    distributor = relationship("Distributor")


class AllocationRun(BaseModel):
    """Latest allocation outcome for a month; its row doubles as the month lock."""
    __tablename__ = "settlement_allocation_runs"
    
    year_month = Column(String(7), unique=True, nullable=False)
    allocated_partners = Column(Integer, nullable=False, default=0)
    last_run_at = Column(DateTime, nullable=True)
    last_run_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
