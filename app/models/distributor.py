"""
CMS revenue ledger: distributors and their monthly per-track revenue rows.
"""
from sqlalchemy import (
    Column, String, Numeric, BigInteger, Boolean, ForeignKey, Integer, CheckConstraint
)
from sqlalchemy.orm import relationship
from app.db.base import BaseModel


class Distributor(BaseModel):
    """Music distributor (reference data maintained by admins)."""
    __tablename__ = "distributors"
    
    name = Column(String(100), nullable=False)
    code = Column(String(50), unique=True, nullable=False)
    commission_rate = Column(Numeric(5, 2), nullable=False, default=0)  # % kept before net revenue
    is_active = Column(Boolean, default=True, nullable=False)
    
    # Relationships
    monthly_settlements = relationship("MonthlySettlement", back_populates="distributor", cascade="all, delete-orphan")


class MonthlySettlement(BaseModel):
    """
    Ledger row: one distributor's revenue for one track in one month.
    
    Populated by CMS uploads; the allocation engine only reads these rows.
    """
    __tablename__ = "monthly_settlements"
    __table_args__ = (
        CheckConstraint("net_revenue <= gross_revenue", name="ck_monthly_settlements_net_le_gross"),
    )
    
    track_id = Column(Integer, ForeignKey("tracks.id", ondelete="SET NULL"), nullable=True, index=True)
    distributor_id = Column(Integer, ForeignKey("distributors.id", ondelete="CASCADE"), nullable=False, index=True)
    year_month = Column(String(7), nullable=False, index=True)  # YYYY-MM
    gross_revenue = Column(Numeric(15, 2), nullable=False, default=0)
    net_revenue = Column(Numeric(15, 2), nullable=False, default=0)
    management_fee = Column(Numeric(15, 2), nullable=False, default=0)
    stream_count = Column(BigInteger, nullable=False, default=0)
    download_count = Column(BigInteger, nullable=False, default=0)
    currency = Column(String(3), nullable=False, default="KRW")
    data_source = Column(String(50), nullable=False, default="manual")
    
    # Relationships
    distributor = relationship("Distributor", back_populates="monthly_settlements")
    track = relationship("Track")
