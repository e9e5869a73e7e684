"""
Partner profile and partner-track contract models.
"""
from sqlalchemy import (
    Column, String, Text, Date, Boolean, Numeric, ForeignKey, Integer,
    UniqueConstraint, CheckConstraint, Enum as SQLEnum
)
from sqlalchemy.orm import relationship
from app.db.base import BaseModel
import enum


class PartnerType(str, enum.Enum):
    """Partner type enumeration."""
    ARTIST = "artist"
    COMPANY = "company"
    COMPOSER = "composer"


class Partner(BaseModel):
    """Rights holder receiving a share of track revenue."""
    __tablename__ = "partners"
    
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=True)
    partner_type = Column(
        SQLEnum(PartnerType, values_callable=lambda e: [m.value for m in e]),
        nullable=False
    )
    business_name = Column(String(255), nullable=True)
    representative_name = Column(String(100), nullable=True)
    business_number = Column(String(20), nullable=True)
    phone = Column(String(20), nullable=True)
    address = Column(Text, nullable=True)
    bank_name = Column(String(50), nullable=True)
    bank_account = Column(String(50), nullable=True)
    bank_holder = Column(String(100), nullable=True)
    default_share_rate = Column(Numeric(5, 2), nullable=False, default=0)
    memo = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    
    # Relationships
    user = relationship("User", back_populates="partner")
    tracks = relationship("PartnerTrack", back_populates="partner", cascade="all, delete-orphan")
    settlements = relationship("PartnerSettlement", back_populates="partner", cascade="all, delete-orphan")


class PartnerTrack(BaseModel):
    """
    Contract giving a partner a share of one track's net revenue.
    
    At most one row exists per (partner, track); deactivation flips is_active
    rather than deleting, so reassigning reuses the same row.
    """
    __tablename__ = "partner_tracks"
    __table_args__ = (
        UniqueConstraint("partner_id", "track_id", name="uq_partner_track"),
        CheckConstraint("share_rate >= 0 AND share_rate <= 100", name="ck_partner_tracks_share_rate"),
    )
    
    partner_id = Column(Integer, ForeignKey("partners.id", ondelete="CASCADE"), nullable=False, index=True)
    track_id = Column(Integer, ForeignKey("tracks.id", ondelete="CASCADE"), nullable=False, index=True)
    share_rate = Column(Numeric(5, 2), nullable=False, default=0)  # percent of net revenue
    role = Column(String(50), nullable=False, default="artist")
    contract_start_date = Column(Date, nullable=True)
    contract_end_date = Column(Date, nullable=True)  # None = open-ended
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    
    # Relationships
    partner = relationship("Partner", back_populates="tracks")
    track = relationship("Track", back_populates="partner_tracks")
