"""
Track model; catalog rows referenced by ledger rows and partner contracts.
"""
from sqlalchemy import Column, String
from sqlalchemy.orm import relationship
from app.db.base import BaseModel


class Track(BaseModel):
    """A released track."""
    __tablename__ = "tracks"
    
    title = Column(String(255), nullable=False, index=True)
    artist = Column(String(255), nullable=True)
    album = Column(String(255), nullable=True)
    
    # Relationships
    partner_tracks = relationship("PartnerTrack", back_populates="track", cascade="all, delete-orphan")
