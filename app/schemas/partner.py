"""
Pydantic schemas for Partner and PartnerTrack entities.
"""
from pydantic import Field, model_validator
from typing import List, Optional
from datetime import date, datetime
from decimal import Decimal
from app.models.partner import PartnerType
from app.schemas.base import CamelModel
from app.schemas.settlement import PartnerSettlementResponse


class PartnerSummary(CamelModel):
    """Row in the admin partner list."""
    id: int
    partner_type: PartnerType
    business_name: Optional[str] = None
    representative_name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    default_share_rate: Decimal
    is_active: bool
    track_count: int = 0
    total_settlement: Decimal = Decimal(0)
    created_at: datetime


class PartnerProfile(CamelModel):
    """Full partner profile."""
    id: int
    user_id: Optional[int] = None
    partner_type: PartnerType
    business_name: Optional[str] = None
    representative_name: Optional[str] = None
    business_number: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    bank_name: Optional[str] = None
    bank_account: Optional[str] = None
    bank_holder: Optional[str] = None
    default_share_rate: Decimal
    memo: Optional[str] = None
    is_active: bool
    created_at: datetime


class PartnerTrackCreate(CamelModel):
    """Schema for assigning a track to a partner."""
    track_id: int
    share_rate: Decimal = Field(default=Decimal(0), ge=0, le=100)
    role: str = "artist"
    contract_start_date: Optional[date] = None
    contract_end_date: Optional[date] = None
    
    @model_validator(mode="after")
    def check_contract_window(self):
        """End date, when given, must come after the start date."""
        if (
            self.contract_start_date and self.contract_end_date
            and self.contract_end_date <= self.contract_start_date
        ):
            raise ValueError("contractEndDate must be after contractStartDate")
        return self


class PartnerTrackResponse(CamelModel):
    """Schema for a partner-track contract."""
    id: int
    partner_id: int
    track_id: int
    share_rate: Decimal
    role: str
    contract_start_date: Optional[date] = None
    contract_end_date: Optional[date] = None
    is_active: bool
    title: Optional[str] = None
    artist: Optional[str] = None
    album: Optional[str] = None


class PartnerDetailResponse(CamelModel):
    """Admin view of one partner with its tracks and last settlements."""
    partner: PartnerProfile
    tracks: List[PartnerTrackResponse] = []
    recent_settlements: List[PartnerSettlementResponse] = []
