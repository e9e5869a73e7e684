"""
Pydantic schemas for partner settlements and allocation runs.
"""
from pydantic import Field
from typing import List, Optional
from datetime import datetime
from decimal import Decimal
from app.models.partner_settlement import SettlementStatus
from app.schemas.base import CamelModel


class AllocateRequest(CamelModel):
    """Body of the allocation trigger; yearMonth is validated by the service."""
    year_month: str
    force: bool = False


class AllocateResponse(CamelModel):
    """Result of an allocation run."""
    message: str
    year_month: str
    allocated_partners: int
    created_partner_ids: List[int] = []
    updated_partner_ids: List[int] = []
    unallocated_net_revenue: Decimal = Decimal(0)


class StatusUpdateRequest(CamelModel):
    """Body of a settlement status change."""
    status: SettlementStatus
    payment_ref: Optional[str] = Field(default=None, max_length=255)


class PartnerSettlementResponse(CamelModel):
    """Settlement aggregate as shown in lists."""
    id: int
    partner_id: int
    year_month: str
    total_gross_revenue: Decimal
    total_net_revenue: Decimal
    partner_share: Decimal
    management_fee: Decimal
    total_streams: int
    total_downloads: int
    status: SettlementStatus
    confirmed_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    payment_ref: Optional[str] = None
    created_at: datetime
    business_name: Optional[str] = None


class SettlementDetailResponse(CamelModel):
    """Per-track settlement line."""
    id: int
    track_id: int
    track_title: Optional[str] = None
    track_artist: Optional[str] = None
    distributor_id: Optional[int] = None
    distributor_name: Optional[str] = None
    source_settlement_id: Optional[int] = None
    gross_revenue: Decimal
    net_revenue: Decimal
    share_rate: Decimal
    partner_share: Decimal
    stream_count: int
    download_count: int


class SettlementWithDetailsResponse(CamelModel):
    """Settlement aggregate with its detail lines."""
    settlement: PartnerSettlementResponse
    memo: Optional[str] = None
    details: List[SettlementDetailResponse] = []


class DashboardSummary(CamelModel):
    total_partner_share: Decimal
    total_gross_revenue: Decimal
    total_streams: int
    total_downloads: int
    track_count: int
    unread_notifications: int


class DashboardResponse(CamelModel):
    """Partner dashboard payload."""
    partner_id: int
    business_name: Optional[str] = None
    summary: DashboardSummary
    recent_settlements: List[PartnerSettlementResponse] = []
