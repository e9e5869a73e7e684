"""
Tests for partner-track contract resolution and assignment.
"""
from datetime import date
from decimal import Decimal

import pytest

from app.core.exceptions import PartnerNotFoundError, TrackNotFoundError, ContractNotFoundError
from app.models import PartnerTrack
from app.services import contract_service


def partner_ids(contracts):
    return [c.partner_id for c in contracts]


def test_open_ended_contract_is_active(db, factory):
    track = factory.track()
    partner = factory.partner()
    factory.contract(partner, track)
    
    assert partner_ids(contract_service.active_contracts_for(db, track.id, date(1999, 1, 1))) == [partner.id]


def test_window_start_inclusive_end_exclusive(db, factory):
    track = factory.track()
    partner = factory.partner()
    factory.contract(partner, track, start=date(2025, 1, 1), end=date(2025, 7, 1))
    
    assert contract_service.active_contracts_for(db, track.id, date(2024, 12, 31)) == []
    assert partner_ids(contract_service.active_contracts_for(db, track.id, date(2025, 1, 1))) == [partner.id]
    assert partner_ids(contract_service.active_contracts_for(db, track.id, date(2025, 6, 30))) == [partner.id]
    assert contract_service.active_contracts_for(db, track.id, date(2025, 7, 1)) == []


def test_multiple_rights_holders_returned(db, factory):
    track = factory.track()
    p1 = factory.partner()
    p2 = factory.partner()
    factory.contract(p1, track, share_rate="70")
    factory.contract(p2, track, share_rate="70")
    factory.contract(factory.partner(), factory.track())
    
    assert partner_ids(contract_service.active_contracts_for(db, track.id, date(2025, 9, 1))) == [p1.id, p2.id]


def test_inactive_rows_excluded(db, factory):
    track = factory.track()
    factory.contract(factory.partner(), track, is_active=False)
    factory.contract(factory.partner(is_active=False), track)
    
    assert contract_service.active_contracts_for(db, track.id, date(2025, 9, 1)) == []


def test_assign_track_creates_contract(db, factory):
    partner = factory.partner()
    track = factory.track()
    
    contract = contract_service.assign_track(
        db, partner.id, track.id, Decimal("35.5"), role="composer",
        contract_start_date=date(2025, 1, 1)
    )
    
    assert contract.share_rate == Decimal("35.50")
    assert contract.role == "composer"
    assert contract.is_active is True
    assert contract.contract_start_date == date(2025, 1, 1)
    assert contract.contract_end_date is None


def test_assign_track_reactivates_existing_row(db, factory):
    partner = factory.partner()
    track = factory.track()
    original = factory.contract(partner, track, share_rate="10", is_active=False)
    
    contract = contract_service.assign_track(db, partner.id, track.id, Decimal("20"))
    
    assert contract.id == original.id
    assert contract.share_rate == Decimal("20")
    assert contract.is_active is True
    assert db.query(PartnerTrack).count() == 1


def test_assign_track_unknown_partner_or_track(db, factory):
    partner = factory.partner()
    track = factory.track()
    
    with pytest.raises(PartnerNotFoundError):
        contract_service.assign_track(db, 9999, track.id, Decimal("10"))
    with pytest.raises(TrackNotFoundError):
        contract_service.assign_track(db, partner.id, 9999, Decimal("10"))


def test_unassign_track_soft_deletes(db, factory):
    partner = factory.partner()
    track = factory.track()
    factory.contract(partner, track)
    
    contract = contract_service.unassign_track(db, partner.id, track.id)
    
    assert contract.is_active is False
    assert db.query(PartnerTrack).count() == 1
    assert contract_service.active_contracts_for(db, track.id, date(2025, 9, 1)) == []


def test_unassign_missing_contract(db, factory):
    with pytest.raises(ContractNotFoundError):
        contract_service.unassign_track(db, factory.partner().id, factory.track().id)


def test_list_partner_tracks_active_first(db, factory):
    partner = factory.partner()
    inactive = factory.contract(partner, factory.track(title="A side"), is_active=False)
    active = factory.contract(partner, factory.track(title="B side"))
    
    contracts = contract_service.list_partner_tracks(db, partner.id)
    
    assert [c.id for c in contracts] == [active.id, inactive.id]
