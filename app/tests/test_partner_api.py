"""
Tests for the partner-facing endpoints.
"""
from decimal import Decimal

import pytest

from app.models import PartnerSettlement, SettlementNotification
from app.services import allocation_service, lifecycle_service


@pytest.fixture
def allocated(db, factory):
    """Two partners sharing a track, allocated for two months."""
    distributor = factory.distributor()
    track = factory.track(title="Night Drive")
    factory.ledger(track, distributor, year_month="2024-12", gross="1000", net="800", streams=40)
    factory.ledger(track, distributor, year_month="2025-09", gross="1000000", net="700000", streams=500)
    owner = factory.partner(business_name="Blue Hour")
    other = factory.partner(business_name="Loops Records")
    factory.contract(owner, track, share_rate="60")
    factory.contract(other, track, share_rate="40")
    allocation_service.allocate(db, "2024-12")
    allocation_service.allocate(db, "2025-09")
    db.refresh(owner)
    return {"owner": owner, "other": other}


@pytest.fixture
def owner_headers(allocated, headers_for):
    return headers_for(allocated["owner"].user)


def own_settlement(db, partner, year_month):
    return db.query(PartnerSettlement).filter(
        PartnerSettlement.partner_id == partner.id,
        PartnerSettlement.year_month == year_month
    ).one()


def test_dashboard(client, owner_headers):
    response = client.get("/api/partner/dashboard", headers=owner_headers)
    
    assert response.status_code == 200
    body = response.json()
    assert body["businessName"] == "Blue Hour"
    summary = body["summary"]
    assert Decimal(summary["totalPartnerShare"]) == Decimal("420480")
    assert summary["totalStreams"] == 540
    assert summary["trackCount"] == 1
    assert summary["unreadNotifications"] == 2
    assert [s["yearMonth"] for s in body["recentSettlements"]] == ["2025-09", "2024-12"]


def test_settlements_scoped_to_partner(client, db, allocated, owner_headers):
    response = client.get("/api/partner/settlements", headers=owner_headers)
    
    assert response.status_code == 200
    assert {s["partnerId"] for s in response.json()} == {allocated["owner"].id}
    
    by_year = client.get("/api/partner/settlements", params={"year": "2024"}, headers=owner_headers).json()
    assert [s["yearMonth"] for s in by_year] == ["2024-12"]
    
    bad_year = client.get("/api/partner/settlements", params={"year": "24%"}, headers=owner_headers)
    assert bad_year.status_code == 422


def test_settlement_detail_ownership(client, db, allocated, owner_headers):
    mine = own_settlement(db, allocated["owner"], "2025-09")
    theirs = own_settlement(db, allocated["other"], "2025-09")
    
    response = client.get(f"/api/partner/settlements/{mine.id}", headers=owner_headers)
    assert response.status_code == 200
    assert Decimal(response.json()["details"][0]["partnerShare"]) == Decimal("420000")
    
    forbidden = client.get(f"/api/partner/settlements/{theirs.id}", headers=owner_headers)
    assert forbidden.status_code == 404


def test_tracks(client, owner_headers):
    tracks = client.get("/api/partner/tracks", headers=owner_headers).json()
    
    assert [(t["title"], Decimal(t["shareRate"])) for t in tracks] == [("Night Drive", Decimal("60"))]


def test_notifications_follow_lifecycle(client, db, allocated, owner_headers):
    settlement = own_settlement(db, allocated["owner"], "2025-09")
    lifecycle_service.confirm(db, settlement.id)
    lifecycle_service.mark_paid(db, settlement.id, "TX-77")
    
    notifications = client.get("/api/partner/notifications", headers=owner_headers).json()
    
    types = [n["notificationType"] for n in notifications]
    assert sorted(types) == sorted([
        "settlement_ready", "settlement_ready", "settlement_confirmed", "payment_complete"
    ])
    assert all(not n["isRead"] for n in notifications)


def test_mark_notifications_read(client, db, allocated, owner_headers):
    notices = client.get("/api/partner/notifications", headers=owner_headers).json()
    first = notices[0]["id"]
    
    read = client.put(f"/api/partner/notifications/{first}/read", headers=owner_headers)
    assert read.status_code == 200
    assert read.json()["isRead"] is True
    assert read.json()["readAt"] is not None
    
    rest = client.put("/api/partner/notifications/read-all", headers=owner_headers)
    assert rest.json()["updated"] == len(notices) - 1
    
    unread = db.query(SettlementNotification).filter(
        SettlementNotification.partner_id == allocated["owner"].id,
        SettlementNotification.is_read.is_(False)
    ).count()
    assert unread == 0
    # The other partner's inbox is untouched.
    assert db.query(SettlementNotification).filter(
        SettlementNotification.partner_id == allocated["other"].id,
        SettlementNotification.is_read.is_(False)
    ).count() == 2


def test_cannot_read_other_partners_notification(client, db, allocated, owner_headers):
    theirs = db.query(SettlementNotification).filter(
        SettlementNotification.partner_id == allocated["other"].id
    ).first()
    
    response = client.put(f"/api/partner/notifications/{theirs.id}/read", headers=owner_headers)
    
    assert response.status_code == 404
    assert response.json()["error"] == "notification_not_found"


def test_profile(client, allocated, owner_headers):
    profile = client.get("/api/partner/profile", headers=owner_headers).json()
    
    assert profile["id"] == allocated["owner"].id
    assert profile["partnerType"] == "artist"


def test_partner_routes_reject_admin_and_anonymous(client, admin_headers):
    assert client.get("/api/partner/dashboard").status_code == 401
    assert client.get("/api/partner/dashboard", headers=admin_headers).status_code == 403


def test_inactive_partner_rejected(client, db, allocated, owner_headers):
    allocated["owner"].is_active = False
    db.commit()
    
    assert client.get("/api/partner/settlements", headers=owner_headers).status_code == 403
