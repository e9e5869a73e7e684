"""
Seed a small demo data set: an admin, two partners, one distributor,
two tracks, their contracts and one month of ledger rows.
"""
from decimal import Decimal
from datetime import date
from app.core.security import get_password_hash
from app.db.session import SessionLocal, init_db
from app.models import (
    User, UserRole, Track, Distributor, MonthlySettlement,
    Partner, PartnerTrack, PartnerType
)

DEMO_MONTH = "2025-09"


def seed():
    """Insert demo rows unless the admin user already exists."""
    init_db()
    db = SessionLocal()
    try:
        if db.query(User).filter(User.username == "admin").first():
            print("Demo data already present, skipping seed")
            return
        
        admin = User(
            username="admin", email="admin@example.com", name="Admin",
            hashed_password=get_password_hash("admin1234"), role=UserRole.ADMIN
        )
        db.add(admin)
        
        partners = []
        for username, business_name, partner_type in [
            ("artist1", "Blue Hour", PartnerType.ARTIST),
            ("label1", "Loops Records", PartnerType.COMPANY),
        ]:
            user = User(
                username=username, email=f"{username}@example.com", name=business_name,
                hashed_password=get_password_hash("partner1234"), role=UserRole.PARTNER
            )
            db.add(user)
            db.flush()
            partner = Partner(user_id=user.id, partner_type=partner_type, business_name=business_name)
            db.add(partner)
            partners.append(partner)
        
        distributor = Distributor(name="Melon", code="melon", commission_rate=Decimal("30.00"))
        tracks = [
            Track(title="Night Drive", artist="Blue Hour", album="Night Drive"),
            Track(title="Rooftop", artist="Blue Hour", album="Night Drive"),
        ]
        db.add(distributor)
        db.add_all(tracks)
        db.flush()
        
        db.add_all([
            PartnerTrack(partner_id=partners[0].id, track_id=tracks[0].id, share_rate=Decimal("60"),
                         contract_start_date=date(2025, 1, 1)),
            PartnerTrack(partner_id=partners[1].id, track_id=tracks[0].id, share_rate=Decimal("40"),
                         role="label", contract_start_date=date(2025, 1, 1)),
            PartnerTrack(partner_id=partners[0].id, track_id=tracks[1].id, share_rate=Decimal("100")),
        ])
        
        for track, gross, streams in [(tracks[0], Decimal("1000000"), 250000), (tracks[1], Decimal("400000"), 90000)]:
            db.add(MonthlySettlement(
                track_id=track.id,
                distributor_id=distributor.id,
                year_month=DEMO_MONTH,
                gross_revenue=gross,
                net_revenue=gross * Decimal("0.70"),
                management_fee=gross * Decimal("0.30"),
                stream_count=streams,
                download_count=streams // 100,
                data_source="seed"
            ))
        
        db.commit()
        print(f"Seeded demo data for {DEMO_MONTH}")
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    seed()
