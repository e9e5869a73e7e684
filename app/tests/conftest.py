"""
Shared fixtures: in-memory SQLite database, API client and row factories.
"""
import os

# Must be set before app modules build the engine and settings.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SECRET_KEY", "test-secret-key")

from datetime import date
from decimal import Decimal
from typing import Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.security import create_access_token, get_password_hash
from app.db.base import Base
from app.db.session import get_db
from app.main import app
from app.models import (
    User, UserRole, Track, Distributor, MonthlySettlement,
    Partner, PartnerTrack, PartnerType
)


@pytest.fixture
def engine():
    """Fresh in-memory database per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    
    # Let SQLAlchemy drive BEGIN so SAVEPOINTs behave on pysqlite.
    @event.listens_for(engine, "connect")
    def _disable_pysqlite_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
    
    @event.listens_for(engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")
    
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db):
    """TestClient sharing the test session with the routes."""
    def override_get_db():
        yield db
    
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


class Factory:
    """Creates committed rows with sensible defaults."""
    
    def __init__(self, db):
        self.db = db
        self._seq = 0
    
    def _next(self) -> int:
        self._seq += 1
        return self._seq
    
    def _save(self, obj):
        self.db.add(obj)
        self.db.commit()
        self.db.refresh(obj)
        return obj
    
    def user(self, role: UserRole = UserRole.USER, password: Optional[str] = None, **kwargs) -> User:
        n = self._next()
        kwargs.setdefault("username", f"user{n}")
        kwargs.setdefault("email", f"user{n}@example.com")
        hashed = get_password_hash(password) if password else "not-a-real-hash"
        return self._save(User(role=role, hashed_password=hashed, **kwargs))
    
    def partner(self, business_name: Optional[str] = None, with_user: bool = True, **kwargs) -> Partner:
        n = self._next()
        user_id = self.user(role=UserRole.PARTNER).id if with_user else None
        kwargs.setdefault("partner_type", PartnerType.ARTIST)
        return self._save(Partner(
            user_id=user_id,
            business_name=business_name or f"Partner {n}",
            **kwargs
        ))
    
    def track(self, title: Optional[str] = None, **kwargs) -> Track:
        n = self._next()
        return self._save(Track(title=title or f"Track {n}", artist="Artist", **kwargs))
    
    def distributor(self, **kwargs) -> Distributor:
        n = self._next()
        kwargs.setdefault("name", f"Distributor {n}")
        kwargs.setdefault("code", f"dist{n}")
        kwargs.setdefault("commission_rate", Decimal("30"))
        return self._save(Distributor(**kwargs))
    
    def ledger(
        self,
        track: Optional[Track],
        distributor: Distributor,
        year_month: str = "2025-09",
        gross="1000000",
        net="700000",
        streams: int = 0,
        downloads: int = 0
    ) -> MonthlySettlement:
        return self._save(MonthlySettlement(
            track_id=track.id if track else None,
            distributor_id=distributor.id,
            year_month=year_month,
            gross_revenue=Decimal(gross),
            net_revenue=Decimal(net),
            stream_count=streams,
            download_count=downloads
        ))
    
    def contract(
        self,
        partner: Partner,
        track: Track,
        share_rate="100",
        start: Optional[date] = None,
        end: Optional[date] = None,
        is_active: bool = True
    ) -> PartnerTrack:
        return self._save(PartnerTrack(
            partner_id=partner.id,
            track_id=track.id,
            share_rate=Decimal(share_rate),
            contract_start_date=start,
            contract_end_date=end,
            is_active=is_active
        ))


@pytest.fixture
def factory(db):
    return Factory(db)


def auth_headers(user: User) -> dict:
    token = create_access_token(user.username, user.id, user.role.value)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin(factory):
    return factory.user(role=UserRole.ADMIN)


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture
def headers_for():
    """Build bearer headers for any user."""
    return auth_headers
