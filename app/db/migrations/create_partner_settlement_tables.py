"""
Migration script creating the CMS ledger and partner settlement tables.
Safe to run repeatedly; existing tables are left untouched.
"""
from sqlalchemy import inspect
from app.db.base import Base
from app.db.session import engine
import app.models  # noqa: F401  (registers every model on Base.metadata)

SETTLEMENT_TABLES = [
    "distributors",
    "monthly_settlements",
    "partners",
    "partner_tracks",
    "partner_settlements",
    "partner_settlement_details",
    "settlement_notifications",
    "settlement_allocation_runs",
]


def migrate():
    """Create missing settlement tables and report which ones exist."""
    existing = set(inspect(engine).get_table_names())
    missing = [name for name in SETTLEMENT_TABLES if name not in existing]
    
    if missing:
        # Referenced tables (users, tracks) are created as well when absent.
        Base.metadata.create_all(bind=engine)
        for name in missing:
            print(f"Created table: {name}")
    else:
        print("All settlement tables already exist, skipping creation")
    
    existing = set(inspect(engine).get_table_names())
    print("\nSettlement tables:")
    for name in SETTLEMENT_TABLES:
        print(f"  - {name}: {'ok' if name in existing else 'MISSING'}")
    print("Migration completed successfully!")


if __name__ == "__main__":
    migrate()
