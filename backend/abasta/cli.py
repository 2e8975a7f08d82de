"""Management CLI.

Usage:
    python -m abasta.cli create-tables    # Create all tables (dev / first run)
    python -m abasta.cli list-companies   # Show registered companies
"""

import sys

from sqlalchemy import create_engine, select

from abasta.config import settings
from abasta.database import Base
from abasta.models import Company


def create_tables():
    engine = create_engine(settings.database_url_sync)
    Base.metadata.create_all(engine)
    print(f"Created {len(Base.metadata.tables)} table(s).")


def list_companies():
    engine = create_engine(settings.database_url_sync)
    with engine.connect() as conn:
        rows = conn.execute(
            select(Company.uuid, Company.name, Company.tax_id, Company.status)
            .order_by(Company.name)
        ).all()
    for uuid, name, tax_id, status in rows:
        print(f"  {uuid}  {name} ({tax_id})  {status.value}")
    print(f"\n{len(rows)} compan{'y' if len(rows) == 1 else 'ies'}")


if __name__ == "__main__":
    cmd = sys.argv[1] if len(sys.argv) > 1 else ""
    if cmd == "create-tables":
        create_tables()
    elif cmd == "list-companies":
        list_companies()
    else:
        print("Usage: python -m abasta.cli [create-tables|list-companies]")
