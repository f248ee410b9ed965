"""
Shared fixtures: an isolated in-memory database per test and a small
factory for seeding the rental graph (manager → property → local → lease →
payments, plus expenses).
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")

from datetime import date, datetime
from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from landlord_reports.core.auth import CurrentUser, Role
from landlord_reports.core.database import Base
from landlord_reports.models.expense import Expense
from landlord_reports.models.lease import Lease
from landlord_reports.models.local import Local
from landlord_reports.models.payment import Payment
from landlord_reports.models.property import Property
from landlord_reports.models.tenant import Tenant
from landlord_reports.models.user import User


@pytest.fixture
def db():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    session = sessionmaker(bind=engine, autoflush=False)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


class Factory:
    def __init__(self, db):
        self.db = db

    def _save(self, obj):
        self.db.add(obj)
        self.db.commit()
        return obj

    def user(self, role="manager", email=None, is_active=True):
        return self._save(User(role=role, email=email, username=email, is_active=is_active))

    def property(self, manager=None, name="Kigali Heights", location="Kigali"):
        return self._save(
            Property(name=name, location=location, manager_id=manager.id if manager else None)
        )

    def local(self, prop, status="occupied", reference_code="L-1", size_m2=None,
              rent_price=None, updated_at=None):
        local = Local(
            property_id=prop.id,
            reference_code=reference_code,
            status=status,
            size_m2=size_m2,
            rent_price=rent_price,
        )
        if updated_at is not None:
            local.updated_at = updated_at
        return self._save(local)

    def tenant(self, name="Jane Doe", phone="+250788000000", email=None):
        return self._save(Tenant(name=name, phone=phone, email=email))

    def lease(self, local, tenant=None, status="active", start_date=date(2024, 1, 1),
              end_date=date(2024, 12, 31), lease_amount=500000, created_at=None):
        lease = Lease(
            local_id=local.id,
            tenant_id=tenant.id if tenant else None,
            status=status,
            start_date=start_date,
            end_date=end_date,
            lease_amount=Decimal(str(lease_amount)),
        )
        if created_at is not None:
            lease.created_at = created_at
        return self._save(lease)

    def payment(self, lease, amount, date, start_date=None, end_date=None, property_id="__lease__"):
        if property_id == "__lease__":
            property_id = lease.local.property_id
        return self._save(
            Payment(
                lease_id=lease.id,
                property_id=property_id,
                amount=Decimal(str(amount)),
                date=date,
                start_date=start_date,
                end_date=end_date,
            )
        )

    def expense(self, amount, prop=None, local=None, vat_amount=0, category=None,
                payment_status="paid", date=datetime(2024, 3, 10, 12, 0)):
        return self._save(
            Expense(
                property_id=prop.id if prop else None,
                local_id=local.id if local else None,
                amount=Decimal(str(amount)),
                vat_amount=Decimal(str(vat_amount)) if vat_amount is not None else None,
                category=category,
                payment_status=payment_status,
                date=date,
            )
        )


@pytest.fixture
def factory(db):
    return Factory(db)


def as_caller(user) -> CurrentUser:
    return CurrentUser(user_id=user.id, email=user.email, role=Role.from_claim(user.role))


@pytest.fixture
def admin(factory):
    return factory.user(role="admin", email="admin@example.com")


@pytest.fixture
def manager_a(factory):
    return factory.user(role="manager", email="a@example.com")


@pytest.fixture
def manager_b(factory):
    return factory.user(role="manager", email="b@example.com")


@pytest.fixture
def caller():
    """Turn a seeded User row into the CurrentUser the auth boundary would build."""
    return as_caller
