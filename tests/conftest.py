"""
Shared fixtures: an in-memory SQLite store per test, with the schema and
triggers created through ``init_db``.
"""
import os

# keep the module-level engine away from any real database
os.environ["DATABASE_URL"] = "sqlite://"

from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from aquamisk.db.models import Customer, Employee, MaintenanceRecord, MobileNumber, PartInventoryItem
from aquamisk.db.session import get_db, init_db, make_engine


@pytest.fixture
def engine():
    engine = make_engine("sqlite://", poolclass=StaticPool)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def client(session_factory):
    from aquamisk.main import app

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


class StoreFactory:
    """Inserts rows directly, bypassing the procedures under test."""

    def __init__(self, session):
        self.session = session

    def part(self, part_id, stock_quantity, part_name=None, unit_price="50.00"):
        part = PartInventoryItem(
            part_id=part_id,
            part_name=part_name or f"Part {part_id}",
            stock_quantity=stock_quantity,
            unit_price=Decimal(unit_price),
        )
        self.session.add(part)
        self.session.commit()
        return part

    def customer(self, customer_code, customer_name=None, address="Tanta", mobile_numbers=()):
        customer = Customer(
            customer_code=customer_code,
            customer_name=customer_name or f"Customer {customer_code}",
            address=address,
            install_date=date(2023, 1, 15),
            mobile_numbers=[MobileNumber(mobile_number=m) for m in mobile_numbers],
        )
        self.session.add(customer)
        self.session.commit()
        return customer

    def employee(self, employee_mobile="01100000001", name="Technician One"):
        employee = Employee(employee_mobile=employee_mobile, name=name)
        self.session.add(employee)
        self.session.commit()
        return employee

    def maintenance(self, maintenance_id, customer_code, upcoming, recent=None, comment="Regular service",
                    employee_mobile=None):
        record = MaintenanceRecord(
            maintenance_id=maintenance_id,
            customer_code=customer_code,
            recent_maintenance=recent or date(upcoming.year - 1, upcoming.month, 1),
            upcoming_maintenance=upcoming,
            comment=comment,
            recent_maintenance_employee=employee_mobile,
        )
        self.session.add(record)
        self.session.commit()
        return record


@pytest.fixture
def factory(db_session):
    return StoreFactory(db_session)
