"""Pytest configuration and shared fixtures."""

from datetime import date
from typing import Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from bms_maintenance.database import Base, get_db
from bms_maintenance.main import app
from bms_maintenance.models import Asset, Building, Complaint, MaintenanceTask, Unit

ORG_ID = "org-1"
OTHER_ORG_ID = "org-2"


@pytest.fixture
def engine():
    """Fresh in-memory database per test; StaticPool keeps one shared connection."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db):
    """Test client sharing the test session"""

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def headers():
    return {"X-Organization-Id": ORG_ID, "X-User-Id": "user-1"}


# ==================== FACTORIES ====================


@pytest.fixture
def building(db):
    building = Building(organization_id=ORG_ID, name="Maple Court")
    db.add(building)
    db.commit()
    return building


@pytest.fixture
def unit(db, building):
    unit = Unit(organization_id=ORG_ID, building_id=building.id, unit_number="4B")
    db.add(unit)
    db.commit()
    return unit


@pytest.fixture
def make_asset(db, building):
    def _make_asset(
        name: str = "Rooftop HVAC",
        maintenance_frequency: Optional[str] = "quarterly",
        last_maintenance_date: Optional[date] = None,
        next_maintenance_date: Optional[date] = None,
        **overrides,
    ) -> Asset:
        data = {
            "organization_id": ORG_ID,
            "building_id": building.id,
            "asset_type": "equipment",
            "status": "active",
        }
        data.update(overrides)
        asset = Asset(
            name=name,
            maintenance_frequency=maintenance_frequency,
            last_maintenance_date=last_maintenance_date,
            next_maintenance_date=next_maintenance_date,
            **data,
        )
        db.add(asset)
        db.commit()
        return asset

    return _make_asset


@pytest.fixture
def make_task(db, make_asset):
    """Task on its own asset unless one is given (one open task per asset)"""

    def _make_task(
        next_due_date: date,
        status: str = "scheduled",
        asset: Optional[Asset] = None,
        **overrides,
    ) -> MaintenanceTask:
        asset = asset or make_asset(name=f"Asset due {next_due_date}", next_maintenance_date=next_due_date)
        data = {
            "organization_id": asset.organization_id,
            "asset_id": asset.id,
            "building_id": asset.building_id,
            "task_name": f"Maintenance for {asset.name}",
            "description": f"Scheduled maintenance for {asset.name}",
            "frequency_interval": 3,
            "frequency_unit": "months",
            "auto_generate_work_order": True,
        }
        data.update(overrides)
        task = MaintenanceTask(next_due_date=next_due_date, status=status, **data)
        db.add(task)
        db.commit()
        return task

    return _make_task


@pytest.fixture
def make_complaint(db, unit):
    def _make_complaint(**overrides) -> Complaint:
        data = {
            "organization_id": ORG_ID,
            "unit_id": unit.id,
            "title": "Leaking kitchen sink",
            "description": "Water pooling under the sink cabinet",
            "category": "maintenance",
            "maintenance_category": "plumbing",
            "priority": "medium",
            "status": "open",
        }
        data.update(overrides)
        complaint = Complaint(**data)
        db.add(complaint)
        db.commit()
        return complaint

    return _make_complaint
