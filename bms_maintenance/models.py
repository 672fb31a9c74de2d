from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base

# Task statuses that still represent an open maintenance cycle
OPEN_TASK_STATUSES = ("scheduled", "due", "overdue")
CLOSED_TASK_STATUSES = ("completed", "cancelled")
CLOSED_WORK_ORDER_STATUSES = ("completed", "cancelled")
CLOSED_COMPLAINT_STATUSES = ("closed", "resolved")


class Building(Base):
    __tablename__ = "buildings"

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(String(64), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    units = relationship("Unit", back_populates="building")
    assets = relationship("Asset", back_populates="building")


class Unit(Base):
    __tablename__ = "units"

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(String(64), nullable=False, index=True)
    building_id = Column(Integer, ForeignKey("buildings.id"), nullable=False, index=True)
    unit_number = Column(String(50), nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    building = relationship("Building", back_populates="units")


class Asset(Base):
    __tablename__ = "assets"

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(String(64), nullable=False, index=True)
    building_id = Column(Integer, ForeignKey("buildings.id"), nullable=False, index=True)
    unit_id = Column(Integer, ForeignKey("units.id"), nullable=True)
    name = Column(String(255), nullable=False)
    asset_type = Column(
        String(50), nullable=False, default="equipment"
    )  # equipment, furniture, infrastructure, vehicle, appliance, other
    status = Column(String(50), nullable=False, default="active")  # active, maintenance, retired, disposed

    # Maintenance schedule metadata; the asset is the sole owner of schedule state
    maintenance_frequency = Column(String(100), nullable=True)  # free text, e.g. "quarterly"
    last_maintenance_date = Column(Date, nullable=True)
    next_maintenance_date = Column(Date, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    building = relationship("Building", back_populates="assets")
    maintenance_tasks = relationship("MaintenanceTask", back_populates="asset")
    maintenance_history = relationship("MaintenanceHistory", back_populates="asset")


class MaintenanceTask(Base):
    __tablename__ = "maintenance_tasks"
    __table_args__ = (
        # At most one open task per asset
        Index(
            "uq_maintenance_tasks_open_asset",
            "asset_id",
            unique=True,
            postgresql_where=text("status NOT IN ('completed', 'cancelled')"),
            sqlite_where=text("status NOT IN ('completed', 'cancelled')"),
        ),
        Index("ix_maintenance_tasks_org_next_due", "organization_id", "next_due_date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(String(64), nullable=False, index=True)
    asset_id = Column(Integer, ForeignKey("assets.id"), nullable=False, index=True)
    building_id = Column(Integer, ForeignKey("buildings.id"), nullable=False)
    task_name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    schedule_type = Column(String(50), nullable=False, default="time-based")
    frequency_interval = Column(Integer, nullable=False, default=1)
    frequency_unit = Column(String(20), nullable=False, default="months")  # days, weeks, months
    next_due_date = Column(Date, nullable=False)
    last_performed = Column(Date, nullable=True)
    status = Column(
        String(20), nullable=False, default="scheduled"
    )  # scheduled, due, overdue, completed, cancelled
    auto_generate_work_order = Column(Boolean, nullable=False, default=False)
    assigned_to = Column(String(64), nullable=True)
    estimated_cost = Column(Float, nullable=True)
    # Work order generated for the current cycle, cleared when that work order closes
    linked_work_order_id = Column(Integer, nullable=True, index=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    asset = relationship("Asset", back_populates="maintenance_tasks")


class Complaint(Base):
    __tablename__ = "complaints"

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(String(64), nullable=False, index=True)
    tenant_id = Column(String(64), nullable=True)
    unit_id = Column(Integer, ForeignKey("units.id"), nullable=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(String(50), nullable=False, default="other")  # maintenance, noise, security, cleanliness, other
    maintenance_category = Column(
        String(50), nullable=True
    )  # plumbing, electrical, hvac, appliance, structural, other
    priority = Column(String(20), nullable=False, default="medium")  # low, medium, high, urgent
    urgency = Column(String(20), nullable=True)  # low, medium, high, emergency
    status = Column(String(20), nullable=False, default="open")  # open, assigned, in_progress, resolved, closed
    assigned_to = Column(String(64), nullable=True)
    preferred_window_start = Column(DateTime, nullable=True)
    preferred_window_end = Column(DateTime, nullable=True)
    linked_work_order_id = Column(Integer, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class WorkOrder(Base):
    __tablename__ = "work_orders"
    __table_args__ = (
        # A complaint converts into at most one work order
        Index(
            "uq_work_orders_complaint",
            "complaint_id",
            unique=True,
            postgresql_where=text("complaint_id IS NOT NULL"),
            sqlite_where=text("complaint_id IS NOT NULL"),
        ),
        # A task has at most one active work order
        Index(
            "uq_work_orders_active_task",
            "maintenance_task_id",
            unique=True,
            postgresql_where=text(
                "maintenance_task_id IS NOT NULL AND status NOT IN ('completed', 'cancelled')"
            ),
            sqlite_where=text(
                "maintenance_task_id IS NOT NULL AND status NOT IN ('completed', 'cancelled')"
            ),
        ),
        Index("ix_work_orders_org_building_status", "organization_id", "building_id", "status"),
    )

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(String(64), nullable=False, index=True)
    building_id = Column(Integer, ForeignKey("buildings.id"), nullable=False)
    unit_id = Column(Integer, ForeignKey("units.id"), nullable=True)
    asset_id = Column(Integer, ForeignKey("assets.id"), nullable=True)
    complaint_id = Column(Integer, ForeignKey("complaints.id"), nullable=True)
    maintenance_task_id = Column(Integer, ForeignKey("maintenance_tasks.id"), nullable=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(
        String(50), nullable=False, default="other"
    )  # plumbing, electrical, hvac, cleaning, security, other
    priority = Column(String(20), nullable=False, default="medium")  # low, medium, high, urgent
    status = Column(
        String(20), nullable=False, default="open"
    )  # open, assigned, in_progress, completed, cancelled
    assigned_to = Column(String(64), nullable=True)
    estimated_cost = Column(Float, nullable=True)
    actual_cost = Column(Float, nullable=True)
    scheduled_date = Column(Date, nullable=True)
    scheduled_window_start = Column(DateTime, nullable=True)
    scheduled_window_end = Column(DateTime, nullable=True)
    started_at = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)
    notes = Column(Text, nullable=True)
    created_by = Column(String(64), nullable=False, default="system")

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    asset = relationship("Asset")
    complaint = relationship("Complaint")
    maintenance_task = relationship("MaintenanceTask")


class MaintenanceHistory(Base):
    """Append-only ledger of completed maintenance; informs but never is the schedule"""

    __tablename__ = "maintenance_history"

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(String(64), nullable=False, index=True)
    asset_id = Column(Integer, ForeignKey("assets.id"), nullable=False, index=True)
    work_order_id = Column(Integer, ForeignKey("work_orders.id"), nullable=True, index=True)
    maintenance_type = Column(String(20), nullable=False)  # preventive, corrective, emergency
    performed_by = Column(String(64), nullable=True)
    performed_date = Column(Date, nullable=False)
    description = Column(Text, nullable=False)
    cost = Column(Float, nullable=True)
    downtime_hours = Column(Float, nullable=True)
    notes = Column(Text, nullable=True)
    next_maintenance_due = Column(Date, nullable=True)

    created_at = Column(DateTime, server_default=func.now())

    asset = relationship("Asset", back_populates="maintenance_history")
