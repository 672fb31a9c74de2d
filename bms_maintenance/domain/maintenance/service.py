"""Maintenance task service - task materialization, due classification and lifecycle"""

import logging
from datetime import date, datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from ...config import MAINTENANCE_DUE_SOON_DAYS
from ...exceptions import InvalidStateError, NotFoundError
from ...models import CLOSED_TASK_STATUSES, OPEN_TASK_STATUSES, Asset, MaintenanceTask
from ...shared.persistence import commit
from ..scheduling import ScheduleSnapshot, compute_next_due, resolve_frequency
from .repository import MaintenanceTaskRepository

logger = logging.getLogger(__name__)


def classify_task_status(
    next_due_date: date, today: date, due_soon_days: int = MAINTENANCE_DUE_SOON_DAYS
) -> str:
    """
    Label an open task by its due date.

    overdue: the due date has fully elapsed (before today)
    due: due today or within the due-soon window
    scheduled: further out
    """
    if next_due_date < today:
        return "overdue"
    if next_due_date <= today + timedelta(days=due_soon_days):
        return "due"
    return "scheduled"


class MaintenanceTaskService:
    """Service layer for maintenance task business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = MaintenanceTaskRepository()

    def get_task(self, task_id: int, organization_id: str) -> MaintenanceTask:
        task = self.repo.get_by_id(self.db, task_id, organization_id)
        if not task:
            raise NotFoundError("Maintenance task not found", {"task_id": task_id})
        return task

    def list_tasks(self, organization_id: str, status: Optional[str] = None) -> list[MaintenanceTask]:
        return self.repo.list_by_organization(self.db, organization_id, status)

    def has_live_task(self, asset: Asset) -> bool:
        """Whether the asset already has a task that is not cancelled"""
        existing = self.repo.list_by_asset(
            self.db, asset.id, asset.organization_id, exclude_statuses=("cancelled",)
        )
        return len(existing) > 0

    def create_task_for_asset(self, asset: Asset, today: date) -> MaintenanceTask:
        """Create the recurring task for a scheduled asset (staged, not committed)"""
        frequency = resolve_frequency(asset.maintenance_frequency)
        next_due_date = compute_next_due(ScheduleSnapshot.from_asset(asset), today)

        task = self.repo.create(
            self.db,
            asset.organization_id,
            asset_id=asset.id,
            building_id=asset.building_id,
            task_name=f"Maintenance for {asset.name}",
            description=f"Scheduled maintenance for {asset.name} ({asset.asset_type})",
            schedule_type="time-based",
            frequency_interval=frequency.interval,
            frequency_unit=frequency.unit.value,
            next_due_date=next_due_date,
            status=classify_task_status(next_due_date, today),
            auto_generate_work_order=True,
        )
        logger.info(
            f"✅ Created maintenance task {task.id} for asset {asset.id} "
            f"({frequency.interval} {frequency.unit.value}, due {next_due_date})"
        )
        return task

    def refresh_task_statuses(self, organization_id: str, today: Optional[date] = None) -> int:
        """Re-label open tasks as scheduled/due/overdue; returns how many changed"""
        today = today or datetime.utcnow().date()
        changed = 0

        for task in self.repo.list_open(self.db, organization_id):
            status = classify_task_status(task.next_due_date, today)
            if status != task.status:
                logger.debug(f"Task {task.id} transitioned: {task.status} → {status}")
                self.repo.update(self.db, task, status=status)
                changed += 1

        if changed:
            commit(self.db, "maintenance task statuses")
        return changed

    def find_due_maintenance_tasks(
        self,
        organization_id: str,
        include_overdue: bool = True,
        today: Optional[date] = None,
    ) -> list[MaintenanceTask]:
        """
        Select tasks that need a work order.

        A task qualifies when its due date is today or earlier, it is not
        completed or cancelled, and no work order for it is in flight.
        Without include_overdue, tasks labelled overdue are left out.
        """
        today = today or datetime.utcnow().date()
        statuses = OPEN_TASK_STATUSES
        if not include_overdue:
            statuses = tuple(s for s in OPEN_TASK_STATUSES if s != "overdue")
        return self.repo.list_due(self.db, organization_id, today, statuses)

    def cancel_task(self, task_id: int, organization_id: str) -> MaintenanceTask:
        task = self.get_task(task_id, organization_id)
        if task.status in CLOSED_TASK_STATUSES:
            raise InvalidStateError(f"Task is already {task.status}", {"task_id": task_id})
        if task.linked_work_order_id:
            raise InvalidStateError(
                "Task has a work order in progress; cancel the work order first",
                {"task_id": task_id, "work_order_id": task.linked_work_order_id},
            )

        self.repo.update(self.db, task, status="cancelled")
        commit(self.db, "maintenance task")
        logger.info(f"Task {task.id} cancelled")
        return task
