"""Maintenance task repository - Database operations for maintenance tasks"""

from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from ...models import CLOSED_TASK_STATUSES, OPEN_TASK_STATUSES, MaintenanceTask
from ...shared.persistence import persist


class MaintenanceTaskRepository:
    """Repository for maintenance task database operations"""

    @staticmethod
    def get_by_id(db: Session, task_id: int, organization_id: str) -> Optional[MaintenanceTask]:
        return (
            db.query(MaintenanceTask)
            .filter(MaintenanceTask.id == task_id, MaintenanceTask.organization_id == organization_id)
            .first()
        )

    @staticmethod
    def get_by_linked_work_order(
        db: Session, work_order_id: int, organization_id: str
    ) -> Optional[MaintenanceTask]:
        return (
            db.query(MaintenanceTask)
            .filter(
                MaintenanceTask.linked_work_order_id == work_order_id,
                MaintenanceTask.organization_id == organization_id,
            )
            .first()
        )

    @staticmethod
    def list_by_asset(
        db: Session,
        asset_id: int,
        organization_id: str,
        exclude_statuses: tuple[str, ...] = (),
    ) -> list[MaintenanceTask]:
        """Tasks for an asset, earliest due first"""
        query = db.query(MaintenanceTask).filter(
            MaintenanceTask.asset_id == asset_id,
            MaintenanceTask.organization_id == organization_id,
        )
        if exclude_statuses:
            query = query.filter(MaintenanceTask.status.notin_(exclude_statuses))
        return query.order_by(MaintenanceTask.next_due_date.asc()).all()

    @staticmethod
    def list_by_organization(
        db: Session, organization_id: str, status: Optional[str] = None
    ) -> list[MaintenanceTask]:
        query = db.query(MaintenanceTask).filter(MaintenanceTask.organization_id == organization_id)
        if status:
            query = query.filter(MaintenanceTask.status == status)
        return query.order_by(MaintenanceTask.next_due_date.asc(), MaintenanceTask.id.asc()).all()

    @staticmethod
    def list_open(db: Session, organization_id: str) -> list[MaintenanceTask]:
        return (
            db.query(MaintenanceTask)
            .filter(
                MaintenanceTask.organization_id == organization_id,
                MaintenanceTask.status.in_(OPEN_TASK_STATUSES),
            )
            .all()
        )

    @staticmethod
    def list_due(
        db: Session, organization_id: str, today: date, statuses: tuple[str, ...]
    ) -> list[MaintenanceTask]:
        """
        Tasks due on or before today that have no work order in flight.

        Ordered by due date so the most overdue work is handled first.
        """
        return (
            db.query(MaintenanceTask)
            .filter(
                MaintenanceTask.organization_id == organization_id,
                MaintenanceTask.next_due_date <= today,
                MaintenanceTask.status.notin_(CLOSED_TASK_STATUSES),
                MaintenanceTask.status.in_(statuses),
                MaintenanceTask.linked_work_order_id.is_(None),
            )
            .order_by(MaintenanceTask.next_due_date.asc(), MaintenanceTask.id.asc())
            .all()
        )

    @staticmethod
    def create(db: Session, organization_id: str, **task_data) -> MaintenanceTask:
        task = MaintenanceTask(organization_id=organization_id, **task_data)
        return persist(db, task, "maintenance task")

    @staticmethod
    def update(db: Session, task: MaintenanceTask, **updates) -> MaintenanceTask:
        """Update a task with provided fields; None values are written as-is"""
        for key, value in updates.items():
            if hasattr(task, key):
                setattr(task, key, value)
        return persist(db, task, "maintenance task")
