"""
Periodic maintenance automation
Generates recurring maintenance tasks from asset schedules and turns due tasks into work orders
Should be run as a scheduled job (daily cron) once per organization
"""

import logging
from datetime import date, datetime
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..domain.assets.repository import AssetRepository
from ..domain.maintenance.service import MaintenanceTaskService
from ..domain.work_orders.service import WorkOrderService
from ..exceptions import StoreError
from ..shared.persistence import commit

logger = logging.getLogger(__name__)


def generate_maintenance_tasks(
    db: Session, organization_id: str, today: Optional[date] = None
) -> dict:
    """
    Ensure every scheduled, active asset has exactly one live maintenance task.

    Assets without a frequency are skipped. Assets that already have a task
    that is not cancelled are counted as "updated"; the existing task is not
    reconciled against schedule changes.

    Returns:
        dict: {"created", "updated", "errors"}
    """
    today = today or datetime.utcnow().date()
    summary = {"created": 0, "updated": 0, "errors": 0}
    task_service = MaintenanceTaskService(db)

    try:
        assets = AssetRepository.list_active_by_organization(db, organization_id)
    except SQLAlchemyError as e:
        logger.error(f"❌ Failed to list assets for organization {organization_id}: {str(e)}")
        db.rollback()
        raise StoreError("Failed to list assets", {"organization_id": organization_id}) from e

    for asset in assets:
        if not asset.maintenance_frequency:
            continue

        asset_id = asset.id
        try:
            if task_service.has_live_task(asset):
                summary["updated"] += 1
                continue

            task_service.create_task_for_asset(asset, today)
            commit(db, "maintenance task")
            summary["created"] += 1
        except Exception as e:
            logger.error(f"❌ Error processing asset {asset_id}: {str(e)}")
            db.rollback()
            summary["errors"] += 1

    logger.info(f"📊 Task generation for organization {organization_id}: {summary}")
    return summary


def process_due_maintenance_tasks(
    db: Session, organization_id: str, today: Optional[date] = None
) -> dict:
    """
    Create work orders for due tasks that have auto-generation enabled.

    Task statuses are refreshed first so priorities reflect how late each
    task is. Tasks are handled earliest due first.

    Returns:
        dict: {"processed", "workOrdersCreated", "errors"}
    """
    today = today or datetime.utcnow().date()
    summary = {"processed": 0, "workOrdersCreated": 0, "errors": 0}
    task_service = MaintenanceTaskService(db)
    work_order_service = WorkOrderService(db)

    try:
        task_service.refresh_task_statuses(organization_id, today)
        due_tasks = task_service.find_due_maintenance_tasks(organization_id, True, today)
    except SQLAlchemyError as e:
        logger.error(f"❌ Failed to list due tasks for organization {organization_id}: {str(e)}")
        db.rollback()
        raise StoreError("Failed to list due maintenance tasks", {"organization_id": organization_id}) from e

    # Detach ids up front; a rollback expires the loaded rows
    due = [(task.id, task.auto_generate_work_order) for task in due_tasks]

    for task_id, auto_generate in due:
        try:
            if auto_generate:
                work_order_service.create_work_order_from_task(task_id, organization_id, "system", today)
                summary["workOrdersCreated"] += 1
            summary["processed"] += 1
        except Exception as e:
            logger.error(f"❌ Error processing task {task_id}: {str(e)}")
            db.rollback()
            summary["errors"] += 1

    logger.info(f"📊 Due task processing for organization {organization_id}: {summary}")
    return summary


def run_maintenance_cycle(db: Session, organization_id: str, today: Optional[date] = None) -> dict:
    """Materialize tasks, then generate work orders for whatever is due"""
    tasks = generate_maintenance_tasks(db, organization_id, today)
    work_orders = process_due_maintenance_tasks(db, organization_id, today)
    return {"organization_id": organization_id, "tasks": tasks, "workOrders": work_orders}
