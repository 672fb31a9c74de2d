"""Maintenance router - FastAPI endpoints for maintenance tasks and automation"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ...database import get_db
from ...dependencies import RequestContext, get_request_context
from ...locks import organization_run_lock
from ...services.maintenance_automation import run_maintenance_cycle
from ..work_orders.service import WorkOrderService
from .schemas import AutomationResult, MaintenanceTaskResponse, TaskWorkOrderResponse
from .service import MaintenanceTaskService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/maintenance", tags=["Maintenance"])


def get_task_service(db: Session = Depends(get_db)) -> MaintenanceTaskService:
    """Dependency injection for MaintenanceTaskService"""
    return MaintenanceTaskService(db)


def get_work_order_service(db: Session = Depends(get_db)) -> WorkOrderService:
    return WorkOrderService(db)


@router.get("/tasks", response_model=list[MaintenanceTaskResponse])
async def list_tasks(
    status: Optional[str] = Query(None),
    context: RequestContext = Depends(get_request_context),
    service: MaintenanceTaskService = Depends(get_task_service),
):
    """List maintenance tasks for the organization, earliest due first"""
    tasks = service.list_tasks(context.organization_id, status)
    return [MaintenanceTaskResponse.model_validate(t) for t in tasks]


@router.get("/tasks/due", response_model=list[MaintenanceTaskResponse])
async def list_due_tasks(
    includeOverdue: bool = Query(True),
    context: RequestContext = Depends(get_request_context),
    service: MaintenanceTaskService = Depends(get_task_service),
):
    """Tasks that are due and have no work order in progress"""
    tasks = service.find_due_maintenance_tasks(context.organization_id, includeOverdue)
    return [MaintenanceTaskResponse.model_validate(t) for t in tasks]


@router.post("/tasks/{task_id}/work-order", response_model=TaskWorkOrderResponse, status_code=201)
async def create_work_order_for_task(
    task_id: int,
    context: RequestContext = Depends(get_request_context),
    service: WorkOrderService = Depends(get_work_order_service),
):
    """Manually create a work order for a maintenance task"""
    work_order_id = service.create_work_order_from_task(task_id, context.organization_id, context.actor)
    return TaskWorkOrderResponse(taskId=task_id, workOrderId=work_order_id)


@router.post("/tasks/{task_id}/cancel", response_model=MaintenanceTaskResponse)
async def cancel_task(
    task_id: int,
    context: RequestContext = Depends(get_request_context),
    service: MaintenanceTaskService = Depends(get_task_service),
):
    task = service.cancel_task(task_id, context.organization_id)
    return MaintenanceTaskResponse.model_validate(task)


@router.post("/automation/run", response_model=AutomationResult)
async def run_maintenance_automation(
    context: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    """
    Manually trigger the maintenance cycle for the caller's organization
    (In production this runs via the daily worker cron)
    """
    with organization_run_lock(context.organization_id) as acquired:
        if not acquired:
            raise HTTPException(status_code=409, detail="A maintenance run is already in progress")
        result = run_maintenance_cycle(db, context.organization_id)

    logger.info(f"Manual maintenance run by {context.actor}: {result}")
    return AutomationResult(**result)
