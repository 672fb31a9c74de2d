"""Asset router - maintenance history ledger endpoints"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...database import get_db
from ...dependencies import RequestContext, get_request_context
from .schemas import MaintenanceHistoryCreate, MaintenanceHistoryResponse
from .service import MaintenanceHistoryService

router = APIRouter(prefix="/assets", tags=["Assets"])


def get_history_service(db: Session = Depends(get_db)) -> MaintenanceHistoryService:
    """Dependency injection for MaintenanceHistoryService"""
    return MaintenanceHistoryService(db)


@router.get("/{asset_id}/maintenance-history", response_model=list[MaintenanceHistoryResponse])
async def list_maintenance_history(
    asset_id: int,
    limit: Optional[int] = Query(None, ge=1, le=500),
    context: RequestContext = Depends(get_request_context),
    service: MaintenanceHistoryService = Depends(get_history_service),
):
    """Maintenance history for an asset, newest first"""
    entries = service.list_history(asset_id, context.organization_id, limit)
    return [MaintenanceHistoryResponse.model_validate(e) for e in entries]


@router.post(
    "/{asset_id}/maintenance-history",
    response_model=MaintenanceHistoryResponse,
    status_code=201,
)
async def record_maintenance(
    asset_id: int,
    data: MaintenanceHistoryCreate,
    context: RequestContext = Depends(get_request_context),
    service: MaintenanceHistoryService = Depends(get_history_service),
):
    """Record completed maintenance and update the asset's schedule"""
    entry = service.record_completed_maintenance(
        context.organization_id,
        asset_id,
        description=data.description,
        performed_date=data.performedDate,
        work_order_id=data.workOrderId,
        next_maintenance_due=data.nextMaintenanceDue,
        maintenance_type=data.maintenanceType,
        cost=data.cost,
        performed_by=context.user_id,
        downtime_hours=data.downtimeHours,
        notes=data.notes,
    )
    return MaintenanceHistoryResponse.model_validate(entry)
