"""Work order router - FastAPI endpoints for the work order lifecycle"""

from typing import Optional

from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from ...database import get_db
from ...dependencies import RequestContext, get_request_context
from .schemas import WorkOrderCompleteRequest, WorkOrderResponse
from .service import WorkOrderService

router = APIRouter(prefix="/work-orders", tags=["Work Orders"])


def get_work_order_service(db: Session = Depends(get_db)) -> WorkOrderService:
    """Dependency injection for WorkOrderService"""
    return WorkOrderService(db)


@router.get("/{work_order_id}", response_model=WorkOrderResponse)
async def get_work_order(
    work_order_id: int,
    context: RequestContext = Depends(get_request_context),
    service: WorkOrderService = Depends(get_work_order_service),
):
    work_order = service.get_work_order(work_order_id, context.organization_id)
    return WorkOrderResponse.model_validate(work_order)


@router.post("/{work_order_id}/start", response_model=WorkOrderResponse)
async def start_work_order(
    work_order_id: int,
    context: RequestContext = Depends(get_request_context),
    service: WorkOrderService = Depends(get_work_order_service),
):
    work_order = service.start_work_order(work_order_id, context.organization_id)
    return WorkOrderResponse.model_validate(work_order)


@router.post("/{work_order_id}/complete", response_model=WorkOrderResponse)
async def complete_work_order(
    work_order_id: int,
    data: Optional[WorkOrderCompleteRequest] = Body(None),
    context: RequestContext = Depends(get_request_context),
    service: WorkOrderService = Depends(get_work_order_service),
):
    """
    Complete a work order

    Records a maintenance history entry for the asset and rolls any linked
    maintenance task forward to its next cycle.
    """
    data = data or WorkOrderCompleteRequest()
    work_order = service.complete_work_order(
        work_order_id,
        context.organization_id,
        actual_cost=data.actualCost,
        notes=data.notes,
        performed_by=context.user_id,
    )
    return WorkOrderResponse.model_validate(work_order)


@router.post("/{work_order_id}/cancel", response_model=WorkOrderResponse)
async def cancel_work_order(
    work_order_id: int,
    context: RequestContext = Depends(get_request_context),
    service: WorkOrderService = Depends(get_work_order_service),
):
    work_order = service.cancel_work_order(work_order_id, context.organization_id)
    return WorkOrderResponse.model_validate(work_order)
