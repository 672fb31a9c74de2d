"""Complaint router - converts tenant complaints into work orders"""

from typing import Optional

from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from ...database import get_db
from ...dependencies import RequestContext, get_request_context
from ..work_orders.schemas import WorkOrderCreatedResponse, WorkOrderResponse
from ..work_orders.service import WorkOrderService
from .schemas import ComplaintConversionRequest

router = APIRouter(prefix="/complaints", tags=["Complaints"])


def get_work_order_service(db: Session = Depends(get_db)) -> WorkOrderService:
    return WorkOrderService(db)


@router.post(
    "/{complaint_id}/convert-to-work-order",
    response_model=WorkOrderCreatedResponse,
    status_code=201,
)
async def convert_to_work_order(
    complaint_id: int,
    data: Optional[ComplaintConversionRequest] = Body(None),
    context: RequestContext = Depends(get_request_context),
    service: WorkOrderService = Depends(get_work_order_service),
):
    """
    Convert a complaint to a work order

    Every field in the body is optional; omitted fields are derived from
    the complaint (category, priority with urgency override, preferred
    time window) and its unit (building).
    """
    work_order = service.convert_complaint_to_work_order(
        complaint_id, context.organization_id, context.actor, data
    )
    return WorkOrderCreatedResponse(
        message="Complaint successfully converted to work order",
        workOrder=WorkOrderResponse.model_validate(work_order),
    )
