"""Work order domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, field_validator


class WorkOrderResponse(BaseModel):
    """Schema for work order response"""

    id: int
    organization_id: str
    building_id: int
    unit_id: Optional[int] = None
    asset_id: Optional[int] = None
    complaint_id: Optional[int] = None
    maintenance_task_id: Optional[int] = None
    title: str
    description: str
    category: str
    priority: str
    status: str
    assigned_to: Optional[str] = None
    estimated_cost: Optional[float] = None
    actual_cost: Optional[float] = None
    scheduled_date: Optional[date] = None
    scheduled_window_start: Optional[datetime] = None
    scheduled_window_end: Optional[datetime] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    notes: Optional[str] = None
    created_by: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class WorkOrderCompleteRequest(BaseModel):
    actualCost: Optional[float] = None
    notes: Optional[str] = None

    @field_validator("actualCost")
    @classmethod
    def validate_cost(cls, v):
        if v is not None and v < 0:
            raise ValueError("Actual cost cannot be negative")
        return v


class WorkOrderCreatedResponse(BaseModel):
    message: str
    workOrder: WorkOrderResponse
