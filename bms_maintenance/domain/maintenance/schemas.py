"""Maintenance domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel


class MaintenanceTaskResponse(BaseModel):
    """Schema for maintenance task response"""

    id: int
    organization_id: str
    asset_id: int
    building_id: int
    task_name: str
    description: str
    schedule_type: str
    frequency_interval: int
    frequency_unit: str
    next_due_date: date
    last_performed: Optional[date] = None
    status: str
    auto_generate_work_order: bool
    assigned_to: Optional[str] = None
    estimated_cost: Optional[float] = None
    linked_work_order_id: Optional[int] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TaskWorkOrderResponse(BaseModel):
    taskId: int
    workOrderId: int


class TaskGenerationSummary(BaseModel):
    created: int
    updated: int
    errors: int


class DueProcessingSummary(BaseModel):
    processed: int
    workOrdersCreated: int
    errors: int


class AutomationResult(BaseModel):
    organization_id: str
    tasks: TaskGenerationSummary
    workOrders: DueProcessingSummary
