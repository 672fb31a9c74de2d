"""Asset domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, field_validator

MaintenanceType = Literal["preventive", "corrective", "emergency"]


class MaintenanceHistoryCreate(BaseModel):
    """Schema for recording completed maintenance against an asset"""

    description: str
    performedDate: date
    workOrderId: Optional[int] = None
    nextMaintenanceDue: Optional[date] = None
    maintenanceType: MaintenanceType = "preventive"
    cost: Optional[float] = None
    downtimeHours: Optional[float] = None
    notes: Optional[str] = None

    @field_validator("description")
    @classmethod
    def validate_description(cls, v):
        if not v or not v.strip():
            raise ValueError("Description is required")
        return v.strip()

    @field_validator("cost", "downtimeHours")
    @classmethod
    def validate_non_negative(cls, v):
        if v is not None and v < 0:
            raise ValueError("Value cannot be negative")
        return v


class MaintenanceHistoryResponse(BaseModel):
    """Schema for maintenance history response"""

    id: int
    organization_id: str
    asset_id: int
    work_order_id: Optional[int] = None
    maintenance_type: str
    performed_by: Optional[str] = None
    performed_date: date
    description: str
    cost: Optional[float] = None
    downtime_hours: Optional[float] = None
    notes: Optional[str] = None
    next_maintenance_due: Optional[date] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
