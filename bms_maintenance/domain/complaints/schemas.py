"""Complaint domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, model_validator

WorkOrderCategory = Literal["plumbing", "electrical", "hvac", "cleaning", "security", "other"]
WorkOrderPriority = Literal["low", "medium", "high", "urgent"]


class TimeWindow(BaseModel):
    start: datetime
    end: datetime

    @model_validator(mode="after")
    def check_order(self):
        if self.end < self.start:
            raise ValueError("Time window end must not precede its start")
        return self


class ComplaintConversionRequest(BaseModel):
    """Optional overrides supplied by staff when converting a complaint"""

    buildingId: Optional[int] = None
    priority: Optional[WorkOrderPriority] = None
    category: Optional[WorkOrderCategory] = None
    assignedTo: Optional[str] = None
    scheduledDate: Optional[date] = None
    scheduledTimeWindow: Optional[TimeWindow] = None
