"""Work order service - generates work orders from tasks and complaints, drives their lifecycle"""

import logging
from datetime import date, datetime
from typing import Optional

from sqlalchemy.orm import Session

from ...config import ASSET_CATEGORY_MAP
from ...exceptions import InvalidStateError, NotFoundError, ValidationError
from ...models import (
    CLOSED_COMPLAINT_STATUSES,
    CLOSED_TASK_STATUSES,
    CLOSED_WORK_ORDER_STATUSES,
    Asset,
    MaintenanceHistory,
    MaintenanceTask,
    WorkOrder,
)
from ...shared.persistence import commit
from ..assets.repository import AssetRepository
from ..assets.service import MaintenanceHistoryService
from ..buildings.repository import BuildingRepository
from ..complaints.repository import ComplaintRepository
from ..complaints.schemas import ComplaintConversionRequest
from ..maintenance.repository import MaintenanceTaskRepository
from ..maintenance.service import classify_task_status
from ..scheduling import (
    Frequency,
    FrequencyUnit,
    ScheduleSnapshot,
    add_interval,
    compute_next_due,
    resolve_frequency,
)
from .repository import WorkOrderRepository

logger = logging.getLogger(__name__)

MAINTENANCE_CATEGORY_MAP = {
    "plumbing": "plumbing",
    "electrical": "electrical",
    "hvac": "hvac",
    "appliance": "other",
    "structural": "other",
    "other": "other",
}

COMPLAINT_CATEGORY_MAP = {
    "maintenance": "other",
    "security": "security",
    "cleanliness": "cleaning",
}

URGENCY_PRIORITY_MAP = {
    "emergency": "urgent",
    "high": "high",
    "medium": "medium",
    "low": "low",
}


def map_asset_type_to_category(asset_type: Optional[str], category_map: Optional[dict] = None) -> str:
    """Coarse asset type → work order category mapping; unknown types fall back to "other" """
    category_map = ASSET_CATEGORY_MAP if category_map is None else category_map
    return category_map.get(asset_type or "", "other")


def determine_priority_from_task(task_status: str) -> str:
    if task_status == "overdue":
        return "high"
    if task_status == "due":
        return "medium"
    return "low"


def map_complaint_category(category: Optional[str], maintenance_category: Optional[str] = None) -> str:
    """A maintenance category, when present, wins over the general complaint category"""
    if maintenance_category:
        return MAINTENANCE_CATEGORY_MAP.get(maintenance_category, "other")
    return COMPLAINT_CATEGORY_MAP.get(category or "", "other")


def map_complaint_priority(priority: str, urgency: Optional[str] = None) -> str:
    """Urgency, when present, overrides the complaint's own priority"""
    if urgency:
        return URGENCY_PRIORITY_MAP.get(urgency, priority)
    return priority


def determine_maintenance_type(work_order: WorkOrder) -> str:
    """Classify completed work as preventive, emergency or corrective"""
    description = (work_order.description or "").lower()
    if work_order.maintenance_task_id or "preventive" in description or "scheduled" in description:
        return "preventive"
    if work_order.priority == "urgent" or "emergency" in description:
        return "emergency"
    return "corrective"


def task_frequency(task: MaintenanceTask) -> Frequency:
    return Frequency(task.frequency_interval, FrequencyUnit(task.frequency_unit))


class WorkOrderService:
    """Service layer for work order business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = WorkOrderRepository()
        self.task_repo = MaintenanceTaskRepository()
        self.asset_repo = AssetRepository()
        self.building_repo = BuildingRepository()
        self.complaint_repo = ComplaintRepository()
        self.history_service = MaintenanceHistoryService(db)

    def get_work_order(self, work_order_id: int, organization_id: str) -> WorkOrder:
        work_order = self.repo.get_by_id(self.db, work_order_id, organization_id)
        if not work_order:
            raise NotFoundError("Work order not found", {"work_order_id": work_order_id})
        return work_order

    # ========================================================================
    # CREATION
    # ========================================================================

    def _create_work_order(self, organization_id: str, **work_order_data) -> WorkOrder:
        """Validate placement and required fields, then stage the work order"""
        building_id = work_order_data.get("building_id")
        if not self.building_repo.get_building_by_id(self.db, building_id, organization_id):
            raise NotFoundError("Building not found", {"building_id": building_id})

        unit_id = work_order_data.get("unit_id")
        if unit_id is not None and not self.building_repo.get_unit_by_id(self.db, unit_id, organization_id):
            raise NotFoundError("Unit not found", {"unit_id": unit_id})

        for field in ("title", "description", "category"):
            if not work_order_data.get(field):
                raise ValidationError("title, description, and category are required")

        work_order_data.setdefault("status", "open")
        return self.repo.create(self.db, organization_id, **work_order_data)

    def create_work_order_from_task(
        self,
        task_id: int,
        organization_id: str,
        created_by: Optional[str] = None,
        today: Optional[date] = None,
    ) -> int:
        """
        Create a work order for a due maintenance task.

        The task label is first brought up to date with its due date, so
        priority reflects how late the task is. The task then records the
        work order as its linked work order, which keeps it out of due
        selection until that work order is completed or cancelled.
        """
        today = today or datetime.utcnow().date()
        task = self.task_repo.get_by_id(self.db, task_id, organization_id)
        if not task:
            raise NotFoundError("Maintenance task not found", {"task_id": task_id})

        if task.status in CLOSED_TASK_STATUSES:
            raise InvalidStateError(
                "Cannot create work order from completed or cancelled task",
                {"task_id": task_id, "status": task.status},
            )
        if task.linked_work_order_id:
            raise InvalidStateError(
                "Task already has a work order in progress",
                {"task_id": task_id, "work_order_id": task.linked_work_order_id},
            )

        asset = self.asset_repo.get_by_id(self.db, task.asset_id, organization_id)
        if not asset:
            raise NotFoundError("Asset not found", {"asset_id": task.asset_id})

        status = classify_task_status(task.next_due_date, today)

        try:
            if status != task.status:
                self.task_repo.update(self.db, task, status=status)
            work_order = self._create_work_order(
                organization_id,
                building_id=task.building_id,
                unit_id=asset.unit_id,
                asset_id=task.asset_id,
                maintenance_task_id=task.id,
                title=task.task_name,
                description=task.description,
                category=map_asset_type_to_category(asset.asset_type),
                priority=determine_priority_from_task(status),
                status="assigned" if task.assigned_to else "open",
                assigned_to=task.assigned_to,
                estimated_cost=task.estimated_cost,
                created_by=created_by or "system",
            )
            self.task_repo.update(self.db, task, linked_work_order_id=work_order.id)
            commit(self.db, "work order")
        except Exception:
            self.db.rollback()
            raise

        logger.info(
            f"🔧 Work order {work_order.id} created from task {task.id} "
            f"(priority={work_order.priority}, category={work_order.category})"
        )
        return work_order.id

    def convert_complaint_to_work_order(
        self,
        complaint_id: int,
        organization_id: str,
        created_by: Optional[str] = None,
        overrides: Optional[ComplaintConversionRequest] = None,
    ) -> WorkOrder:
        """
        Convert a tenant complaint into a work order.

        Rejections leave both the complaint and the work order store untouched.
        """
        overrides = overrides or ComplaintConversionRequest()

        complaint = self.complaint_repo.get_by_id(self.db, complaint_id, organization_id)
        if not complaint:
            raise NotFoundError("Complaint not found", {"complaint_id": complaint_id})

        if complaint.linked_work_order_id:
            raise InvalidStateError(
                "Complaint already has a linked work order",
                {"complaint_id": complaint_id, "work_order_id": complaint.linked_work_order_id},
            )
        if complaint.status in CLOSED_COMPLAINT_STATUSES:
            raise InvalidStateError(
                "Cannot convert closed or resolved complaint to work order",
                {"complaint_id": complaint_id, "status": complaint.status},
            )
        if not complaint.unit_id:
            raise InvalidStateError(
                "Complaint must be associated with a unit to create work order",
                {"complaint_id": complaint_id},
            )

        unit = self.building_repo.get_unit_by_id(self.db, complaint.unit_id, organization_id)
        if not unit:
            raise NotFoundError("Unit not found", {"unit_id": complaint.unit_id})

        window_start = window_end = None
        if overrides.scheduledTimeWindow:
            window_start = overrides.scheduledTimeWindow.start
            window_end = overrides.scheduledTimeWindow.end
        elif complaint.preferred_window_start and complaint.preferred_window_end:
            window_start = complaint.preferred_window_start
            window_end = complaint.preferred_window_end

        try:
            work_order = self._create_work_order(
                organization_id,
                building_id=overrides.buildingId or unit.building_id,
                unit_id=complaint.unit_id,
                complaint_id=complaint.id,
                title=complaint.title,
                description=complaint.description,
                category=overrides.category
                or map_complaint_category(complaint.category, complaint.maintenance_category),
                priority=overrides.priority
                or map_complaint_priority(complaint.priority, complaint.urgency),
                status="assigned" if overrides.assignedTo else "open",
                assigned_to=overrides.assignedTo,
                scheduled_date=overrides.scheduledDate,
                scheduled_window_start=window_start,
                scheduled_window_end=window_end,
                created_by=created_by or "system",
            )
            self.complaint_repo.update_link_and_status(
                self.db,
                complaint,
                linked_work_order_id=work_order.id,
                status="assigned" if overrides.assignedTo else "in_progress",
            )
            commit(self.db, "work order")
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(work_order)
        logger.info(f"✅ Complaint {complaint.id} converted to work order {work_order.id}")
        return work_order

    # ========================================================================
    # LIFECYCLE
    # ========================================================================

    def start_work_order(self, work_order_id: int, organization_id: str) -> WorkOrder:
        work_order = self.get_work_order(work_order_id, organization_id)
        if work_order.status not in ("open", "assigned"):
            raise InvalidStateError(
                "Work order cannot be started in current status",
                {"work_order_id": work_order_id, "status": work_order.status},
            )

        self.repo.update(self.db, work_order, status="in_progress", started_at=datetime.utcnow())
        commit(self.db, "work order")
        return work_order

    def cancel_work_order(self, work_order_id: int, organization_id: str) -> WorkOrder:
        """Cancel a work order and release its task so the task can be picked up again"""
        work_order = self.get_work_order(work_order_id, organization_id)
        if work_order.status in CLOSED_WORK_ORDER_STATUSES:
            raise InvalidStateError(
                f"Work order is already {work_order.status}",
                {"work_order_id": work_order_id},
            )

        try:
            self.repo.update(self.db, work_order, status="cancelled")
            task = self.task_repo.get_by_linked_work_order(self.db, work_order.id, organization_id)
            if task:
                self.task_repo.update(self.db, task, linked_work_order_id=None)
            commit(self.db, "work order")
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Work order {work_order.id} cancelled")
        return work_order

    def complete_work_order(
        self,
        work_order_id: int,
        organization_id: str,
        actual_cost: Optional[float] = None,
        notes: Optional[str] = None,
        performed_by: Optional[str] = None,
        completed_at: Optional[datetime] = None,
    ) -> WorkOrder:
        """Complete a work order and record the resulting maintenance in one transaction"""
        work_order = self.get_work_order(work_order_id, organization_id)
        if work_order.status in CLOSED_WORK_ORDER_STATUSES:
            raise InvalidStateError(
                f"Work order is already {work_order.status}",
                {"work_order_id": work_order_id},
            )

        try:
            self.repo.update(
                self.db,
                work_order,
                status="completed",
                completed_at=completed_at or datetime.utcnow(),
                actual_cost=actual_cost if actual_cost is not None else work_order.actual_cost,
                notes=notes if notes is not None else work_order.notes,
            )
            self.handle_work_order_completion(work_order, performed_by)
            commit(self.db, "work order completion")
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"✅ Work order {work_order.id} completed")
        return work_order

    def handle_work_order_completion(
        self, work_order: WorkOrder, performed_by: Optional[str] = None
    ) -> Optional[MaintenanceHistory]:
        """
        Feed a completed work order back into the asset schedule.

        Writes one history entry for the asset (if any) and rolls the linked
        task forward to its next cycle. Staged only; the caller commits.
        """
        if work_order.status != "completed":
            raise InvalidStateError("Work order is not completed", {"work_order_id": work_order.id})

        organization_id = work_order.organization_id
        task = self.task_repo.get_by_linked_work_order(self.db, work_order.id, organization_id)
        asset_id = work_order.asset_id or (task.asset_id if task else None)
        if not asset_id:
            return None

        asset = self.asset_repo.get_by_id(self.db, asset_id, organization_id)
        if not asset:
            raise NotFoundError("Asset not found", {"asset_id": asset_id})

        performed_on = (work_order.completed_at or datetime.utcnow()).date()

        # One history entry per work order
        entry = self.history_service.get_history_for_work_order(work_order.id, asset.id, organization_id)
        if entry:
            logger.info(f"History for work order {work_order.id} already recorded")
        else:
            entry = self._record_history(work_order, task, asset, performed_on, performed_by)

        if task:
            task_next_due = compute_next_due(ScheduleSnapshot.from_asset(asset), performed_on)
            self.task_repo.update(
                self.db,
                task,
                last_performed=performed_on,
                next_due_date=task_next_due,
                status=classify_task_status(task_next_due, performed_on),
                linked_work_order_id=None,
            )
            logger.info(f"🔁 Task {task.id} rolled forward to {task_next_due}")

        return entry

    def _record_history(
        self,
        work_order: WorkOrder,
        task: Optional[MaintenanceTask],
        asset: Asset,
        performed_on: date,
        performed_by: Optional[str],
    ) -> MaintenanceHistory:
        maintenance_type = determine_maintenance_type(work_order)

        downtime_hours = None
        if work_order.started_at and work_order.completed_at:
            downtime_hours = (work_order.completed_at - work_order.started_at).total_seconds() / 3600

        next_due = None
        if maintenance_type == "preventive":
            next_due = self._next_due_after(performed_on, task, asset)

        return self.history_service.record_completed_maintenance(
            work_order.organization_id,
            asset.id,
            description=work_order.description,
            performed_date=performed_on,
            work_order_id=work_order.id,
            next_maintenance_due=next_due,
            maintenance_type=maintenance_type,
            cost=work_order.actual_cost,
            performed_by=performed_by or work_order.assigned_to,
            downtime_hours=downtime_hours,
            notes=work_order.notes,
            commit=False,
        )

    @staticmethod
    def _next_due_after(
        performed_on: date, task: Optional[MaintenanceTask], asset: Asset
    ) -> Optional[date]:
        if task:
            return add_interval(performed_on, task_frequency(task))
        if asset.maintenance_frequency:
            return add_interval(performed_on, resolve_frequency(asset.maintenance_frequency))
        return None
