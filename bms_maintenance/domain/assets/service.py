"""Asset maintenance history service - records completed maintenance and rolls schedules forward"""

import logging
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from ...exceptions import NotFoundError, ValidationError
from ...models import Asset, MaintenanceHistory
from ...shared.persistence import commit as commit_session
from ..work_orders.repository import WorkOrderRepository
from .repository import AssetRepository, MaintenanceHistoryRepository

logger = logging.getLogger(__name__)

MAINTENANCE_TYPES = ("preventive", "corrective", "emergency")


class MaintenanceHistoryService:
    """Service layer for the asset maintenance ledger"""

    def __init__(self, db: Session):
        self.db = db
        self.asset_repo = AssetRepository()
        self.history_repo = MaintenanceHistoryRepository()
        self.work_order_repo = WorkOrderRepository()

    def get_asset(self, asset_id: int, organization_id: str) -> Asset:
        asset = self.asset_repo.get_by_id(self.db, asset_id, organization_id)
        if not asset:
            raise NotFoundError("Asset not found", {"asset_id": asset_id})
        return asset

    def list_history(
        self, asset_id: int, organization_id: str, limit: Optional[int] = None
    ) -> list[MaintenanceHistory]:
        self.get_asset(asset_id, organization_id)
        return self.history_repo.list_by_asset(self.db, asset_id, organization_id, limit)

    def get_history_for_work_order(
        self, work_order_id: int, asset_id: int, organization_id: str
    ) -> Optional[MaintenanceHistory]:
        return self.history_repo.get_by_work_order(self.db, work_order_id, asset_id, organization_id)

    def record_completed_maintenance(
        self,
        organization_id: str,
        asset_id: int,
        description: str,
        performed_date: date,
        work_order_id: Optional[int] = None,
        next_maintenance_due: Optional[date] = None,
        maintenance_type: str = "preventive",
        cost: Optional[float] = None,
        performed_by: Optional[str] = None,
        downtime_hours: Optional[float] = None,
        notes: Optional[str] = None,
        commit: bool = True,
    ) -> MaintenanceHistory:
        """
        Append one history entry and feed it back into the asset schedule.

        The asset's last maintenance date becomes performed_date. Its next
        maintenance date becomes next_maintenance_due when supplied; when not,
        an existing next date is kept only if it still lies on or after
        performed_date, otherwise it is cleared so the next schedule is
        computed from the last maintenance date.

        Pass commit=False to stage the writes inside a caller's transaction.
        """
        asset = self.get_asset(asset_id, organization_id)

        if not description or not description.strip():
            raise ValidationError("Description is required")
        if maintenance_type not in MAINTENANCE_TYPES:
            raise ValidationError(
                f"Unknown maintenance type '{maintenance_type}'",
                {"allowed": list(MAINTENANCE_TYPES)},
            )
        if next_maintenance_due and next_maintenance_due < performed_date:
            raise ValidationError(
                "Next maintenance due date cannot precede the performed date",
                {
                    "performed_date": performed_date.isoformat(),
                    "next_maintenance_due": next_maintenance_due.isoformat(),
                },
            )
        if work_order_id is not None:
            work_order = self.work_order_repo.get_by_id(self.db, work_order_id, organization_id)
            if not work_order:
                raise NotFoundError("Work order not found", {"work_order_id": work_order_id})
            if work_order.asset_id != asset.id:
                raise ValidationError(
                    "Work order does not belong to this asset",
                    {"work_order_id": work_order_id, "asset_id": asset.id},
                )

        entry = self.history_repo.append(
            self.db,
            organization_id=organization_id,
            asset_id=asset.id,
            work_order_id=work_order_id,
            maintenance_type=maintenance_type,
            performed_by=performed_by,
            performed_date=performed_date,
            description=description.strip(),
            cost=cost,
            downtime_hours=downtime_hours,
            notes=notes.strip() if notes else None,
            next_maintenance_due=next_maintenance_due,
        )

        next_date = next_maintenance_due
        if next_date is None and asset.next_maintenance_date and asset.next_maintenance_date >= performed_date:
            next_date = asset.next_maintenance_date
        self.asset_repo.update_schedule_fields(self.db, asset, performed_date, next_date)

        if commit:
            commit_session(self.db, "maintenance history entry")
            self.db.refresh(entry)

        logger.info(
            f"📋 Recorded {maintenance_type} maintenance for asset {asset.id} on {performed_date}"
            f" (next due: {next_date or 'unscheduled'})"
        )
        return entry
