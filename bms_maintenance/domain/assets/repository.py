"""Asset repository - Database operations for assets and their maintenance history"""

from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from ...models import Asset, MaintenanceHistory
from ...shared.persistence import persist


class AssetRepository:
    """Repository for asset database operations"""

    @staticmethod
    def list_active_by_organization(db: Session, organization_id: str) -> list[Asset]:
        """Get all active assets for an organization"""
        return (
            db.query(Asset)
            .filter(Asset.organization_id == organization_id, Asset.status == "active")
            .order_by(Asset.id.asc())
            .all()
        )

    @staticmethod
    def get_by_id(db: Session, asset_id: int, organization_id: str) -> Optional[Asset]:
        return (
            db.query(Asset)
            .filter(Asset.id == asset_id, Asset.organization_id == organization_id)
            .first()
        )

    @staticmethod
    def list_scheduled_organization_ids(db: Session) -> list[str]:
        """Organizations owning at least one active asset with a maintenance schedule"""
        rows = (
            db.query(Asset.organization_id)
            .filter(Asset.status == "active", Asset.maintenance_frequency.isnot(None))
            .distinct()
            .order_by(Asset.organization_id.asc())
            .all()
        )
        return [row[0] for row in rows]

    @staticmethod
    def update_schedule_fields(
        db: Session,
        asset: Asset,
        last_maintenance_date: Optional[date],
        next_maintenance_date: Optional[date],
    ) -> Asset:
        asset.last_maintenance_date = last_maintenance_date
        asset.next_maintenance_date = next_maintenance_date
        return persist(db, asset, "asset")


class MaintenanceHistoryRepository:
    """Append-only store for completed maintenance"""

    @staticmethod
    def append(db: Session, **history_data) -> MaintenanceHistory:
        return persist(db, MaintenanceHistory(**history_data), "maintenance history entry")

    @staticmethod
    def list_by_asset(
        db: Session, asset_id: int, organization_id: str, limit: Optional[int] = None
    ) -> list[MaintenanceHistory]:
        """History for an asset, most recent first"""
        query = (
            db.query(MaintenanceHistory)
            .filter(
                MaintenanceHistory.asset_id == asset_id,
                MaintenanceHistory.organization_id == organization_id,
            )
            .order_by(MaintenanceHistory.performed_date.desc(), MaintenanceHistory.id.desc())
        )
        if limit:
            query = query.limit(limit)
        return query.all()

    @staticmethod
    def get_by_work_order(
        db: Session, work_order_id: int, asset_id: int, organization_id: str
    ) -> Optional[MaintenanceHistory]:
        return (
            db.query(MaintenanceHistory)
            .filter(
                MaintenanceHistory.work_order_id == work_order_id,
                MaintenanceHistory.asset_id == asset_id,
                MaintenanceHistory.organization_id == organization_id,
            )
            .first()
        )
