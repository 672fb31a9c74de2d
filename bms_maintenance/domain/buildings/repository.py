"""Building and unit lookups - read-only view of the property CRUD stores"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Building, Unit


class BuildingRepository:
    """Repository for building and unit reads"""

    @staticmethod
    def get_building_by_id(db: Session, building_id: int, organization_id: str) -> Optional[Building]:
        return (
            db.query(Building)
            .filter(Building.id == building_id, Building.organization_id == organization_id)
            .first()
        )

    @staticmethod
    def get_unit_by_id(db: Session, unit_id: int, organization_id: str) -> Optional[Unit]:
        return (
            db.query(Unit)
            .filter(Unit.id == unit_id, Unit.organization_id == organization_id)
            .first()
        )
