"""Work order repository - Database operations for work orders"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import WorkOrder
from ...shared.persistence import persist


class WorkOrderRepository:
    """Repository for work order database operations"""

    @staticmethod
    def get_by_id(db: Session, work_order_id: int, organization_id: str) -> Optional[WorkOrder]:
        return (
            db.query(WorkOrder)
            .filter(WorkOrder.id == work_order_id, WorkOrder.organization_id == organization_id)
            .first()
        )

    @staticmethod
    def create(db: Session, organization_id: str, **work_order_data) -> WorkOrder:
        work_order = WorkOrder(organization_id=organization_id, **work_order_data)
        return persist(db, work_order, "work order")

    @staticmethod
    def update(db: Session, work_order: WorkOrder, **updates) -> WorkOrder:
        for key, value in updates.items():
            if hasattr(work_order, key):
                setattr(work_order, key, value)
        return persist(db, work_order, "work order")
