"""Complaint repository - reads complaints and records work order linkage"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Complaint
from ...shared.persistence import persist


class ComplaintRepository:
    """Repository for complaint database operations"""

    @staticmethod
    def get_by_id(db: Session, complaint_id: int, organization_id: str) -> Optional[Complaint]:
        return (
            db.query(Complaint)
            .filter(Complaint.id == complaint_id, Complaint.organization_id == organization_id)
            .first()
        )

    @staticmethod
    def update_link_and_status(
        db: Session, complaint: Complaint, linked_work_order_id: int, status: str
    ) -> Complaint:
        complaint.linked_work_order_id = linked_work_order_id
        complaint.status = status
        return persist(db, complaint, "complaint")
