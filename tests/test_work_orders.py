"""Work order generation from maintenance tasks and the work order lifecycle"""

from datetime import date, datetime, timedelta

import pytest
from dateutil.relativedelta import relativedelta

from bms_maintenance.domain.assets.service import MaintenanceHistoryService
from bms_maintenance.domain.work_orders.service import (
    WorkOrderService,
    determine_maintenance_type,
    determine_priority_from_task,
    map_asset_type_to_category,
)
from bms_maintenance.exceptions import DuplicateError, InvalidStateError, NotFoundError
from bms_maintenance.models import MaintenanceHistory, MaintenanceTask, WorkOrder
from bms_maintenance.services.maintenance_automation import (
    generate_maintenance_tasks,
    process_due_maintenance_tasks,
    run_maintenance_cycle,
)

from .conftest import ORG_ID

TODAY = date(2024, 6, 15)


class TestPureMappings:
    @pytest.mark.parametrize(
        "status,priority",
        [("overdue", "high"), ("due", "medium"), ("scheduled", "low")],
    )
    def test_priority_from_task_status(self, status, priority):
        assert determine_priority_from_task(status) == priority

    def test_asset_type_categories(self):
        assert map_asset_type_to_category("equipment") == "hvac"
        assert map_asset_type_to_category("infrastructure") == "plumbing"
        assert map_asset_type_to_category("furniture") == "other"
        assert map_asset_type_to_category(None) == "other"

    def test_custom_category_map(self):
        assert map_asset_type_to_category("elevator", {"elevator": "electrical"}) == "electrical"

    def test_maintenance_type_detection(self):
        assert determine_maintenance_type(WorkOrder(maintenance_task_id=1, description="x", priority="low")) == "preventive"
        assert determine_maintenance_type(WorkOrder(description="Scheduled filter swap", priority="low")) == "preventive"
        assert determine_maintenance_type(WorkOrder(description="Burst pipe", priority="urgent")) == "emergency"
        assert determine_maintenance_type(WorkOrder(description="Emergency call-out", priority="medium")) == "emergency"
        assert determine_maintenance_type(WorkOrder(description="Broken latch", priority="medium")) == "corrective"


class TestCreateWorkOrderFromTask:
    def test_overdue_task_yields_high_priority(self, db, make_task):
        task = make_task(TODAY - timedelta(days=10), status="overdue", assigned_to=None, estimated_cost=120.0)

        work_order_id = WorkOrderService(db).create_work_order_from_task(task.id, ORG_ID, today=TODAY)

        work_order = db.get(WorkOrder, work_order_id)
        assert work_order.priority == "high"
        assert work_order.category == "hvac"
        assert work_order.status == "open"
        assert work_order.maintenance_task_id == task.id
        assert work_order.asset_id == task.asset_id
        assert work_order.estimated_cost == 120.0
        assert work_order.created_by == "system"
        assert task.linked_work_order_id == work_order_id
        assert task.status == "overdue"

    def test_due_task_yields_medium_priority(self, db, make_task):
        task = make_task(TODAY, status="due")

        work_order_id = WorkOrderService(db).create_work_order_from_task(task.id, ORG_ID, "user-1", TODAY)

        work_order = db.get(WorkOrder, work_order_id)
        assert work_order.priority == "medium"
        assert work_order.created_by == "user-1"

    def test_freshly_generated_overdue_task_yields_high_priority(self, db, make_asset):
        make_asset(maintenance_frequency="monthly", next_maintenance_date=TODAY - timedelta(days=30))
        generate_maintenance_tasks(db, ORG_ID, TODAY)
        task = db.query(MaintenanceTask).one()
        assert task.status == "overdue"

        work_order_id = WorkOrderService(db).create_work_order_from_task(task.id, ORG_ID, today=TODAY)

        assert db.get(WorkOrder, work_order_id).priority == "high"

    def test_stale_label_is_corrected_before_priority(self, db, make_task):
        task = make_task(TODAY - timedelta(days=30), status="scheduled")

        work_order_id = WorkOrderService(db).create_work_order_from_task(task.id, ORG_ID, today=TODAY)

        assert db.get(WorkOrder, work_order_id).priority == "high"
        assert task.status == "overdue"

    def test_assigned_task_yields_assigned_work_order(self, db, make_task):
        task = make_task(TODAY, status="due", assigned_to="tech-7")

        work_order_id = WorkOrderService(db).create_work_order_from_task(task.id, ORG_ID, today=TODAY)
        work_order = db.get(WorkOrder, work_order_id)

        assert work_order.status == "assigned"
        assert work_order.assigned_to == "tech-7"

    def test_linked_task_is_rejected(self, db, make_task):
        task = make_task(TODAY, status="due")
        service = WorkOrderService(db)
        service.create_work_order_from_task(task.id, ORG_ID, today=TODAY)

        with pytest.raises(InvalidStateError):
            service.create_work_order_from_task(task.id, ORG_ID, today=TODAY)
        assert db.query(WorkOrder).count() == 1

    @pytest.mark.parametrize("status", ["completed", "cancelled"])
    def test_closed_task_is_rejected(self, db, make_task, status):
        task = make_task(TODAY, status=status)

        with pytest.raises(InvalidStateError):
            WorkOrderService(db).create_work_order_from_task(task.id, ORG_ID, today=TODAY)
        assert db.query(WorkOrder).count() == 0

    def test_unknown_task(self, db):
        with pytest.raises(NotFoundError):
            WorkOrderService(db).create_work_order_from_task(404, ORG_ID, today=TODAY)

    def test_second_active_work_order_is_blocked_by_the_store(self, db, make_task):
        task = make_task(TODAY, status="due")
        service = WorkOrderService(db)
        service.create_work_order_from_task(task.id, ORG_ID, today=TODAY)
        # Simulate a stale reader that never saw the link
        task.linked_work_order_id = None
        db.commit()

        with pytest.raises(DuplicateError):
            service.create_work_order_from_task(task.id, ORG_ID, today=TODAY)
        assert db.query(WorkOrder).count() == 1


class TestProcessDueMaintenanceTasks:
    def test_generates_work_orders_once(self, db, make_task):
        late = make_task(TODAY - timedelta(days=10))
        due = make_task(TODAY)
        make_task(TODAY + timedelta(days=30))

        first = process_due_maintenance_tasks(db, ORG_ID, TODAY)
        second = process_due_maintenance_tasks(db, ORG_ID, TODAY)

        assert first == {"processed": 2, "workOrdersCreated": 2, "errors": 0}
        assert second == {"processed": 0, "workOrdersCreated": 0, "errors": 0}
        priorities = {wo.maintenance_task_id: wo.priority for wo in db.query(WorkOrder).all()}
        assert priorities == {late.id: "high", due.id: "medium"}

    def test_manual_tasks_are_processed_without_work_orders(self, db, make_task):
        make_task(TODAY, auto_generate_work_order=False)

        summary = process_due_maintenance_tasks(db, ORG_ID, TODAY)

        assert summary == {"processed": 1, "workOrdersCreated": 0, "errors": 0}
        assert db.query(WorkOrder).count() == 0

    def test_failure_is_isolated_per_task(self, db, make_task, monkeypatch):
        broken = make_task(TODAY - timedelta(days=1))
        healthy = make_task(TODAY)
        original = WorkOrderService.create_work_order_from_task

        def flaky(self, task_id, organization_id, created_by=None, today=None):
            if task_id == broken.id:
                raise RuntimeError("store unavailable")
            return original(self, task_id, organization_id, created_by, today)

        monkeypatch.setattr(WorkOrderService, "create_work_order_from_task", flaky)

        summary = process_due_maintenance_tasks(db, ORG_ID, TODAY)

        assert summary == {"processed": 1, "workOrdersCreated": 1, "errors": 1}
        assert db.query(WorkOrder).one().maintenance_task_id == healthy.id

    def test_full_cycle(self, db, make_asset):
        make_asset(maintenance_frequency="monthly", last_maintenance_date=TODAY - relativedelta(months=2))

        result = run_maintenance_cycle(db, ORG_ID, TODAY)

        assert result["organization_id"] == ORG_ID
        assert result["tasks"]["created"] == 1
        assert result["workOrders"]["workOrdersCreated"] == 1
        task = db.query(MaintenanceTask).one()
        assert task.status == "overdue"
        assert db.query(WorkOrder).one().priority == "high"


class TestWorkOrderLifecycle:
    def _work_order_for(self, db, task) -> WorkOrder:
        return db.get(WorkOrder, WorkOrderService(db).create_work_order_from_task(task.id, ORG_ID, today=TODAY))

    def test_start(self, db, make_task):
        work_order = self._work_order_for(db, make_task(TODAY, status="due"))
        service = WorkOrderService(db)

        started = service.start_work_order(work_order.id, ORG_ID)

        assert started.status == "in_progress"
        assert started.started_at is not None
        with pytest.raises(InvalidStateError):
            service.start_work_order(work_order.id, ORG_ID)

    def test_cancel_releases_task(self, db, make_task):
        task = make_task(TODAY, status="due")
        work_order = self._work_order_for(db, task)

        WorkOrderService(db).cancel_work_order(work_order.id, ORG_ID)

        assert work_order.status == "cancelled"
        assert task.linked_work_order_id is None
        # The task is picked up again on the next run
        assert process_due_maintenance_tasks(db, ORG_ID, TODAY)["workOrdersCreated"] == 1

    def test_complete_rolls_task_forward_and_records_history(self, db, make_asset, make_task):
        asset = make_asset(maintenance_frequency="quarterly", next_maintenance_date=TODAY - timedelta(days=5))
        task = make_task(TODAY - timedelta(days=5), status="overdue", asset=asset)
        work_order = self._work_order_for(db, task)

        WorkOrderService(db).complete_work_order(
            work_order.id,
            ORG_ID,
            actual_cost=250.0,
            notes="Filters replaced",
            performed_by="tech-7",
            completed_at=datetime(2024, 6, 15, 14, 30),
        )

        assert work_order.status == "completed"
        assert work_order.actual_cost == 250.0
        assert work_order.completed_at == datetime(2024, 6, 15, 14, 30)

        entry = db.query(MaintenanceHistory).one()
        assert entry.work_order_id == work_order.id
        assert entry.maintenance_type == "preventive"
        assert entry.performed_date == TODAY
        assert entry.performed_by == "tech-7"
        assert entry.cost == 250.0
        assert entry.next_maintenance_due == date(2024, 9, 15)

        assert asset.last_maintenance_date == TODAY
        assert asset.next_maintenance_date == date(2024, 9, 15)

        assert task.last_performed == TODAY
        assert task.next_due_date == date(2024, 9, 15)
        assert task.status == "scheduled"
        assert task.linked_work_order_id is None

    def test_rolled_forward_task_is_labelled_against_completion_date(self, db, make_asset, make_task):
        asset = make_asset(maintenance_frequency="weekly", next_maintenance_date=TODAY)
        task = make_task(TODAY, status="due", asset=asset, frequency_interval=1, frequency_unit="weeks")
        work_order = self._work_order_for(db, task)

        WorkOrderService(db).complete_work_order(work_order.id, ORG_ID, completed_at=datetime(2024, 6, 15, 9, 0))

        assert task.next_due_date == date(2024, 6, 22)
        assert task.status == "due"

    def test_history_recorded_ahead_of_completion_is_not_duplicated(self, db, make_asset, make_task):
        asset = make_asset(next_maintenance_date=TODAY)
        task = make_task(TODAY, status="due", asset=asset)
        work_order = self._work_order_for(db, task)
        MaintenanceHistoryService(db).record_completed_maintenance(
            ORG_ID,
            asset.id,
            description="Logged by technician on site",
            performed_date=TODAY,
            work_order_id=work_order.id,
            next_maintenance_due=TODAY + timedelta(days=60),
        )

        WorkOrderService(db).complete_work_order(work_order.id, ORG_ID, completed_at=datetime(2024, 6, 15, 16, 0))

        assert db.query(MaintenanceHistory).count() == 1
        assert task.next_due_date == TODAY + timedelta(days=60)
        assert task.linked_work_order_id is None

    def test_history_on_another_asset_does_not_block_completion(self, db, make_asset, make_task):
        asset = make_asset(name="A", maintenance_frequency="quarterly", next_maintenance_date=TODAY)
        other = make_asset(name="B")
        task = make_task(TODAY, status="due", asset=asset)
        work_order = self._work_order_for(db, task)
        # Written directly to the ledger; the service refuses such entries
        db.add(
            MaintenanceHistory(
                organization_id=ORG_ID,
                asset_id=other.id,
                work_order_id=work_order.id,
                maintenance_type="corrective",
                performed_date=TODAY,
                description="Mislabelled entry",
            )
        )
        db.commit()

        WorkOrderService(db).complete_work_order(work_order.id, ORG_ID, completed_at=datetime(2024, 6, 15, 16, 0))

        history = MaintenanceHistoryService(db).list_history(asset.id, ORG_ID)
        assert len(history) == 1
        assert asset.last_maintenance_date == TODAY
        assert task.next_due_date == date(2024, 9, 15)
        assert task.status == "scheduled"

    def test_cannot_complete_twice(self, db, make_task):
        work_order = self._work_order_for(db, make_task(TODAY, status="due"))
        service = WorkOrderService(db)
        service.complete_work_order(work_order.id, ORG_ID)

        with pytest.raises(InvalidStateError):
            service.complete_work_order(work_order.id, ORG_ID)
        assert db.query(MaintenanceHistory).count() == 1

    def test_complete_without_asset_writes_no_history(self, db, make_complaint):
        complaint = make_complaint()
        service = WorkOrderService(db)
        work_order = service.convert_complaint_to_work_order(complaint.id, ORG_ID)

        service.complete_work_order(work_order.id, ORG_ID)

        assert work_order.status == "completed"
        assert db.query(MaintenanceHistory).count() == 0

    def test_other_organization_cannot_see_work_order(self, db, make_task):
        work_order = self._work_order_for(db, make_task(TODAY, status="due"))

        with pytest.raises(NotFoundError):
            WorkOrderService(db).get_work_order(work_order.id, "org-2")
