"""Materializing maintenance tasks from asset schedules"""

from datetime import date

from bms_maintenance.domain.maintenance.service import MaintenanceTaskService
from bms_maintenance.models import MaintenanceTask
from bms_maintenance.services.maintenance_automation import generate_maintenance_tasks

from .conftest import ORG_ID

TODAY = date(2024, 3, 1)


class TestGenerateMaintenanceTasks:
    def test_creates_one_task_from_last_maintenance(self, db, make_asset):
        asset = make_asset(name="A1", maintenance_frequency="quarterly", last_maintenance_date=date(2024, 1, 1))

        summary = generate_maintenance_tasks(db, ORG_ID, TODAY)

        assert summary == {"created": 1, "updated": 0, "errors": 0}
        tasks = db.query(MaintenanceTask).all()
        assert len(tasks) == 1
        task = tasks[0]
        assert task.asset_id == asset.id
        assert task.next_due_date == date(2024, 4, 1)
        assert task.frequency_interval == 3
        assert task.frequency_unit == "months"
        assert task.status == "scheduled"
        assert task.auto_generate_work_order is True
        assert task.task_name == "Maintenance for A1"

    def test_explicit_next_date_wins(self, db, make_asset):
        make_asset(
            maintenance_frequency="monthly",
            last_maintenance_date=date(2024, 1, 1),
            next_maintenance_date=date(2024, 1, 20),
        )

        generate_maintenance_tasks(db, ORG_ID, TODAY)

        task = db.query(MaintenanceTask).one()
        assert task.next_due_date == date(2024, 1, 20)
        assert task.status == "overdue"

    def test_fresh_asset_is_scheduled_from_today(self, db, make_asset):
        make_asset(maintenance_frequency="weekly inspection")

        generate_maintenance_tasks(db, ORG_ID, TODAY)

        task = db.query(MaintenanceTask).one()
        assert task.next_due_date == date(2024, 3, 8)
        assert task.frequency_unit == "weeks"
        assert task.status == "due"

    def test_second_run_creates_nothing(self, db, make_asset):
        make_asset(name="A1")
        make_asset(name="A2", maintenance_frequency="annual check")

        first = generate_maintenance_tasks(db, ORG_ID, TODAY)
        second = generate_maintenance_tasks(db, ORG_ID, TODAY)

        assert first["created"] == 2
        assert second == {"created": 0, "updated": 2, "errors": 0}
        assert db.query(MaintenanceTask).count() == 2

    def test_skips_unscheduled_and_inactive_assets(self, db, make_asset):
        make_asset(name="No schedule", maintenance_frequency=None)
        make_asset(name="Retired", status="retired")

        summary = generate_maintenance_tasks(db, ORG_ID, TODAY)

        assert summary == {"created": 0, "updated": 0, "errors": 0}
        assert db.query(MaintenanceTask).count() == 0

    def test_other_organizations_are_untouched(self, db, make_asset):
        make_asset(organization_id="org-2")

        assert generate_maintenance_tasks(db, ORG_ID, TODAY)["created"] == 0
        assert db.query(MaintenanceTask).count() == 0

    def test_cancelled_task_is_replaced(self, db, make_asset, make_task):
        asset = make_asset()
        make_task(date(2024, 2, 1), status="cancelled", asset=asset)

        summary = generate_maintenance_tasks(db, ORG_ID, TODAY)

        assert summary["created"] == 1
        assert db.query(MaintenanceTask).filter(MaintenanceTask.status != "cancelled").count() == 1

    def test_one_failing_asset_does_not_stop_the_batch(self, db, make_asset, monkeypatch):
        make_asset(name="Broken")
        make_asset(name="Healthy")
        original = MaintenanceTaskService.create_task_for_asset

        def flaky(self, asset, today):
            if asset.name == "Broken":
                raise RuntimeError("schedule metadata unreadable")
            return original(self, asset, today)

        monkeypatch.setattr(MaintenanceTaskService, "create_task_for_asset", flaky)

        summary = generate_maintenance_tasks(db, ORG_ID, TODAY)

        assert summary == {"created": 1, "updated": 0, "errors": 1}
        assert db.query(MaintenanceTask).one().task_name == "Maintenance for Healthy"
