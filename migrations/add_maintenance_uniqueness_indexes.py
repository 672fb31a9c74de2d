"""
Add uniqueness guards for maintenance task and work order generation

Migration to add partial unique indexes:
- uq_maintenance_tasks_open_asset (one open task per asset)
- uq_work_orders_complaint (one work order per complaint)
- uq_work_orders_active_task (one active work order per maintenance task)

Existing duplicates must be resolved before running; index creation fails
otherwise and nothing is committed.

Run with: python migrations/add_maintenance_uniqueness_indexes.py
"""

import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import text
from bms_maintenance.database import engine

INDEXES = {
    "uq_maintenance_tasks_open_asset": """
        CREATE UNIQUE INDEX IF NOT EXISTS uq_maintenance_tasks_open_asset
        ON maintenance_tasks (asset_id)
        WHERE status NOT IN ('completed', 'cancelled')
    """,
    "uq_work_orders_complaint": """
        CREATE UNIQUE INDEX IF NOT EXISTS uq_work_orders_complaint
        ON work_orders (complaint_id)
        WHERE complaint_id IS NOT NULL
    """,
    "uq_work_orders_active_task": """
        CREATE UNIQUE INDEX IF NOT EXISTS uq_work_orders_active_task
        ON work_orders (maintenance_task_id)
        WHERE maintenance_task_id IS NOT NULL AND status NOT IN ('completed', 'cancelled')
    """,
}

def upgrade():
    """Create the partial unique indexes"""
    with engine.connect() as conn:
        for name, statement in INDEXES.items():
            conn.execute(text(statement))
            print(f"✅ Ensured index {name}")

        conn.commit()
        print("\n✅ Migration completed successfully!")

def downgrade():
    """Drop the partial unique indexes"""
    with engine.connect() as conn:
        for name in INDEXES:
            conn.execute(text(f"DROP INDEX IF EXISTS {name}"))
        conn.commit()
        print("✅ Migration rolled back successfully!")

if __name__ == "__main__":
    import argparse
    parser = argparse.ArgumentParser(description='Manage maintenance uniqueness indexes migration')
    parser.add_argument('--down', action='store_true', help='Rollback the migration')
    args = parser.parse_args()

    if args.down:
        print("Rolling back migration...")
        downgrade()
    else:
        print("Running migration...")
        upgrade()
