"""Create generation_tasks table."""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


revision = "20261019_01"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "generation_tasks",
        sa.Column("id", sa.String(length=32), primary_key=True),
        sa.Column("prompt_id", sa.String(length=64)),
        sa.Column("service", sa.String(length=32), nullable=False),
        sa.Column("model", sa.String(length=32), nullable=False),
        sa.Column("external_task_id", sa.String(length=128), nullable=False),
        sa.Column(
            "status", sa.String(length=16), nullable=False, server_default="PENDING"
        ),
        sa.Column("provider_params", sa.Text(), nullable=False),
        sa.Column("result_json", sa.Text()),
        sa.Column("fail_code", sa.String(length=64)),
        sa.Column("fail_msg", sa.Text()),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column("completed_at", sa.DateTime(timezone=True)),
    )
    op.create_index(
        "ix_generation_tasks_prompt_id", "generation_tasks", ["prompt_id"]
    )
    op.create_index(
        "ix_generation_tasks_external_task_id",
        "generation_tasks",
        ["external_task_id"],
    )
    op.create_index(
        "ix_generation_tasks_status_created_at",
        "generation_tasks",
        ["status", "created_at"],
    )


def downgrade() -> None:
    op.drop_index("ix_generation_tasks_status_created_at", table_name="generation_tasks")
    op.drop_index("ix_generation_tasks_external_task_id", table_name="generation_tasks")
    op.drop_index("ix_generation_tasks_prompt_id", table_name="generation_tasks")
    op.drop_table("generation_tasks")
