"""user and task tables

Revision ID: 5c1e2f7a9b40
Revises: 
Create Date: 2026-10-19 10:02:11.418230

"""
from alembic import op
import sqlalchemy as sa


revision = '5c1e2f7a9b40'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "user",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("credential_secret", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_user_email", "user", ["email"], unique=True)

    op.create_table(
        "task",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["user.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_task_user_id", "task", ["user_id"], unique=False)
    op.create_index("ix_task_created_at", "task", ["created_at"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_task_created_at", table_name="task")
    op.drop_index("ix_task_user_id", table_name="task")
    op.drop_table("task")
    op.drop_index("ix_user_email", table_name="user")
    op.drop_table("user")
