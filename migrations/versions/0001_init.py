"""init

Revision ID: 0001_init
Revises: 
Create Date: 2026-10-18 00:00:00.000000
"""

from alembic import op
import sqlalchemy as sa

revision = "0001_init"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
	op.create_table(
		"users",
		sa.Column("id", sa.String(32), primary_key=True),
		sa.Column("username", sa.String(), nullable=False),
		sa.Column("password_hash", sa.String(), nullable=False),
		sa.Column("created_at", sa.DateTime(), nullable=True),
	)
	op.create_index("ix_users_username", "users", ["username"], unique=True)

	op.create_table(
		"items",
		sa.Column("id", sa.String(32), primary_key=True),
		sa.Column("name", sa.String(), nullable=False),
		sa.Column("category", sa.String(), nullable=False),
		sa.Column("quantity", sa.Integer(), nullable=False, server_default="0"),
		sa.Column("date_acquired", sa.DateTime(), nullable=False),
		sa.Column("owner_id", sa.String(32), nullable=False),
		sa.Column("created_at", sa.DateTime(), nullable=True),
		sa.ForeignKeyConstraint(["owner_id"], ["users.id"]),
	)
	op.create_index("ix_items_owner_id", "items", ["owner_id"], unique=False)
	op.create_index("ix_items_date_acquired", "items", ["date_acquired"], unique=False)

	op.create_table(
		"sessions",
		sa.Column("token", sa.String(), primary_key=True),
		sa.Column("data", sa.Text(), nullable=False),
		sa.Column("expires_at", sa.DateTime(), nullable=False),
	)
	op.create_index("ix_sessions_expires_at", "sessions", ["expires_at"], unique=False)


def downgrade() -> None:
	op.drop_index("ix_sessions_expires_at", table_name="sessions")
	op.drop_table("sessions")
	op.drop_index("ix_items_date_acquired", table_name="items")
	op.drop_index("ix_items_owner_id", table_name="items")
	op.drop_table("items")
	op.drop_index("ix_users_username", table_name="users")
	op.drop_table("users")
