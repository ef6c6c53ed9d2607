"""Role catalog, role assignments and instructor school scoping; seed the five roles.

Revision ID: 20261019100000
Revises: 20261019000000
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "20261019100000"
down_revision: Union[str, None] = "20261019000000"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# Frozen copy of the catalog at this revision; later catalog edits need their own revision.
SEED_ROLES = [
    {
        "role_name": "super_admin",
        "display_name": "Super Admin",
        "color": "#FF0000",
        "description": "Full system access, including other super admins.",
    },
    {
        "role_name": "administrator",
        "display_name": "Administrator",
        "color": "#FF0000",
        "description": "Manages personnel, roles and school assignments.",
    },
    {
        "role_name": "instructor",
        "display_name": "Instructor",
        "color": "#FFA500",
        "description": "Awards qualifications for assigned schools.",
    },
    {
        "role_name": "game_master",
        "display_name": "Game Master",
        "color": "#800080",
        "description": "Runs operations and events.",
    },
    {
        "role_name": "member",
        "display_name": "Member",
        "color": "#6B7280",
        "description": "Standard unit member with system access.",
    },
]


def upgrade() -> None:
    roles = op.create_table(
        "roles",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("role_name", sa.String(length=50), nullable=False),
        sa.Column("display_name", sa.String(length=100), nullable=False),
        sa.Column("color", sa.String(length=16), nullable=False, server_default="#6B7280"),
        sa.Column("description", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_roles_role_name"), "roles", ["role_name"], unique=True)

    # role_id and user_id carry no FK: rows may outlive catalog entries and
    # legacy identities until the migration shims have run.
    op.create_table(
        "user_roles",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("personnel_id", sa.Integer(), nullable=True),
        sa.Column("role_id", sa.Integer(), nullable=True),
        sa.Column("user_id", sa.Integer(), nullable=True),
        sa.Column("role", sa.String(length=50), nullable=True),
        sa.Column("color", sa.String(length=16), nullable=True),
        sa.ForeignKeyConstraint(["personnel_id"], ["personnel.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("personnel_id", "role_id", name="uq_user_roles_personnel_role"),
    )
    op.create_index(op.f("ix_user_roles_personnel_id"), "user_roles", ["personnel_id"], unique=False)
    op.create_index(op.f("ix_user_roles_role_id"), "user_roles", ["role_id"], unique=False)
    op.create_index(op.f("ix_user_roles_user_id"), "user_roles", ["user_id"], unique=False)

    op.create_table(
        "instructor_schools",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("personnel_id", sa.Integer(), nullable=True),
        sa.Column("user_id", sa.Integer(), nullable=True),
        sa.Column("school_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["personnel_id"], ["personnel.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["school_id"], ["schools.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "personnel_id", "school_id", name="uq_instructor_schools_personnel_school"
        ),
    )
    op.create_index(
        op.f("ix_instructor_schools_personnel_id"), "instructor_schools", ["personnel_id"], unique=False
    )
    op.create_index(op.f("ix_instructor_schools_user_id"), "instructor_schools", ["user_id"], unique=False)
    op.create_index(
        op.f("ix_instructor_schools_school_id"), "instructor_schools", ["school_id"], unique=False
    )

    op.bulk_insert(roles, SEED_ROLES)


def downgrade() -> None:
    op.drop_index(op.f("ix_instructor_schools_school_id"), table_name="instructor_schools")
    op.drop_index(op.f("ix_instructor_schools_user_id"), table_name="instructor_schools")
    op.drop_index(op.f("ix_instructor_schools_personnel_id"), table_name="instructor_schools")
    op.drop_table("instructor_schools")
    op.drop_index(op.f("ix_user_roles_user_id"), table_name="user_roles")
    op.drop_index(op.f("ix_user_roles_role_id"), table_name="user_roles")
    op.drop_index(op.f("ix_user_roles_personnel_id"), table_name="user_roles")
    op.drop_table("user_roles")
    op.drop_index(op.f("ix_roles_role_name"), table_name="roles")
    op.drop_table("roles")
