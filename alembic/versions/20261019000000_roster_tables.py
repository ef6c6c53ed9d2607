"""Roster tables: ranks, personnel, schools, qualifications, events, legacy system_users.

Revision ID: 20261019000000
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "20261019000000"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "ranks",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("abbreviation", sa.String(length=32), nullable=False),
        sa.Column("order", sa.Integer(), nullable=True),
        sa.Column("insignia_url", sa.String(length=1024), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_ranks_name"), "ranks", ["name"], unique=False)

    op.create_table(
        "personnel",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("call_sign", sa.String(length=64), nullable=False),
        sa.Column("first_name", sa.String(length=100), nullable=True),
        sa.Column("last_name", sa.String(length=100), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("phone", sa.String(length=32), nullable=True),
        sa.Column("rank_id", sa.Integer(), nullable=True),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="active"),
        sa.Column(
            "join_date",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column("discharge_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("password_hash", sa.String(length=255), nullable=True),
        sa.Column("password_salt", sa.String(length=64), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=True),
        sa.Column("require_password_change", sa.Boolean(), nullable=True),
        sa.Column("last_password_change", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["rank_id"], ["ranks.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_personnel_call_sign"), "personnel", ["call_sign"], unique=True)
    op.create_index(op.f("ix_personnel_email"), "personnel", ["email"], unique=False)
    op.create_index(op.f("ix_personnel_status"), "personnel", ["status"], unique=False)

    op.create_table(
        "schools",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("abbreviation", sa.String(length=32), nullable=False),
        sa.Column("icon_url", sa.String(length=1024), nullable=True),
        sa.Column("color", sa.String(length=16), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_schools_name"), "schools", ["name"], unique=False)

    op.create_table(
        "qualifications",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("abbreviation", sa.String(length=32), nullable=False),
        sa.Column("school_id", sa.Integer(), nullable=False),
        sa.Column("icon_url", sa.String(length=1024), nullable=True),
        sa.ForeignKeyConstraint(["school_id"], ["schools.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_qualifications_name"), "qualifications", ["name"], unique=False)
    op.create_index(op.f("ix_qualifications_school_id"), "qualifications", ["school_id"], unique=False)

    op.create_table(
        "personnel_qualifications",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("personnel_id", sa.Integer(), nullable=False),
        sa.Column("qualification_id", sa.Integer(), nullable=False),
        sa.Column("awarded_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("expiry_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("awarded_by", sa.Integer(), nullable=True),
        sa.Column("legacy_awarded_by", sa.Integer(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(["personnel_id"], ["personnel.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["qualification_id"], ["qualifications.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["awarded_by"], ["personnel.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_personnel_qualifications_personnel_id"),
        "personnel_qualifications",
        ["personnel_id"],
        unique=False,
    )
    op.create_index(
        op.f("ix_personnel_qualifications_qualification_id"),
        "personnel_qualifications",
        ["qualification_id"],
        unique=False,
    )
    op.create_index(
        op.f("ix_personnel_qualifications_awarded_by"),
        "personnel_qualifications",
        ["awarded_by"],
        unique=False,
    )

    op.create_table(
        "rank_history",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("personnel_id", sa.Integer(), nullable=False),
        sa.Column("rank_id", sa.Integer(), nullable=False),
        sa.Column("promotion_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("promoted_by", sa.Integer(), nullable=True),
        sa.Column("legacy_promoted_by", sa.Integer(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(["personnel_id"], ["personnel.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["rank_id"], ["ranks.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["promoted_by"], ["personnel.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_rank_history_personnel_id"), "rank_history", ["personnel_id"], unique=False)

    op.create_table(
        "events",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("booking_code", sa.String(length=32), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="scheduled"),
        sa.Column("created_by", sa.Integer(), nullable=True),
        sa.Column("legacy_created_by", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(["created_by"], ["personnel.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_events_start_date"), "events", ["start_date"], unique=False)
    op.create_index(op.f("ix_events_booking_code"), "events", ["booking_code"], unique=False)

    op.create_table(
        "event_instructors",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("event_id", sa.Integer(), nullable=False),
        sa.Column("personnel_id", sa.Integer(), nullable=True),
        sa.Column("user_id", sa.Integer(), nullable=True),
        sa.Column("role", sa.String(length=16), nullable=False, server_default="instructor"),
        sa.ForeignKeyConstraint(["event_id"], ["events.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["personnel_id"], ["personnel.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_event_instructors_event_id"), "event_instructors", ["event_id"], unique=False)
    op.create_index(
        op.f("ix_event_instructors_personnel_id"), "event_instructors", ["personnel_id"], unique=False
    )
    op.create_index(op.f("ix_event_instructors_user_id"), "event_instructors", ["user_id"], unique=False)

    # Pre-merge login table; emptied by `python -m roster.migrate identities`.
    op.create_table(
        "system_users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=64), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("password_hash", sa.String(length=255), nullable=True),
        sa.Column("password_salt", sa.String(length=64), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("require_password_change", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("last_password_change", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_system_users_name"), "system_users", ["name"], unique=False)
    op.create_index(op.f("ix_system_users_email"), "system_users", ["email"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_system_users_email"), table_name="system_users")
    op.drop_index(op.f("ix_system_users_name"), table_name="system_users")
    op.drop_table("system_users")
    op.drop_index(op.f("ix_event_instructors_user_id"), table_name="event_instructors")
    op.drop_index(op.f("ix_event_instructors_personnel_id"), table_name="event_instructors")
    op.drop_index(op.f("ix_event_instructors_event_id"), table_name="event_instructors")
    op.drop_table("event_instructors")
    op.drop_index(op.f("ix_events_booking_code"), table_name="events")
    op.drop_index(op.f("ix_events_start_date"), table_name="events")
    op.drop_table("events")
    op.drop_index(op.f("ix_rank_history_personnel_id"), table_name="rank_history")
    op.drop_table("rank_history")
    op.drop_index(op.f("ix_personnel_qualifications_awarded_by"), table_name="personnel_qualifications")
    op.drop_index(
        op.f("ix_personnel_qualifications_qualification_id"), table_name="personnel_qualifications"
    )
    op.drop_index(op.f("ix_personnel_qualifications_personnel_id"), table_name="personnel_qualifications")
    op.drop_table("personnel_qualifications")
    op.drop_index(op.f("ix_qualifications_school_id"), table_name="qualifications")
    op.drop_index(op.f("ix_qualifications_name"), table_name="qualifications")
    op.drop_table("qualifications")
    op.drop_index(op.f("ix_schools_name"), table_name="schools")
    op.drop_table("schools")
    op.drop_index(op.f("ix_personnel_status"), table_name="personnel")
    op.drop_index(op.f("ix_personnel_email"), table_name="personnel")
    op.drop_index(op.f("ix_personnel_call_sign"), table_name="personnel")
    op.drop_table("personnel")
    op.drop_index(op.f("ix_ranks_name"), table_name="ranks")
    op.drop_table("ranks")
