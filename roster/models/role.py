"""ORM models for the role catalog and the role assignment ledger."""

from sqlalchemy import Column, ForeignKey, Integer, String, Text, UniqueConstraint

from roster.models.base import Base


class Role(Base):
    """
    Role catalog entry: stable id plus display metadata.

    The privilege hierarchy for each role_name lives in roster.services.role_catalog.
    """

    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    role_name = Column(String(50), nullable=False, unique=True, index=True)
    display_name = Column(String(100), nullable=False)
    color = Column(String(16), nullable=False, default="#6B7280")
    description = Column(Text, nullable=True)


class RoleAssignment(Base):
    """
    One role granted to one identity.

    Current rows carry personnel_id + role_id. Legacy rows may instead carry the
    old string ``role`` (and ``color``) and/or a ``user_id`` into system_users;
    the migration shims rewrite those.
    """

    __tablename__ = "user_roles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    personnel_id = Column(
        Integer, ForeignKey("personnel.id", ondelete="CASCADE"), nullable=True, index=True
    )
    # No FK: rows can outlive catalog entries and legacy identities mid-migration.
    role_id = Column(Integer, nullable=True, index=True)
    user_id = Column(Integer, nullable=True, index=True)
    role = Column(String(50), nullable=True)
    color = Column(String(16), nullable=True)

    __table_args__ = (
        UniqueConstraint("personnel_id", "role_id", name="uq_user_roles_personnel_role"),
    )
