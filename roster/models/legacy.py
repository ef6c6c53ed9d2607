"""ORM model for the deprecated standalone login table, read only by the identity merge."""

from sqlalchemy import Boolean, Column, DateTime, Integer, String

from roster.models.base import Base


class SystemUser(Base):
    """
    Pre-merge login identity, separate from personnel.

    Rows are folded into personnel by roster.services.migrations.merge_identities.
    """

    __tablename__ = "system_users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(64), nullable=False, index=True)
    email = Column(String(255), nullable=True, index=True)
    password_hash = Column(String(255), nullable=True)
    password_salt = Column(String(64), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    require_password_change = Column(Boolean, nullable=False, default=False)
    last_password_change = Column(DateTime(timezone=True), nullable=True)
