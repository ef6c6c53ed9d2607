"""ORM model for the unified personnel record (roster member and optional login identity)."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text, func

from roster.models.base import Base

# Columns that together make up system access. All set or all NULL.
LOGIN_FIELDS = (
    "password_hash",
    "password_salt",
    "is_active",
    "require_password_change",
    "last_password_change",
)


class Personnel(Base):
    """
    One unit member. Carries login fields only when granted system access.

    is_active (login enabled) is independent of status (roster membership).
    """

    __tablename__ = "personnel"

    id = Column(Integer, primary_key=True, autoincrement=True)
    call_sign = Column(String(64), nullable=False, unique=True, index=True)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    email = Column(String(255), nullable=True, index=True)
    phone = Column(String(32), nullable=True)
    rank_id = Column(Integer, ForeignKey("ranks.id", ondelete="SET NULL"), nullable=True)
    status = Column(String(16), nullable=False, default="active", index=True)
    join_date = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    discharge_date = Column(DateTime(timezone=True), nullable=True)
    notes = Column(Text, nullable=True)

    password_hash = Column(String(255), nullable=True)
    password_salt = Column(String(64), nullable=True)
    is_active = Column(Boolean, nullable=True)
    require_password_change = Column(Boolean, nullable=True)
    last_password_change = Column(DateTime(timezone=True), nullable=True)

    @property
    def has_system_access(self) -> bool:
        return self.password_hash is not None

    def clear_login_fields(self) -> None:
        for name in LOGIN_FIELDS:
            setattr(self, name, None)
