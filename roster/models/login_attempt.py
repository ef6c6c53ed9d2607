"""ORM model for recorded login attempts, the input to login throttling."""

from sqlalchemy import Boolean, Column, DateTime, Integer, String, func

from roster.models.base import Base


class LoginAttempt(Base):
    """
    One POST to the login endpoint, successful or not.

    personnel_id carries no FK so attempts outlive deleted roster records until purged.
    """

    __tablename__ = "login_attempts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    call_sign = Column(String(64), nullable=False, index=True)
    ip_address = Column(String(64), nullable=True, index=True)
    success = Column(Boolean, nullable=False)
    reason = Column(String(64), nullable=True)
    personnel_id = Column(Integer, nullable=True)
    attempted_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), index=True)
