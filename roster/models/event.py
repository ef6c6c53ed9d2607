"""ORM models for calendar events and their instructors."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text

from roster.models.base import Base


class Event(Base):
    """Calendar event. legacy_created_by points into system_users."""

    __tablename__ = "events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    start_date = Column(DateTime(timezone=True), nullable=False, index=True)
    end_date = Column(DateTime(timezone=True), nullable=False)
    booking_code = Column(String(32), nullable=False, index=True)
    status = Column(String(16), nullable=False, default="scheduled")
    created_by = Column(Integer, ForeignKey("personnel.id", ondelete="SET NULL"), nullable=True)
    legacy_created_by = Column(Integer, nullable=True)


class EventInstructor(Base):
    """Instructor or game master running an event. Legacy rows carry user_id."""

    __tablename__ = "event_instructors"

    id = Column(Integer, primary_key=True, autoincrement=True)
    event_id = Column(
        Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True
    )
    personnel_id = Column(
        Integer, ForeignKey("personnel.id", ondelete="CASCADE"), nullable=True, index=True
    )
    user_id = Column(Integer, nullable=True, index=True)
    role = Column(String(16), nullable=False, default="instructor")
