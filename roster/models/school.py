"""ORM models for training schools, qualifications and instructor scoping."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint

from roster.models.base import Base


class School(Base):
    """Training school; owns a group of qualifications."""

    __tablename__ = "schools"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, index=True)
    abbreviation = Column(String(32), nullable=False)
    icon_url = Column(String(1024), nullable=True)
    color = Column(String(16), nullable=True)


class Qualification(Base):
    """Qualification awarded by exactly one school."""

    __tablename__ = "qualifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, index=True)
    abbreviation = Column(String(32), nullable=False)
    school_id = Column(
        Integer, ForeignKey("schools.id", ondelete="CASCADE"), nullable=False, index=True
    )
    icon_url = Column(String(1024), nullable=True)


class PersonnelQualification(Base):
    """A qualification held by a member. legacy_awarded_by points into system_users."""

    __tablename__ = "personnel_qualifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    personnel_id = Column(
        Integer, ForeignKey("personnel.id", ondelete="CASCADE"), nullable=False, index=True
    )
    qualification_id = Column(
        Integer, ForeignKey("qualifications.id", ondelete="CASCADE"), nullable=False, index=True
    )
    awarded_date = Column(DateTime(timezone=True), nullable=False)
    expiry_date = Column(DateTime(timezone=True), nullable=True)
    awarded_by = Column(
        Integer, ForeignKey("personnel.id", ondelete="SET NULL"), nullable=True, index=True
    )
    legacy_awarded_by = Column(Integer, nullable=True)
    notes = Column(Text, nullable=True)


class InstructorSchool(Base):
    """
    Scopes an instructor to a school.

    Legacy rows carry user_id (system_users) instead of personnel_id.
    """

    __tablename__ = "instructor_schools"

    id = Column(Integer, primary_key=True, autoincrement=True)
    personnel_id = Column(
        Integer, ForeignKey("personnel.id", ondelete="CASCADE"), nullable=True, index=True
    )
    user_id = Column(Integer, nullable=True, index=True)
    school_id = Column(
        Integer, ForeignKey("schools.id", ondelete="CASCADE"), nullable=False, index=True
    )

    __table_args__ = (
        UniqueConstraint("personnel_id", "school_id", name="uq_instructor_schools_personnel_school"),
    )
