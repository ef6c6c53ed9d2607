"""School-assignment lookups used to scope instructor capabilities."""

from sqlalchemy.orm import Session

from roster.models import InstructorSchool, Qualification, School


def has_school_assignment(session: Session, personnel_id: int, school_id: int) -> bool:
    """True when an instructor_schools row links the personnel to the school."""
    row = (
        session.query(InstructorSchool.id)
        .filter(
            InstructorSchool.personnel_id == personnel_id,
            InstructorSchool.school_id == school_id,
        )
        .first()
    )
    return row is not None


def instructor_schools(session: Session, personnel_id: int) -> list[School]:
    """Schools the personnel is assigned to, by name."""
    return (
        session.query(School)
        .join(InstructorSchool, InstructorSchool.school_id == School.id)
        .filter(InstructorSchool.personnel_id == personnel_id)
        .order_by(School.name)
        .all()
    )


def qualification_school_id(session: Session, qualification_id: int) -> int | None:
    """Owning school of a qualification, or None when the qualification does not exist."""
    row = (
        session.query(Qualification.school_id)
        .filter(Qualification.id == qualification_id)
        .first()
    )
    return row[0] if row else None
