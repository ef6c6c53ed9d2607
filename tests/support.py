"""Shared builders for tests: in-memory SQLite sessions and roster records."""

from collections.abc import Iterable
from datetime import UTC, datetime

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from roster.core.security import hash_password
from roster.models import (
    Base,
    InstructorSchool,
    Personnel,
    Qualification,
    Rank,
    Role,
    RoleAssignment,
    School,
)
from roster.services.authorization import personnel_ref
from roster.services.role_catalog import ensure_role_catalog

PASSWORD = "Password1"
# One hash for every test identity; bcrypt at full cost is too slow per record.
_PASSWORD_HASH, _PASSWORD_SALT = hash_password(PASSWORD, rounds=4)


def make_engine(skip_tables: Iterable[str] = ()):
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    skip = set(skip_tables)
    tables = [t for t in Base.metadata.sorted_tables if t.name not in skip]
    Base.metadata.create_all(engine, tables=tables)
    return engine


def make_session(skip_tables: Iterable[str] = (), seed_roles: bool = True) -> Session:
    """Fresh in-memory database with the role catalog seeded."""
    engine = make_engine(skip_tables)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    if seed_roles:
        ensure_role_catalog(session)
        session.commit()
    return session


def ref(person: Personnel) -> str:
    """Session identity reference for person."""
    return personnel_ref(person.id)


def role_id(session: Session, role_name: str) -> int:
    return session.query(Role.id).filter(Role.role_name == role_name).scalar()


def add_personnel(
    session: Session,
    call_sign: str,
    roles: Iterable[str] = (),
    login: bool = True,
    active: bool = True,
    email: str | None = None,
    rank_id: int | None = None,
) -> Personnel:
    """Roster record; with login=True it carries the full login-field group."""
    person = Personnel(call_sign=call_sign, email=email, status="active", rank_id=rank_id)
    if login:
        person.password_hash = _PASSWORD_HASH
        person.password_salt = _PASSWORD_SALT
        person.is_active = active
        person.require_password_change = False
        person.last_password_change = datetime.now(UTC)
    session.add(person)
    session.flush()
    for name in roles:
        session.add(RoleAssignment(personnel_id=person.id, role_id=role_id(session, name)))
    session.commit()
    return person


def add_rank(session: Session, name: str = "Private", abbreviation: str = "PTE", order: int | None = 0) -> Rank:
    rank = Rank(name=name, abbreviation=abbreviation, order=order)
    session.add(rank)
    session.commit()
    return rank


def add_school(session: Session, name: str = "Infantry School", abbreviation: str = "INF") -> School:
    school = School(name=name, abbreviation=abbreviation)
    session.add(school)
    session.commit()
    return school


def add_qualification(session: Session, school: School, name: str = "Rifleman") -> Qualification:
    qualification = Qualification(name=name, abbreviation=name[:3].upper(), school_id=school.id)
    session.add(qualification)
    session.commit()
    return qualification


def assign_school(session: Session, person: Personnel, school: School) -> InstructorSchool:
    assignment = InstructorSchool(personnel_id=person.id, school_id=school.id)
    session.add(assignment)
    session.commit()
    return assignment
