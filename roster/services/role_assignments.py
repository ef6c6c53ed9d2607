"""
Role assignment ledger mutations and instructor-to-school assignments.

update_user_roles is a full replace: every existing assignment for the target
is deleted and the requested set inserted. Two concurrent replacements for the
same target are not isolated from each other and may interleave; with a handful
of trusted administrators this is accepted rather than locked against.
"""

import logging
from collections.abc import Iterable

from sqlalchemy.orm import Session

from roster.core.exceptions import (
    AlreadyAssignedError,
    AssignmentNotFoundError,
    InsufficientRoleError,
    NotAnInstructorError,
    ResourceNotFoundError,
)
from roster.models import InstructorSchool, Personnel, Role, RoleAssignment, School
from roster.services.authorization import (
    IdentityRef,
    holds_role,
    max_role_level,
    require_auth,
    require_role,
)
from roster.services.role_catalog import (
    ADMINISTRATOR,
    INSTRUCTOR,
    ROLE_LEVELS,
    SUPER_ADMIN,
    get_role_by_name,
)
from roster.services.school_scoping import has_school_assignment, instructor_schools

logger = logging.getLogger(__name__)


def _get_target(session: Session, personnel_id: int) -> Personnel:
    person = session.get(Personnel, personnel_id)
    if person is None:
        raise ResourceNotFoundError(f"Personnel {personnel_id} not found")
    return person


def _is_super_admin(session: Session, requester: Personnel) -> bool:
    return max_role_level(session, requester.id) >= ROLE_LEVELS[SUPER_ADMIN]


def check_super_admin_grant(session: Session, requester: Personnel, role_names: Iterable[str]) -> None:
    """Only a super admin may hand out super_admin."""
    if SUPER_ADMIN in role_names and not _is_super_admin(session, requester):
        logger.info("Super admin grant refused: requester_id=%s", requester.id)
        raise InsufficientRoleError(
            SUPER_ADMIN, "Only a super_admin may grant the super_admin role"
        )


def check_super_admin_target(session: Session, requester: Personnel, personnel_id: int) -> None:
    """Only a super admin may change the roles or login of a super admin."""
    if holds_role(session, personnel_id, SUPER_ADMIN) and not _is_super_admin(session, requester):
        logger.info(
            "Super admin target refused: requester_id=%s personnel_id=%s",
            requester.id,
            personnel_id,
        )
        raise InsufficientRoleError(
            SUPER_ADMIN, "Only a super_admin may change the account of a super_admin"
        )


def replace_roles(session: Session, personnel_id: int, role_names: Iterable[str]) -> list[str]:
    """
    Delete every assignment of personnel_id and insert one per resolvable name.

    Unknown names are skipped. Flushes, does not commit. Returns the names inserted.
    """
    session.query(RoleAssignment).filter(RoleAssignment.personnel_id == personnel_id).delete()
    inserted: list[str] = []
    for name in role_names:
        if name in inserted:
            continue
        role = get_role_by_name(session, name)
        if role is None:
            logger.warning("Skipping unknown role name: personnel_id=%s role=%s", personnel_id, name)
            continue
        session.add(RoleAssignment(personnel_id=personnel_id, role_id=role.id))
        inserted.append(name)
    session.flush()
    return inserted


def get_user_roles(session: Session, requester_ref: IdentityRef, personnel_id: int) -> list[Role]:
    """Catalog entries held by personnel_id. Dangling assignments are left out."""
    require_auth(session, requester_ref)
    return (
        session.query(Role)
        .join(RoleAssignment, RoleAssignment.role_id == Role.id)
        .filter(RoleAssignment.personnel_id == personnel_id)
        .order_by(RoleAssignment.id)
        .all()
    )


def update_user_roles(
    session: Session,
    requester_ref: IdentityRef,
    personnel_id: int,
    role_names: list[str],
) -> list[str]:
    """
    Replace the target's roles with role_names (administrator only).

    Granting super_admin, or changing the roles of someone who holds it,
    additionally requires the requester to be a super admin.
    Names missing from the catalog are skipped without error. Repeating the same
    call leaves exactly one row per role. Returns the role names now held.
    """
    requester = require_role(session, requester_ref, ADMINISTRATOR)
    check_super_admin_grant(session, requester, role_names)
    _get_target(session, personnel_id)
    check_super_admin_target(session, requester, personnel_id)
    inserted = replace_roles(session, personnel_id, role_names)
    session.commit()
    logger.info(
        "Roles updated: requester_id=%s personnel_id=%s roles=%s",
        requester.id,
        personnel_id,
        inserted,
    )
    return inserted


def assign_instructor_to_school(
    session: Session,
    requester_ref: IdentityRef,
    personnel_id: int,
    school_id: int,
) -> InstructorSchool:
    """Scope an instructor to a school (administrator only)."""
    requester = require_role(session, requester_ref, ADMINISTRATOR)
    _get_target(session, personnel_id)
    if get_role_by_name(session, INSTRUCTOR) is None or not holds_role(
        session, personnel_id, INSTRUCTOR
    ):
        raise NotAnInstructorError(f"Personnel {personnel_id} must be an instructor")
    if session.get(School, school_id) is None:
        raise ResourceNotFoundError(f"School {school_id} not found")
    if has_school_assignment(session, personnel_id, school_id):
        raise AlreadyAssignedError(
            f"Instructor {personnel_id} already assigned to school {school_id}"
        )
    assignment = InstructorSchool(personnel_id=personnel_id, school_id=school_id)
    session.add(assignment)
    session.commit()
    session.refresh(assignment)
    logger.info(
        "Instructor assigned: requester_id=%s personnel_id=%s school_id=%s",
        requester.id,
        personnel_id,
        school_id,
    )
    return assignment


def remove_instructor_from_school(
    session: Session,
    requester_ref: IdentityRef,
    personnel_id: int,
    school_id: int,
) -> None:
    """Drop an instructor's school scope (administrator only)."""
    requester = require_role(session, requester_ref, ADMINISTRATOR)
    assignment = (
        session.query(InstructorSchool)
        .filter(
            InstructorSchool.personnel_id == personnel_id,
            InstructorSchool.school_id == school_id,
        )
        .first()
    )
    if assignment is None:
        raise AssignmentNotFoundError(
            f"Instructor {personnel_id} is not assigned to school {school_id}"
        )
    session.delete(assignment)
    session.commit()
    logger.info(
        "Instructor removed: requester_id=%s personnel_id=%s school_id=%s",
        requester.id,
        personnel_id,
        school_id,
    )


def get_instructor_schools(
    session: Session, requester_ref: IdentityRef, personnel_id: int
) -> list[School]:
    require_auth(session, requester_ref)
    return instructor_schools(session, personnel_id)
