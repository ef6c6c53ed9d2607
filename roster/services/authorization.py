"""
Authorization engine: hierarchy checks and school-scoped capability predicates.

Hierarchy checks (require_auth, require_role) compare the caller's highest
resolved role against a threshold and raise on denial. Capability predicates
(can_award_qualification, can_manage_school) return a bool and are the only
checks that consult school assignments.

Role resolution goes assignment -> catalog. Assignments whose role_id no
longer resolves are skipped, so one corrupt row cannot cancel the access
granted by the identity's other rows.
"""

import logging

from sqlalchemy.orm import Session

from roster.core.exceptions import (
    AccountInactiveError,
    IdentityNotFoundError,
    InsufficientRoleError,
    NoSystemAccessError,
    NotAuthenticatedError,
)
from roster.models import Personnel, Role, RoleAssignment
from roster.services.role_catalog import (
    GLOBAL_OVERRIDE_ROLES,
    INSTRUCTOR,
    ROLE_LEVELS,
    hierarchy_level,
    primary_role,
)
from roster.services.school_scoping import has_school_assignment, qualification_school_id

logger = logging.getLogger(__name__)

IdentityRef = str | None

# Session identity references name their id-space so that an id minted against
# the legacy system_users table can never resolve to a personnel row.
PERSONNEL_REF_PREFIX = "personnel:"


def personnel_ref(personnel_id: int | str) -> str:
    """The identity reference for a personnel record."""
    return f"{PERSONNEL_REF_PREFIX}{personnel_id}"


def parse_identity_ref(identity_ref: IdentityRef) -> int:
    """
    Turn a session identity reference into a personnel id.

    Raises NotAuthenticatedError when empty. Anything other than a
    "personnel:<id>" string (a bare number, a legacy system_users reference,
    a float) raises IdentityNotFoundError.
    """
    if identity_ref is None or (isinstance(identity_ref, str) and not identity_ref.strip()):
        raise NotAuthenticatedError()
    if not isinstance(identity_ref, str):
        raise IdentityNotFoundError(f"Identity reference {identity_ref!r} is not a personnel reference")
    raw_id = identity_ref.strip().removeprefix(PERSONNEL_REF_PREFIX)
    if raw_id == identity_ref.strip() or not (raw_id.isascii() and raw_id.isdigit()):
        raise IdentityNotFoundError(f"Identity reference {identity_ref!r} is not a personnel reference")
    return int(raw_id)


def resolve_role_names(session: Session, personnel_id: int) -> list[str]:
    """Role names held by the personnel, in assignment order, dangling rows skipped."""
    role_ids = [
        role_id
        for (role_id,) in session.query(RoleAssignment.role_id)
        .filter(RoleAssignment.personnel_id == personnel_id)
        .order_by(RoleAssignment.id)
        .all()
    ]
    wanted = [rid for rid in role_ids if rid is not None]
    names_by_id: dict[int, str] = {}
    if wanted:
        names_by_id = dict(
            session.query(Role.id, Role.role_name).filter(Role.id.in_(wanted)).all()
        )
    unresolved = len(role_ids) - sum(1 for rid in wanted if rid in names_by_id)
    if unresolved:
        logger.warning(
            "Skipping unresolvable role assignments: personnel_id=%s count=%s",
            personnel_id,
            unresolved,
        )
    names: list[str] = []
    for rid in wanted:
        name = names_by_id.get(rid)
        if name is not None and name not in names:
            names.append(name)
    return names


def max_role_level(session: Session, personnel_id: int) -> int:
    return max((hierarchy_level(n) for n in resolve_role_names(session, personnel_id)), default=0)


def holds_role(session: Session, personnel_id: int, role_name: str) -> bool:
    """True when an assignment links the personnel to the named catalog role."""
    row = (
        session.query(RoleAssignment.id)
        .join(Role, Role.id == RoleAssignment.role_id)
        .filter(RoleAssignment.personnel_id == personnel_id, Role.role_name == role_name)
        .first()
    )
    return row is not None


def require_auth(session: Session, identity_ref: IdentityRef) -> Personnel:
    """
    Resolve identity_ref to a personnel record that may use the system.

    Raises NotAuthenticatedError, IdentityNotFoundError, NoSystemAccessError or
    AccountInactiveError. Returns the full record, roster fields included.
    """
    personnel_id = parse_identity_ref(identity_ref)
    person = session.get(Personnel, personnel_id)
    if person is None:
        logger.info("Auth denied: personnel_id=%s code=IDENTITY_NOT_FOUND", personnel_id)
        raise IdentityNotFoundError(f"Personnel {personnel_id} not found")
    if not person.has_system_access:
        logger.info("Auth denied: personnel_id=%s code=NO_SYSTEM_ACCESS", personnel_id)
        raise NoSystemAccessError(f"{person.call_sign} has no system access")
    if person.is_active is False:
        logger.info("Auth denied: personnel_id=%s code=ACCOUNT_INACTIVE", personnel_id)
        raise AccountInactiveError(f"Account for {person.call_sign} is deactivated")
    return person


def require_role(session: Session, identity_ref: IdentityRef, minimum_role: str) -> Personnel:
    """
    require_auth, then require the highest held role to reach minimum_role.

    Holding no assignments is not the same as holding "member": it fails every check.
    Raises InsufficientRoleError naming minimum_role.
    """
    if minimum_role not in ROLE_LEVELS:
        raise ValueError(f"Unknown role: {minimum_role!r}")
    person = require_auth(session, identity_ref)
    level = max_role_level(session, person.id)
    if level < ROLE_LEVELS[minimum_role]:
        logger.info(
            "Role denied: personnel_id=%s level=%s required=%s",
            person.id,
            level,
            minimum_role,
        )
        raise InsufficientRoleError(minimum_role)
    return person


def _scoped_top_role(session: Session, identity_ref: IdentityRef) -> tuple[int, str | None] | None:
    """
    Shared first half of the capability predicates.

    Returns (personnel_id, highest role name) or None when the identity cannot
    act at all. An empty reference raises NotAuthenticatedError.
    """
    try:
        personnel_id = parse_identity_ref(identity_ref)
    except IdentityNotFoundError:
        return None
    person = session.get(Personnel, personnel_id)
    if person is None or not person.has_system_access or person.is_active is False:
        return None
    return personnel_id, primary_role(resolve_role_names(session, personnel_id))


def can_award_qualification(
    session: Session, identity_ref: IdentityRef, qualification_id: int
) -> bool:
    """
    Whether the identity may award the qualification.

    Administrators and super admins always may. Instructors (with no higher
    role) may when assigned to the qualification's school. Everyone else may not.
    """
    scope = _scoped_top_role(session, identity_ref)
    if scope is None:
        return False
    personnel_id, top = scope
    if top in GLOBAL_OVERRIDE_ROLES:
        return True
    if top != INSTRUCTOR:
        return False
    school_id = qualification_school_id(session, qualification_id)
    if school_id is None:
        return False
    return has_school_assignment(session, personnel_id, school_id)


def can_manage_school(session: Session, identity_ref: IdentityRef, school_id: int) -> bool:
    """Whether the identity may manage the school. Same rules as can_award_qualification."""
    scope = _scoped_top_role(session, identity_ref)
    if scope is None:
        return False
    personnel_id, top = scope
    if top in GLOBAL_OVERRIDE_ROLES:
        return True
    if top != INSTRUCTOR:
        return False
    return has_school_assignment(session, personnel_id, school_id)
