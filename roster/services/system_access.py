"""
Roster records and the system access they may carry.

Two lifecycles are kept apart here. Revoking system access clears the login
fields and the identity's roles but keeps the roster record. Deleting personnel
removes the roster record itself along with everything hanging off it.
"""

import logging
import secrets
import string
from dataclasses import dataclass, field
from datetime import UTC, datetime

from sqlalchemy.orm import Session

from roster.core.exceptions import ConflictError, InvalidInputError, ResourceNotFoundError
from roster.core.security import hash_password, validate_password_strength, verify_password
from roster.models import (
    InstructorSchool,
    Personnel,
    PersonnelQualification,
    Rank,
    RankHistory,
    RoleAssignment,
)
from roster.services.authorization import (
    IdentityRef,
    holds_role,
    require_auth,
    require_role,
    resolve_role_names,
)
from roster.services.role_assignments import check_super_admin_grant, replace_roles
from roster.services.role_catalog import ADMINISTRATOR, SUPER_ADMIN, get_role_by_name

logger = logging.getLogger(__name__)


@dataclass
class UserWithRoles:
    personnel: Personnel
    roles: list[str] = field(default_factory=list)


def _get_target(session: Session, personnel_id: int) -> Personnel:
    person = session.get(Personnel, personnel_id)
    if person is None:
        raise ResourceNotFoundError(f"Personnel {personnel_id} not found")
    return person


def default_rank(session: Session, abbreviation: str = "PTE") -> Rank | None:
    """The lowest-order rank, falling back to the one with the given abbreviation."""
    rank = (
        session.query(Rank)
        .filter(Rank.order.is_not(None))
        .order_by(Rank.order.asc(), Rank.id.asc())
        .first()
    )
    if rank is None:
        rank = session.query(Rank).filter(Rank.abbreviation == abbreviation).first()
    return rank


def create_personnel(
    session: Session,
    requester_ref: IdentityRef,
    call_sign: str,
    email: str | None = None,
    first_name: str | None = None,
    last_name: str | None = None,
    rank_id: int | None = None,
) -> Personnel:
    """Add a roster record without system access (administrator only)."""
    require_role(session, requester_ref, ADMINISTRATOR)
    call_sign = call_sign.strip()
    if session.query(Personnel.id).filter(Personnel.call_sign == call_sign).first():
        raise ConflictError(f"Call sign {call_sign!r} already exists")
    if rank_id is None:
        rank = default_rank(session)
        rank_id = rank.id if rank else None
    person = Personnel(
        call_sign=call_sign,
        email=email,
        first_name=first_name,
        last_name=last_name,
        rank_id=rank_id,
        status="active",
        join_date=datetime.now(UTC),
    )
    session.add(person)
    session.commit()
    session.refresh(person)
    return person


def list_users(session: Session, requester_ref: IdentityRef, role: str | None = None) -> list[Personnel]:
    """Identities with system access, optionally only holders of role (super admin only)."""
    require_role(session, requester_ref, SUPER_ADMIN)
    query = session.query(Personnel).filter(Personnel.password_hash.is_not(None))
    if role is not None:
        catalog_role = get_role_by_name(session, role)
        if catalog_role is None:
            return []
        query = query.join(RoleAssignment, RoleAssignment.personnel_id == Personnel.id).filter(
            RoleAssignment.role_id == catalog_role.id
        )
    return query.order_by(Personnel.call_sign).all()


def list_users_with_roles(session: Session, requester_ref: IdentityRef) -> list[UserWithRoles]:
    """Identities with system access and their resolved role names (administrator only)."""
    require_role(session, requester_ref, ADMINISTRATOR)
    people = (
        session.query(Personnel)
        .filter(Personnel.password_hash.is_not(None))
        .order_by(Personnel.id.desc())
        .all()
    )
    return [UserWithRoles(personnel=p, roles=resolve_role_names(session, p.id)) for p in people]


def grant_system_access(
    session: Session,
    requester_ref: IdentityRef,
    personnel_id: int,
    password: str,
    role_names: list[str],
    require_password_change: bool = True,
) -> Personnel:
    """
    Give an existing roster record the full set of login fields and its roles.

    Administrator only; granting super_admin needs a super admin. Identities
    that already log in are refused; their passwords change through
    change_password or reset_user_password.
    """
    requester = require_role(session, requester_ref, ADMINISTRATOR)
    check_super_admin_grant(session, requester, role_names)
    person = _get_target(session, personnel_id)
    if person.has_system_access:
        raise ConflictError(f"{person.call_sign} already has system access")
    problems = validate_password_strength(password)
    if problems:
        raise InvalidInputError("; ".join(problems))
    _set_password(person, password, require_password_change)
    person.is_active = True
    replace_roles(session, personnel_id, role_names)
    session.commit()
    session.refresh(person)
    logger.info(
        "System access granted: requester_id=%s personnel_id=%s", requester.id, personnel_id
    )
    return person


def revoke_system_access(session: Session, requester_ref: IdentityRef, personnel_id: int) -> Personnel:
    """
    Remove login capability, roles and school scopes. The roster record stays.

    Super admin only. Super admin holders cannot be revoked.
    """
    requester = require_role(session, requester_ref, SUPER_ADMIN)
    person = _get_target(session, personnel_id)
    if holds_role(session, personnel_id, SUPER_ADMIN):
        raise ConflictError("Cannot revoke system access of a super admin")
    session.query(RoleAssignment).filter(RoleAssignment.personnel_id == personnel_id).delete(
        synchronize_session=False
    )
    session.query(InstructorSchool).filter(InstructorSchool.personnel_id == personnel_id).delete(
        synchronize_session=False
    )
    person.clear_login_fields()
    session.commit()
    session.refresh(person)
    logger.info(
        "System access revoked: requester_id=%s personnel_id=%s", requester.id, personnel_id
    )
    return person


def set_account_active(
    session: Session, requester_ref: IdentityRef, personnel_id: int, active: bool
) -> Personnel:
    """Enable or disable login for an identity with system access (super admin only)."""
    requester = require_role(session, requester_ref, SUPER_ADMIN)
    person = _get_target(session, personnel_id)
    if not person.has_system_access:
        raise ConflictError(f"{person.call_sign} has no system access to enable or disable")
    if not active and holds_role(session, personnel_id, SUPER_ADMIN):
        raise ConflictError("Cannot deactivate a super admin account")
    person.is_active = active
    session.commit()
    session.refresh(person)
    logger.info(
        "Account active=%s: requester_id=%s personnel_id=%s", active, requester.id, personnel_id
    )
    return person


def toggle_account_active(session: Session, requester_ref: IdentityRef, personnel_id: int) -> Personnel:
    person = _get_target(session, personnel_id)
    return set_account_active(session, requester_ref, personnel_id, not bool(person.is_active))


def delete_personnel(session: Session, requester_ref: IdentityRef, personnel_id: int) -> None:
    """Remove a roster record and everything attached to it (administrator only)."""
    requester = require_role(session, requester_ref, ADMINISTRATOR)
    if requester.id == personnel_id:
        raise ConflictError("Cannot delete your own personnel record")
    person = _get_target(session, personnel_id)
    if holds_role(session, personnel_id, SUPER_ADMIN):
        raise ConflictError("Cannot delete a super admin")
    for model in (PersonnelQualification, RankHistory, RoleAssignment, InstructorSchool):
        session.query(model).filter(model.personnel_id == personnel_id).delete(
            synchronize_session=False
        )
    session.delete(person)
    session.commit()
    logger.info("Personnel deleted: requester_id=%s personnel_id=%s", requester.id, personnel_id)


TEMPORARY_PASSWORD_LENGTH = 16
_TEMPORARY_PASSWORD_ALPHABET = string.ascii_letters + string.digits


def generate_temporary_password(length: int = TEMPORARY_PASSWORD_LENGTH) -> str:
    """Random password that passes validate_password_strength."""
    while True:
        password = "".join(secrets.choice(_TEMPORARY_PASSWORD_ALPHABET) for _ in range(length))
        if not validate_password_strength(password):
            return password


def _set_password(person: Personnel, password: str, require_password_change: bool) -> None:
    password_hash, password_salt = hash_password(password)
    person.password_hash = password_hash
    person.password_salt = password_salt
    person.require_password_change = require_password_change
    person.last_password_change = datetime.now(UTC)


def change_password(
    session: Session, requester_ref: IdentityRef, current_password: str, new_password: str
) -> Personnel:
    """
    Change the caller's own password and clear require_password_change.

    The current password must verify and the new one must pass the strength rules;
    either failure raises InvalidInputError.
    """
    person = require_auth(session, requester_ref)
    if not verify_password(current_password, person.password_hash):
        raise InvalidInputError("Current password is incorrect")
    problems = validate_password_strength(new_password)
    if problems:
        raise InvalidInputError("; ".join(problems))
    _set_password(person, new_password, require_password_change=False)
    session.commit()
    session.refresh(person)
    logger.info("Password changed: personnel_id=%s", person.id)
    return person


def reset_user_password(session: Session, requester_ref: IdentityRef, personnel_id: int) -> str:
    """
    Give an identity a temporary password it must change on next login.

    Super admin only. Returns the temporary password; only its hash is stored.
    """
    requester = require_role(session, requester_ref, SUPER_ADMIN)
    person = _get_target(session, personnel_id)
    if not person.has_system_access:
        raise ConflictError(f"{person.call_sign} has no system access to reset")
    temporary_password = generate_temporary_password()
    _set_password(person, temporary_password, require_password_change=True)
    session.commit()
    logger.info(
        "Password reset: requester_id=%s personnel_id=%s", requester.id, personnel_id
    )
    return temporary_password
