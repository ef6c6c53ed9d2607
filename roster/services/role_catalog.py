"""
Role catalog: the single source of truth for role names, display metadata and hierarchy.

Everything else resolves role names and privilege levels through this module
instead of re-declaring the role list.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from sqlalchemy.orm import Session

from roster.models import Role

logger = logging.getLogger(__name__)

SUPER_ADMIN = "super_admin"
ADMINISTRATOR = "administrator"
INSTRUCTOR = "instructor"
GAME_MASTER = "game_master"
MEMBER = "member"


@dataclass(frozen=True)
class RoleDefinition:
    role_name: str
    display_name: str
    color: str
    description: str
    level: int


# Strict total order by privilege, highest first.
ROLE_DEFINITIONS: tuple[RoleDefinition, ...] = (
    RoleDefinition(SUPER_ADMIN, "Super Admin", "#FF0000", "Full system access, including other super admins.", 5),
    RoleDefinition(ADMINISTRATOR, "Administrator", "#FF0000", "Manages personnel, roles and school assignments.", 4),
    RoleDefinition(INSTRUCTOR, "Instructor", "#FFA500", "Awards qualifications for assigned schools.", 3),
    RoleDefinition(GAME_MASTER, "Game Master", "#800080", "Runs operations and events.", 2),
    RoleDefinition(MEMBER, "Member", "#6B7280", "Standard unit member with system access.", 1),
)

ROLE_LEVELS: dict[str, int] = {d.role_name: d.level for d in ROLE_DEFINITIONS}

# Roles that may award any qualification and manage any school.
GLOBAL_OVERRIDE_ROLES = frozenset({SUPER_ADMIN, ADMINISTRATOR})


def hierarchy_level(role_name: str | None) -> int:
    """Privilege level for a role name; 0 for names outside the hierarchy."""
    if role_name is None:
        return 0
    return ROLE_LEVELS.get(role_name, 0)


def primary_role(role_names: Iterable[str]) -> str | None:
    """Highest-level role among role_names, or None when none is in the hierarchy."""
    best: str | None = None
    for name in role_names:
        if hierarchy_level(name) > hierarchy_level(best):
            best = name
    return best


def list_roles(session: Session) -> list[Role]:
    """All catalog entries, most privileged first; unknown names last."""
    roles = session.query(Role).all()
    return sorted(roles, key=lambda r: (-hierarchy_level(r.role_name), r.role_name))


def get_role_by_id(session: Session, role_id: int) -> Role | None:
    """Catalog entry for role_id, or None when the id no longer resolves."""
    return session.get(Role, role_id)


def get_role_by_name(session: Session, role_name: str) -> Role | None:
    return session.query(Role).filter(Role.role_name == role_name).first()


def ensure_role_catalog(session: Session) -> int:
    """
    Insert any canonical role missing from the catalog. Existing rows are left as is.

    Flushes but does not commit. Returns the number of rows created.
    """
    existing = {name for (name,) in session.query(Role.role_name).all()}
    created = 0
    for definition in ROLE_DEFINITIONS:
        if definition.role_name in existing:
            continue
        session.add(
            Role(
                role_name=definition.role_name,
                display_name=definition.display_name,
                color=definition.color,
                description=definition.description,
            )
        )
        created += 1
    if created:
        session.flush()
        logger.info("Role catalog seeded: created=%s", created)
    return created
