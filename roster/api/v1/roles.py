"""Role catalog listing and lookup."""

from fastapi import APIRouter

from roster.api.v1.auth import DbDep, IdentityRefDep
from roster.core.exceptions import ResourceNotFoundError
from roster.schemas.roles import RoleOut
from roster.services.authorization import require_auth
from roster.services.role_catalog import get_role_by_id, list_roles

router = APIRouter()


@router.get("", response_model=list[RoleOut])
def get_roles(identity_ref: IdentityRefDep, db: DbDep) -> list[RoleOut]:
    """All catalog roles, most privileged first."""
    require_auth(db, identity_ref)
    return [RoleOut.model_validate(r) for r in list_roles(db)]


@router.get("/{role_id}", response_model=RoleOut)
def get_role(role_id: int, identity_ref: IdentityRefDep, db: DbDep) -> RoleOut:
    require_auth(db, identity_ref)
    role = get_role_by_id(db, role_id)
    if role is None:
        raise ResourceNotFoundError(f"Role {role_id} not found")
    return RoleOut.model_validate(role)
