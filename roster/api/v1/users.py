"""Administration of identities with system access and their roles."""

from fastapi import APIRouter

from roster.api.v1.auth import DbDep, IdentityRefDep
from roster.schemas.auth import PasswordResetResponse, PersonnelOut
from roster.schemas.roles import (
    GrantAccessRequest,
    RoleOut,
    SetActiveRequest,
    UpdateRolesRequest,
    UpdateRolesResponse,
    UserWithRolesOut,
)
from roster.services import role_assignments, system_access

router = APIRouter()


@router.get("", response_model=list[PersonnelOut])
def list_users(identity_ref: IdentityRefDep, db: DbDep, role: str | None = None) -> list[PersonnelOut]:
    """Identities with system access, optionally filtered by role (super admin only)."""
    people = system_access.list_users(db, identity_ref, role=role)
    return [PersonnelOut.model_validate(p) for p in people]


@router.get("/with-roles", response_model=list[UserWithRolesOut])
def list_users_with_roles(identity_ref: IdentityRefDep, db: DbDep) -> list[UserWithRolesOut]:
    """Identities with system access and their role names (administrator only)."""
    return [
        UserWithRolesOut(user=PersonnelOut.model_validate(u.personnel), roles=u.roles)
        for u in system_access.list_users_with_roles(db, identity_ref)
    ]


@router.get("/{personnel_id}/roles", response_model=list[RoleOut])
def get_user_roles(personnel_id: int, identity_ref: IdentityRefDep, db: DbDep) -> list[RoleOut]:
    roles = role_assignments.get_user_roles(db, identity_ref, personnel_id)
    return [RoleOut.model_validate(r) for r in roles]


@router.put("/{personnel_id}/roles", response_model=UpdateRolesResponse)
def update_user_roles(
    personnel_id: int,
    body: UpdateRolesRequest,
    identity_ref: IdentityRefDep,
    db: DbDep,
) -> UpdateRolesResponse:
    """Replace the identity's roles with the given set (administrator only)."""
    roles = role_assignments.update_user_roles(db, identity_ref, personnel_id, body.roles)
    return UpdateRolesResponse(success=True, roles=roles)


@router.post("/{personnel_id}/access", response_model=PersonnelOut)
def grant_access(
    personnel_id: int,
    body: GrantAccessRequest,
    identity_ref: IdentityRefDep,
    db: DbDep,
) -> PersonnelOut:
    person = system_access.grant_system_access(
        db,
        identity_ref,
        personnel_id,
        body.password,
        body.roles,
        require_password_change=body.require_password_change,
    )
    return PersonnelOut.model_validate(person)


@router.delete("/{personnel_id}/access", response_model=PersonnelOut)
def revoke_access(personnel_id: int, identity_ref: IdentityRefDep, db: DbDep) -> PersonnelOut:
    """Remove system access; the roster record is kept (super admin only)."""
    return PersonnelOut.model_validate(system_access.revoke_system_access(db, identity_ref, personnel_id))


@router.put("/{personnel_id}/active", response_model=PersonnelOut)
def set_active(
    personnel_id: int,
    body: SetActiveRequest,
    identity_ref: IdentityRefDep,
    db: DbDep,
) -> PersonnelOut:
    person = system_access.set_account_active(db, identity_ref, personnel_id, body.active)
    return PersonnelOut.model_validate(person)


@router.post("/{personnel_id}/toggle-active", response_model=PersonnelOut)
def toggle_active(personnel_id: int, identity_ref: IdentityRefDep, db: DbDep) -> PersonnelOut:
    person = system_access.toggle_account_active(db, identity_ref, personnel_id)
    return PersonnelOut.model_validate(person)


@router.post("/{personnel_id}/reset-password", response_model=PasswordResetResponse)
def reset_password(personnel_id: int, identity_ref: IdentityRefDep, db: DbDep) -> PasswordResetResponse:
    """Issue a temporary password the identity must change on next login (super admin only)."""
    temporary_password = system_access.reset_user_password(db, identity_ref, personnel_id)
    return PasswordResetResponse(temporary_password=temporary_password)
