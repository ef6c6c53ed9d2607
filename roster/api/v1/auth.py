"""JWT login and the identity dependency every other router builds on."""

from typing import Annotated

import jwt
from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from roster.core.database import get_db
from roster.core.exceptions import AccountInactiveError, NoSystemAccessError
from roster.core.security import (
    ID_SPACE_CLAIM,
    PERSONNEL_ID_SPACE,
    create_access_token,
    decode_access_token,
    verify_password,
)
from roster.models import Personnel
from roster.schemas.auth import (
    ChangePasswordRequest,
    ChangePasswordResponse,
    LoginRequest,
    LogoutResponse,
    PersonnelOut,
    TokenResponse,
)
from roster.services.authorization import personnel_ref, require_auth, resolve_role_names
from roster.services.login_attempts import check_login_allowed, record_login_attempt
from roster.services.role_catalog import primary_role
from roster.services.system_access import change_password

router = APIRouter()
security = HTTPBearer(auto_error=False)


def get_identity_ref(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> str | None:
    """
    Dependency: the identity reference carried by the bearer token.

    Missing or invalid tokens yield None; the authorization engine turns that
    into NOT_AUTHENTICATED so every route reports it the same way. A token whose
    sub is not marked as a personnel id yields the bare sub, which the engine
    reports as IDENTITY_NOT_FOUND.
    """
    if credentials is None:
        return None
    try:
        payload = decode_access_token(credentials.credentials)
    except jwt.PyJWTError:
        return None
    sub = payload.get("sub")
    if not sub:
        return None
    if payload.get(ID_SPACE_CLAIM) != PERSONNEL_ID_SPACE:
        return str(sub)
    return personnel_ref(sub)


IdentityRefDep = Annotated[str | None, Depends(get_identity_ref)]
DbDep = Annotated[Session, Depends(get_db)]

_INVALID_CREDENTIALS = "Invalid call sign or password."


@router.post("", response_model=TokenResponse)
def login(body: LoginRequest, request: Request, db: DbDep) -> TokenResponse:
    """
    Authenticate with call sign and password; returns a JWT access token.
    Include the token in the Authorization header as: Bearer <access_token>

    Repeated failures from one address or for one call sign are refused with 429.
    """
    call_sign = body.call_sign.strip()
    ip_address = request.client.host if request.client else None
    check_login_allowed(db, call_sign, ip_address)

    def failed(reason: str, person: Personnel | None = None) -> None:
        record_login_attempt(
            db,
            call_sign,
            ip_address,
            success=False,
            reason=reason,
            personnel_id=person.id if person else None,
        )

    person = db.query(Personnel).filter(Personnel.call_sign == call_sign).first()
    if person is None:
        failed("unknown_call_sign")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=_INVALID_CREDENTIALS)
    if not person.has_system_access:
        failed("no_system_access", person)
        raise NoSystemAccessError("Please set up your password first")
    if not verify_password(body.password, person.password_hash):
        failed("invalid_password", person)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=_INVALID_CREDENTIALS)
    if person.is_active is False:
        failed("account_inactive", person)
        raise AccountInactiveError("Your account has been deactivated")

    record_login_attempt(db, call_sign, ip_address, success=True, personnel_id=person.id)
    role = primary_role(resolve_role_names(db, person.id))
    token = create_access_token(sub=person.id, role=role)
    return TokenResponse(
        access_token=token,
        token_type="bearer",
        role=role,
        require_password_change=bool(person.require_password_change),
    )


@router.post("/logout", response_model=LogoutResponse)
def logout() -> LogoutResponse:
    """Tokens are stateless; the client drops its token on receipt."""
    return LogoutResponse()


@router.get("/me", response_model=PersonnelOut)
def me(identity_ref: IdentityRefDep, db: DbDep) -> PersonnelOut:
    """The caller's own record, without password fields."""
    return PersonnelOut.model_validate(require_auth(db, identity_ref))


@router.post("/change-password", response_model=ChangePasswordResponse)
def change_own_password(
    body: ChangePasswordRequest, identity_ref: IdentityRefDep, db: DbDep
) -> ChangePasswordResponse:
    """Change the caller's password; clears require_password_change."""
    change_password(db, identity_ref, body.current_password, body.new_password)
    return ChangePasswordResponse()
