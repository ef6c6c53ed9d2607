"""Roster records: adding and archiving personnel."""

from fastapi import APIRouter, status
from pydantic import BaseModel, Field

from roster.api.v1.auth import DbDep, IdentityRefDep
from roster.core.security import CALL_SIGN_MAX_LEN, CALL_SIGN_MIN_LEN
from roster.schemas.auth import PersonnelOut
from roster.services import system_access

router = APIRouter()


class CreatePersonnelRequest(BaseModel):
    call_sign: str = Field(..., min_length=CALL_SIGN_MIN_LEN, max_length=CALL_SIGN_MAX_LEN)
    email: str | None = Field(default=None, max_length=255)
    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)
    rank_id: int | None = None


@router.post("", response_model=PersonnelOut, status_code=status.HTTP_201_CREATED)
def create_personnel(body: CreatePersonnelRequest, identity_ref: IdentityRefDep, db: DbDep) -> PersonnelOut:
    """Add a roster record with no system access (administrator only)."""
    person = system_access.create_personnel(
        db,
        identity_ref,
        body.call_sign,
        email=body.email,
        first_name=body.first_name,
        last_name=body.last_name,
        rank_id=body.rank_id,
    )
    return PersonnelOut.model_validate(person)


@router.delete("/{personnel_id}")
def delete_personnel(personnel_id: int, identity_ref: IdentityRefDep, db: DbDep) -> dict[str, bool]:
    """Remove the roster record and its history (administrator only)."""
    system_access.delete_personnel(db, identity_ref, personnel_id)
    return {"success": True}
