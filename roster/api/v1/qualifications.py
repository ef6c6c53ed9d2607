"""Qualification awards, gated by school-scoped permissions."""

from fastapi import APIRouter, status

from roster.api.v1.auth import DbDep, IdentityRefDep
from roster.schemas.qualifications import (
    AwardQualificationRequest,
    CapabilityResponse,
    PersonnelQualificationOut,
)
from roster.services import qualifications
from roster.services.authorization import can_award_qualification, require_auth

router = APIRouter()


@router.get("/{qualification_id}/can-award", response_model=CapabilityResponse)
def get_can_award(qualification_id: int, identity_ref: IdentityRefDep, db: DbDep) -> CapabilityResponse:
    require_auth(db, identity_ref)
    return CapabilityResponse(allowed=can_award_qualification(db, identity_ref, qualification_id))


@router.post("/award", response_model=PersonnelQualificationOut, status_code=status.HTTP_201_CREATED)
def award(body: AwardQualificationRequest, identity_ref: IdentityRefDep, db: DbDep) -> PersonnelQualificationOut:
    """Award a qualification (instructor assigned to its school, or administrator)."""
    record = qualifications.award_qualification(
        db,
        identity_ref,
        body.personnel_id,
        body.qualification_id,
        body.awarded_date,
        expiry_date=body.expiry_date,
        notes=body.notes,
    )
    return PersonnelQualificationOut.model_validate(record)


@router.delete("/{personnel_id}/{qualification_id}")
def remove(personnel_id: int, qualification_id: int, identity_ref: IdentityRefDep, db: DbDep) -> dict[str, bool]:
    qualifications.remove_qualification(db, identity_ref, personnel_id, qualification_id)
    return {"success": True}
