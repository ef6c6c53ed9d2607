"""Instructor school scoping and the school-management capability check."""

from fastapi import APIRouter, status

from roster.api.v1.auth import DbDep, IdentityRefDep
from roster.schemas.qualifications import CapabilityResponse
from roster.schemas.roles import InstructorSchoolOut, SchoolOut
from roster.services import role_assignments
from roster.services.authorization import can_manage_school, require_auth

router = APIRouter()


@router.get("/{school_id}/can-manage", response_model=CapabilityResponse)
def get_can_manage(school_id: int, identity_ref: IdentityRefDep, db: DbDep) -> CapabilityResponse:
    """Whether the caller may manage the school."""
    require_auth(db, identity_ref)
    return CapabilityResponse(allowed=can_manage_school(db, identity_ref, school_id))


@router.get("/instructors/{personnel_id}", response_model=list[SchoolOut])
def get_instructor_schools(personnel_id: int, identity_ref: IdentityRefDep, db: DbDep) -> list[SchoolOut]:
    schools = role_assignments.get_instructor_schools(db, identity_ref, personnel_id)
    return [SchoolOut.model_validate(s) for s in schools]


@router.post(
    "/{school_id}/instructors/{personnel_id}",
    response_model=InstructorSchoolOut,
    status_code=status.HTTP_201_CREATED,
)
def assign_instructor(
    school_id: int, personnel_id: int, identity_ref: IdentityRefDep, db: DbDep
) -> InstructorSchoolOut:
    assignment = role_assignments.assign_instructor_to_school(db, identity_ref, personnel_id, school_id)
    return InstructorSchoolOut.model_validate(assignment)


@router.delete("/{school_id}/instructors/{personnel_id}")
def remove_instructor(
    school_id: int, personnel_id: int, identity_ref: IdentityRefDep, db: DbDep
) -> dict[str, bool]:
    role_assignments.remove_instructor_from_school(db, identity_ref, personnel_id, school_id)
    return {"success": True}
