"""Awarding and removing qualifications, gated by the school-scoped capability predicates."""

import logging
from datetime import datetime

from sqlalchemy.orm import Session

from roster.core.exceptions import ConflictError, InsufficientRoleError, ResourceNotFoundError
from roster.models import Personnel, PersonnelQualification, Qualification
from roster.services.authorization import (
    IdentityRef,
    can_award_qualification,
    can_manage_school,
    personnel_ref,
    require_auth,
    require_role,
)
from roster.services.role_catalog import INSTRUCTOR

logger = logging.getLogger(__name__)


def award_qualification(
    session: Session,
    requester_ref: IdentityRef,
    personnel_id: int,
    qualification_id: int,
    awarded_date: datetime,
    expiry_date: datetime | None = None,
    notes: str | None = None,
) -> PersonnelQualification:
    """
    Record that personnel_id holds qualification_id.

    Requires instructor level and permission for the qualification's school.
    """
    requester = require_role(session, requester_ref, INSTRUCTOR)
    if not can_award_qualification(session, personnel_ref(requester.id), qualification_id):
        raise InsufficientRoleError(
            INSTRUCTOR,
            "You must be assigned to the qualification's school to award it",
        )
    if session.get(Personnel, personnel_id) is None:
        raise ResourceNotFoundError(f"Personnel {personnel_id} not found")
    if session.get(Qualification, qualification_id) is None:
        raise ResourceNotFoundError(f"Qualification {qualification_id} not found")
    existing = (
        session.query(PersonnelQualification.id)
        .filter(
            PersonnelQualification.personnel_id == personnel_id,
            PersonnelQualification.qualification_id == qualification_id,
        )
        .first()
    )
    if existing:
        raise ConflictError("Personnel already has this qualification")

    award = PersonnelQualification(
        personnel_id=personnel_id,
        qualification_id=qualification_id,
        awarded_date=awarded_date,
        expiry_date=expiry_date,
        awarded_by=requester.id,
        notes=notes or None,
    )
    session.add(award)
    session.commit()
    session.refresh(award)
    logger.info(
        "Qualification awarded: by=%s personnel_id=%s qualification_id=%s",
        requester.id,
        personnel_id,
        qualification_id,
    )
    return award


def remove_qualification(
    session: Session,
    requester_ref: IdentityRef,
    personnel_id: int,
    qualification_id: int,
) -> None:
    """Remove a held qualification. Requires permission to manage its school."""
    requester = require_auth(session, requester_ref)
    qualification = session.get(Qualification, qualification_id)
    if qualification is None:
        raise ResourceNotFoundError(f"Qualification {qualification_id} not found")
    if not can_manage_school(session, personnel_ref(requester.id), qualification.school_id):
        raise InsufficientRoleError(
            INSTRUCTOR,
            "You must be assigned to the qualification's school to remove it",
        )
    held = (
        session.query(PersonnelQualification)
        .filter(
            PersonnelQualification.personnel_id == personnel_id,
            PersonnelQualification.qualification_id == qualification_id,
        )
        .first()
    )
    if held is None:
        raise ResourceNotFoundError("Personnel does not have this qualification")
    session.delete(held)
    session.commit()
    logger.info(
        "Qualification removed: by=%s personnel_id=%s qualification_id=%s",
        requester.id,
        personnel_id,
        qualification_id,
    )
