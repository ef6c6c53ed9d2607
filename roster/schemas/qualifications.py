"""Schemas for awarding and removing qualifications."""

from datetime import datetime

from pydantic import BaseModel, Field


class AwardQualificationRequest(BaseModel):
    personnel_id: int
    qualification_id: int
    awarded_date: datetime
    expiry_date: datetime | None = None
    notes: str | None = Field(default=None, max_length=2000)


class PersonnelQualificationOut(BaseModel):
    id: int
    personnel_id: int
    qualification_id: int
    awarded_date: datetime
    expiry_date: datetime | None = None
    awarded_by: int | None = None
    notes: str | None = None

    class Config:
        from_attributes = True


class CapabilityResponse(BaseModel):
    allowed: bool
