"""Schemas for the role catalog, role assignments and instructor school scoping."""

from pydantic import BaseModel, Field

from roster.core.security import PASSWORD_MAX_LEN, PASSWORD_MIN_LEN
from roster.schemas.auth import PersonnelOut


class RoleOut(BaseModel):
    """Role catalog entry."""

    id: int
    role_name: str
    display_name: str
    color: str
    description: str | None = None

    class Config:
        from_attributes = True


class UpdateRolesRequest(BaseModel):
    """Full replacement set of role names for one identity."""

    roles: list[str] = Field(default_factory=list, max_length=16)


class UpdateRolesResponse(BaseModel):
    success: bool = True
    roles: list[str]


class UserWithRolesOut(BaseModel):
    user: PersonnelOut
    roles: list[str]


class GrantAccessRequest(BaseModel):
    password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)
    roles: list[str] = Field(default_factory=list, max_length=16)
    require_password_change: bool = True


class SetActiveRequest(BaseModel):
    active: bool


class SchoolOut(BaseModel):
    id: int
    name: str
    abbreviation: str
    icon_url: str | None = None
    color: str | None = None

    class Config:
        from_attributes = True


class InstructorSchoolOut(BaseModel):
    id: int
    personnel_id: int
    school_id: int

    class Config:
        from_attributes = True
