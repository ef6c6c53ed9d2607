"""SQLAlchemy ORM models."""

from roster.models.base import Base
from roster.models.event import Event, EventInstructor
from roster.models.legacy import SystemUser
from roster.models.login_attempt import LoginAttempt
from roster.models.personnel import Personnel
from roster.models.rank import Rank, RankHistory
from roster.models.role import Role, RoleAssignment
from roster.models.school import InstructorSchool, PersonnelQualification, Qualification, School

__all__ = [
    "Base",
    "Event",
    "EventInstructor",
    "InstructorSchool",
    "LoginAttempt",
    "Personnel",
    "PersonnelQualification",
    "Qualification",
    "Rank",
    "RankHistory",
    "Role",
    "RoleAssignment",
    "School",
    "SystemUser",
]
