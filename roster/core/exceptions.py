"""
Error taxonomy for the roster core.

Every error carries a stable ``code``. ``str(err)`` renders ``"[CODE] message"``
so the code survives channels that only carry text (logs, tracebacks).
"""

import re

NOT_AUTHENTICATED = "NOT_AUTHENTICATED"
IDENTITY_NOT_FOUND = "IDENTITY_NOT_FOUND"
NO_SYSTEM_ACCESS = "NO_SYSTEM_ACCESS"
ACCOUNT_INACTIVE = "ACCOUNT_INACTIVE"
INSUFFICIENT_ROLE = "INSUFFICIENT_ROLE"
NOT_AN_INSTRUCTOR = "NOT_AN_INSTRUCTOR"
ALREADY_ASSIGNED = "ALREADY_ASSIGNED"
ASSIGNMENT_NOT_FOUND = "ASSIGNMENT_NOT_FOUND"
RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
CONFLICT = "CONFLICT"
INVALID_INPUT = "INVALID_INPUT"
RATE_LIMITED = "RATE_LIMITED"
MIGRATION_INCONSISTENCY = "MIGRATION_INCONSISTENCY"

# Codes meaning the caller's session no longer maps to a usable identity.
SESSION_INVALIDATING_CODES = frozenset(
    {NOT_AUTHENTICATED, IDENTITY_NOT_FOUND, NO_SYSTEM_ACCESS, ACCOUNT_INACTIVE}
)

_CODE_PREFIX = re.compile(r"^\s*\[([A-Z][A-Z_]*)\]")


def extract_error_code(text: str) -> str | None:
    """Return the code from a leading ``[CODE]`` prefix, or None."""
    match = _CODE_PREFIX.match(text)
    return match.group(1) if match else None


class RosterError(Exception):
    """Base exception for the roster core."""

    code = "ROSTER_ERROR"

    def __init__(self, message: str = "An error occurred") -> None:
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class NotAuthenticatedError(RosterError):
    """No identity reference was supplied."""

    code = NOT_AUTHENTICATED

    def __init__(self, message: str = "Not authenticated") -> None:
        super().__init__(message)


class IdentityNotFoundError(RosterError):
    """The identity reference does not resolve to a personnel record."""

    code = IDENTITY_NOT_FOUND


class NoSystemAccessError(RosterError):
    """The identity exists but carries no login fields."""

    code = NO_SYSTEM_ACCESS


class AccountInactiveError(RosterError):
    """The identity has login fields but its account is disabled."""

    code = ACCOUNT_INACTIVE


class InsufficientRoleError(RosterError):
    """The identity's highest role is below the required one."""

    code = INSUFFICIENT_ROLE

    def __init__(self, required_role: str, message: str | None = None) -> None:
        self.required_role = required_role
        super().__init__(message or f"Requires role '{required_role}' or higher")


class NotAnInstructorError(RosterError):
    code = NOT_AN_INSTRUCTOR


class AlreadyAssignedError(RosterError):
    code = ALREADY_ASSIGNED


class AssignmentNotFoundError(RosterError):
    code = ASSIGNMENT_NOT_FOUND


class ResourceNotFoundError(RosterError):
    """A target record (personnel being edited, school, qualification) does not exist."""

    code = RESOURCE_NOT_FOUND


class ConflictError(RosterError):
    """The request clashes with existing state (duplicate, protected account)."""

    code = CONFLICT


class InvalidInputError(RosterError):
    """A value breaks a domain rule pydantic cannot express (e.g. password strength)."""

    code = INVALID_INPUT


class RateLimitedError(RosterError):
    """Too many failed logins for the address or call sign; try again later."""

    code = RATE_LIMITED


class MigrationInconsistency(RosterError):
    """A legacy row fits no known shape. Logged by the shims, never raised out of them."""

    code = MIGRATION_INCONSISTENCY
