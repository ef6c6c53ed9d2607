"""
Login throttling.

Every POST to the login endpoint is recorded. Before a new attempt is checked
against the stored password, recent failures are counted per client address and
per call sign; too many in the window, or enough within the longer lockout
period, refuse the attempt with RateLimitedError. Successful attempts are
recorded but never count against anyone.
"""

import logging
import math
from datetime import UTC, datetime, timedelta

from sqlalchemy.orm import Session

from roster.core.config import settings
from roster.core.exceptions import RateLimitedError
from roster.models import LoginAttempt

logger = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes for timezone-aware columns.
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


def _failures_since(session: Session, since: datetime, **match: str) -> list[datetime]:
    query = session.query(LoginAttempt.attempted_at).filter(
        LoginAttempt.success.is_(False), LoginAttempt.attempted_at >= since
    )
    for column, value in match.items():
        query = query.filter(getattr(LoginAttempt, column) == value)
    return [_as_utc(at) for (at,) in query.all()]


def check_login_allowed(
    session: Session, call_sign: str, ip_address: str | None, now: datetime | None = None
) -> int:
    """
    Raise RateLimitedError when the attempt must be refused.

    Returns how many more failures are tolerated before the next refusal. An
    attempt with no known client address is only limited per call sign.
    """
    now = now or datetime.now(UTC)
    window_start = now - timedelta(minutes=settings.LOGIN_WINDOW_MINUTES)

    ip_remaining = settings.LOGIN_MAX_ATTEMPTS_PER_IP
    if ip_address:
        ip_failures = len(_failures_since(session, window_start, ip_address=ip_address))
        if ip_failures >= settings.LOGIN_MAX_ATTEMPTS_PER_IP:
            logger.warning("Login throttled: ip=%s failures=%s", ip_address, ip_failures)
            raise RateLimitedError(
                "Too many login attempts from this address. "
                f"Please try again in {settings.LOGIN_WINDOW_MINUTES} minutes."
            )
        ip_remaining -= ip_failures

    lockout_start = now - timedelta(minutes=settings.LOGIN_LOCKOUT_MINUTES)
    lockout_failures = _failures_since(session, lockout_start, call_sign=call_sign)
    if len(lockout_failures) >= settings.LOGIN_LOCKOUT_ATTEMPTS:
        expires = min(lockout_failures) + timedelta(minutes=settings.LOGIN_LOCKOUT_MINUTES)
        minutes = max(1, math.ceil((expires - now).total_seconds() / 60))
        logger.warning("Login locked: call_sign=%s failures=%s", call_sign, len(lockout_failures))
        raise RateLimitedError(
            "Account temporarily locked due to too many failed login attempts. "
            f"Please try again in {minutes} minute(s)."
        )

    call_sign_failures = sum(1 for at in lockout_failures if at >= window_start)
    if call_sign_failures >= settings.LOGIN_MAX_ATTEMPTS_PER_CALL_SIGN:
        logger.warning("Login throttled: call_sign=%s failures=%s", call_sign, call_sign_failures)
        raise RateLimitedError(
            "Too many login attempts for this account. "
            f"Please try again in {settings.LOGIN_WINDOW_MINUTES} minutes."
        )
    return min(ip_remaining, settings.LOGIN_MAX_ATTEMPTS_PER_CALL_SIGN - call_sign_failures)


def record_login_attempt(
    session: Session,
    call_sign: str,
    ip_address: str | None,
    success: bool,
    reason: str | None = None,
    personnel_id: int | None = None,
    now: datetime | None = None,
) -> LoginAttempt:
    """Store one attempt and purge attempts past retention. Commits."""
    now = now or datetime.now(UTC)
    attempt = LoginAttempt(
        call_sign=call_sign,
        ip_address=ip_address,
        success=success,
        reason=reason,
        personnel_id=personnel_id,
        attempted_at=now,
    )
    session.add(attempt)
    purge_login_attempts(session, now=now)
    session.commit()
    if not success:
        logger.info("Login failed: call_sign=%s ip=%s reason=%s", call_sign, ip_address, reason)
    return attempt


def purge_login_attempts(session: Session, now: datetime | None = None) -> int:
    """Delete attempts older than the retention period. Flushes, does not commit."""
    now = now or datetime.now(UTC)
    cutoff = now - timedelta(minutes=settings.LOGIN_ATTEMPT_RETENTION_MINUTES)
    deleted = (
        session.query(LoginAttempt)
        .filter(LoginAttempt.attempted_at < cutoff)
        .delete(synchronize_session=False)
    )
    if deleted:
        logger.debug("Purged login attempts: count=%s", deleted)
    return deleted
