"""
Process-wide safety net that signs the user out when a stale session surfaces.

A session goes stale when the identity behind it is deleted, loses its login
fields or is deactivated. Any error carrying one of SESSION_INVALIDATING_CODES
that reaches an uncaught-exception hook, an asyncio loop exception handler or
an ERROR log record triggers one sign-out. Codes are matched by equality, from
a ``code`` attribute or key, or from a leading ``[CODE]`` text prefix.
"""

import asyncio
import logging
import sys
import threading
from collections.abc import Callable, Mapping
from typing import Any

from roster.core.config import get_settings
from roster.core.exceptions import SESSION_INVALIDATING_CODES, extract_error_code

logger = logging.getLogger(__name__)

SignOutCallback = Callable[[str], object]

# Bound on __cause__/__context__ links followed from one exception.
_MAX_CHAIN = 8


def _code_of(payload: object) -> str | None:
    code = getattr(payload, "code", None)
    if code is None and isinstance(payload, Mapping):
        code = payload.get("code")
    if isinstance(code, str) and code in SESSION_INVALIDATING_CODES:
        return code
    if isinstance(payload, (str, BaseException)):
        text = payload if isinstance(payload, str) else str(payload)
        found = extract_error_code(text)
        if found in SESSION_INVALIDATING_CODES:
            return found
    return None


def session_error_code(payload: object) -> str | None:
    """
    The session-invalidating code carried by payload, or None.

    payload may be an exception (its cause/context chain is followed), a
    mapping with a "code" key, a log record or plain text.
    """
    if isinstance(payload, logging.LogRecord):
        record_code = getattr(payload, "code", None)
        if isinstance(record_code, str) and record_code in SESSION_INVALIDATING_CODES:
            return record_code
        if payload.exc_info and payload.exc_info[1] is not None:
            found = session_error_code(payload.exc_info[1])
            if found:
                return found
        return _code_of(payload.getMessage())

    if isinstance(payload, BaseException):
        seen: set[int] = set()
        current: BaseException | None = payload
        while current is not None and id(current) not in seen and len(seen) < _MAX_CHAIN:
            seen.add(id(current))
            found = _code_of(current)
            if found:
                return found
            current = current.__cause__ or current.__context__
        return None

    return _code_of(payload)


class _SessionLogHandler(logging.Handler):
    def __init__(self, guard: "SessionGuard") -> None:
        super().__init__(level=logging.ERROR)
        self._guard = guard

    def emit(self, record: logging.LogRecord) -> None:
        self._guard.observe(record)


class SessionGuard:
    """
    Watches the runtime's error channels and calls on_sign_out(login_path) once.

    Use install_session_guard() rather than constructing one directly.
    """

    def __init__(self, on_sign_out: SignOutCallback, login_path: str | None = None) -> None:
        self._on_sign_out = on_sign_out
        self.login_path = login_path or get_settings().LOGIN_PATH
        self._lock = threading.Lock()
        self._fired = False
        self._installed = False
        self._handler = _SessionLogHandler(self)
        self._prev_excepthook: Callable[..., Any] | None = None
        self._prev_threading_excepthook: Callable[..., Any] | None = None
        self._loops: list[tuple[asyncio.AbstractEventLoop, Callable[..., Any] | None]] = []

    @property
    def fired(self) -> bool:
        return self._fired

    @property
    def installed(self) -> bool:
        return self._installed

    def install(self) -> None:
        if self._installed:
            return
        self._prev_excepthook = sys.excepthook
        self._prev_threading_excepthook = threading.excepthook
        sys.excepthook = self._excepthook
        threading.excepthook = self._threading_excepthook
        logging.getLogger().addHandler(self._handler)
        self._installed = True
        logger.debug("Session guard installed")

    def uninstall(self) -> None:
        """Restore every hook this guard replaced."""
        for loop, previous in self._loops:
            if not loop.is_closed():
                loop.set_exception_handler(previous)
        self._loops.clear()
        if not self._installed:
            return
        if sys.excepthook == self._excepthook:
            sys.excepthook = self._prev_excepthook or sys.__excepthook__
        if threading.excepthook == self._threading_excepthook:
            threading.excepthook = self._prev_threading_excepthook or threading.__excepthook__
        logging.getLogger().removeHandler(self._handler)
        self._installed = False
        logger.debug("Session guard uninstalled")

    def watch_loop(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        """Observe unhandled task exceptions on loop (default: the running loop)."""
        if loop is None:
            loop = asyncio.get_running_loop()
        if any(watched is loop for watched, _ in self._loops):
            return
        previous = loop.get_exception_handler()

        def handler(loop: asyncio.AbstractEventLoop, context: dict[str, Any]) -> None:
            self.observe(context.get("exception") or context.get("message", ""))
            if previous is not None:
                previous(loop, context)
            else:
                loop.default_exception_handler(context)

        loop.set_exception_handler(handler)
        self._loops.append((loop, previous))

    def observe(self, payload: object) -> bool:
        """
        Check one error signal. Returns True only for the call that fired sign-out.

        Never raises: a failure while inspecting the payload is logged at DEBUG.
        """
        try:
            code = session_error_code(payload)
        except Exception:
            logger.debug("Session guard could not inspect %r", type(payload), exc_info=True)
            return False
        if code is None:
            return False
        with self._lock:
            if self._fired:
                return False
            self._fired = True
        logger.warning("Session invalidated (%s); signing out to %s", code, self.login_path)
        try:
            self._on_sign_out(self.login_path)
        except Exception:
            logger.debug("Sign-out callback failed", exc_info=True)
        return True

    def rearm(self) -> None:
        """Allow the next session-invalidating error to sign out again (after a fresh login)."""
        with self._lock:
            was_fired = self._fired
            self._fired = False
        if was_fired:
            logger.debug("Session guard re-armed")

    def _excepthook(self, exc_type: type[BaseException], exc: BaseException, tb: Any) -> None:
        self.observe(exc)
        previous = self._prev_excepthook or sys.__excepthook__
        previous(exc_type, exc, tb)

    def _threading_excepthook(self, args: Any) -> None:
        self.observe(args.exc_value)
        previous = self._prev_threading_excepthook or threading.__excepthook__
        previous(args)


_guard: SessionGuard | None = None
_guard_lock = threading.Lock()


def install_session_guard(on_sign_out: SignOutCallback, login_path: str | None = None) -> SessionGuard:
    """Install the process-wide guard on first call; later calls return the same guard."""
    global _guard
    with _guard_lock:
        if _guard is None:
            _guard = SessionGuard(on_sign_out, login_path=login_path)
            _guard.install()
        return _guard


def uninstall_session_guard() -> None:
    global _guard
    with _guard_lock:
        if _guard is not None:
            _guard.uninstall()
            _guard = None


def rearm_session_guard() -> None:
    """Re-arm the installed guard, if any. Called after a successful login."""
    with _guard_lock:
        guard = _guard
    if guard is not None:
        guard.rearm()


def watch_loop(loop: asyncio.AbstractEventLoop | None = None) -> None:
    """Add loop to the installed guard's watch list."""
    with _guard_lock:
        guard = _guard
    if guard is None:
        raise RuntimeError("install_session_guard() must be called before watch_loop()")
    guard.watch_loop(loop)
