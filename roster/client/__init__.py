"""Python client for the roster API and the stale-session safety net."""

from roster.client.api_client import ApiError, RosterClient
from roster.client.session_guard import (
    SessionGuard,
    install_session_guard,
    rearm_session_guard,
    session_error_code,
    uninstall_session_guard,
    watch_loop,
)

__all__ = [
    "ApiError",
    "RosterClient",
    "SessionGuard",
    "install_session_guard",
    "rearm_session_guard",
    "session_error_code",
    "uninstall_session_guard",
    "watch_loop",
]
