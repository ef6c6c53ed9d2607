"""Synchronous httpx client for the roster API."""

import logging
from typing import Any

import httpx

from roster.client.session_guard import rearm_session_guard
from roster.core.config import get_settings

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class ApiError(Exception):
    """
    Non-2xx response from the API.

    code is the structured error code from the response body, when present.
    str() keeps the "[CODE] detail" form so the code survives text-only channels.
    """

    def __init__(self, status_code: int, code: str | None, detail: str) -> None:
        self.status_code = status_code
        self.code = code
        self.detail = detail
        super().__init__(detail)

    def __str__(self) -> str:
        if self.code:
            return f"[{self.code}] {self.detail}"
        return self.detail


def _error_from_response(response: httpx.Response) -> ApiError:
    code = None
    detail = response.text or response.reason_phrase
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        code = body.get("code") if isinstance(body.get("code"), str) else None
        if isinstance(body.get("detail"), str):
            detail = body["detail"]
        elif body.get("detail") is not None:
            detail = str(body["detail"])
    return ApiError(response.status_code, code, detail)


class RosterClient:
    """
    Holds the bearer token and calls the v1 API.

    base_url includes the API prefix, e.g. "https://roster.example/api/v1".
    """

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
        login_path: str | None = None,
    ) -> None:
        self.token = token
        self.login_path = login_path or get_settings().LOGIN_PATH
        # Set by sign_out; a UI layer navigates here.
        self.redirect_to: str | None = None
        self._client = httpx.Client(
            base_url=base_url,
            timeout=httpx.Timeout(timeout, connect=10.0),
            transport=transport,
        )

    def __enter__(self) -> "RosterClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def request(self, method: str, path: str, **kwargs: Any) -> Any:
        """Send a request; return the decoded JSON body or raise ApiError."""
        headers = dict(kwargs.pop("headers", None) or {})
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        response = self._client.request(method, path, headers=headers, **kwargs)
        if response.is_error:
            err = _error_from_response(response)
            logger.debug("API error: %s %s -> %s", method, path, err)
            raise err
        if not response.content:
            return None
        return response.json()

    def login(self, call_sign: str, password: str) -> dict[str, Any]:
        """Store the new token and re-arm the session guard for the new session."""
        body = self.request("POST", "/auth", json={"call_sign": call_sign, "password": password})
        self.token = body["access_token"]
        self.redirect_to = None
        rearm_session_guard()
        return body

    def sign_out(self, login_path: str | None = None) -> str:
        """
        Tell the server, drop the token and record where to send the user.

        Safe to call with a token the server no longer accepts. Returns the
        redirect target.
        """
        if self.token:
            try:
                self.request("POST", "/auth/logout")
            except (ApiError, httpx.HTTPError) as e:
                logger.info("Logout call failed, clearing local session anyway: %s", e)
        self.token = None
        self.redirect_to = login_path or self.login_path
        return self.redirect_to

    def me(self) -> dict[str, Any]:
        return self.request("GET", "/auth/me")

    def change_password(self, current_password: str, new_password: str) -> dict[str, Any]:
        return self.request(
            "POST",
            "/auth/change-password",
            json={"current_password": current_password, "new_password": new_password},
        )

    def reset_user_password(self, personnel_id: int) -> str:
        """Super admin only. Returns the temporary password."""
        body = self.request("POST", f"/users/{personnel_id}/reset-password")
        return body["temporary_password"]

    def list_roles(self) -> list[dict[str, Any]]:
        return self.request("GET", "/roles")

    def get_user_roles(self, personnel_id: int) -> list[dict[str, Any]]:
        return self.request("GET", f"/users/{personnel_id}/roles")

    def update_user_roles(self, personnel_id: int, roles: list[str]) -> list[str]:
        body = self.request("PUT", f"/users/{personnel_id}/roles", json={"roles": roles})
        return body["roles"]

    def can_manage_school(self, school_id: int) -> bool:
        return bool(self.request("GET", f"/schools/{school_id}/can-manage")["allowed"])

    def can_award_qualification(self, qualification_id: int) -> bool:
        return bool(self.request("GET", f"/qualifications/{qualification_id}/can-award")["allowed"])

    def award_qualification(
        self,
        personnel_id: int,
        qualification_id: int,
        awarded_date: str,
        expiry_date: str | None = None,
        notes: str | None = None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "personnel_id": personnel_id,
            "qualification_id": qualification_id,
            "awarded_date": awarded_date,
        }
        if expiry_date is not None:
            payload["expiry_date"] = expiry_date
        if notes is not None:
            payload["notes"] = notes
        return self.request("POST", "/qualifications/award", json=payload)
