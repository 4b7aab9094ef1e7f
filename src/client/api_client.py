"""
HTTP client for the session endpoints.

Attaches the session and device headers to every call and feeds login,
heartbeat and rejection results into the SessionMirror.
"""

import logging
from typing import Any, Callable, Dict, Optional

import httpx

from config import ApplicationConfig
from src.client.local_store import LocalStore
from src.client.mirror import SessionMirror

logger = logging.getLogger(__name__)


class SessionApiError(Exception):
    def __init__(self, status_code: int, code: Optional[str], message: str):
        self.status_code = status_code
        self.code = code
        self.message = message
        super().__init__(f"{status_code} {code}: {message}")


class SessionApiClient:
    """One tab's connection to the session service."""

    def __init__(
        self,
        base_url: str,
        store: LocalStore,
        device_id: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        on_forced_logout: Optional[Callable[[str], None]] = None,
        timeout: float = 10.0,
    ):
        self.store = store
        self.device_id = device_id
        self.on_forced_logout = on_forced_logout
        self.access_token: Optional[str] = None
        self.session_token: Optional[str] = None
        self.heartbeat_interval_seconds = ApplicationConfig.HEARTBEAT_INTERVAL_SECONDS
        self.mirror: Optional[SessionMirror] = None
        self._http = httpx.AsyncClient(base_url=base_url, transport=transport, timeout=timeout)

    def headers(self) -> Dict[str, str]:
        headers = {}
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"
        if self.session_token:
            headers[ApplicationConfig.SESSION_HEADER] = self.session_token
        if self.device_id:
            headers[ApplicationConfig.DEVICE_HEADER] = self.device_id
        return headers

    def may_continue(self) -> bool:
        return self.mirror is not None and self.mirror.may_continue()

    async def login(self, username: str, password: str) -> Dict[str, Any]:
        data = await self._call(
            "POST", "/auth/login", json={"username": username, "password": password}
        )
        session = data["session"]
        self.access_token = data["access_token"]
        self.session_token = session["session_token"]
        self.heartbeat_interval_seconds = session["heartbeat_interval_seconds"]

        if self.mirror is not None:
            self.mirror.close()
        self.mirror = SessionMirror(
            self.store,
            account_id=data["account"]["id"],
            limit=session["limit"],
            ttl_seconds=session["ttl_seconds"],
            on_forced_logout=self._forced_logout,
        )
        self.mirror.record_login(self.session_token, session["evicted_tokens"])
        return data

    async def heartbeat(self) -> bool:
        data = await self._call("POST", "/sessions/heartbeat")
        if self.mirror is not None:
            self.mirror.record_heartbeat(data["alive"])
        return data["alive"]

    async def validate(self) -> Dict[str, Any]:
        return await self._call("GET", "/sessions/validate")

    async def logout(self) -> None:
        try:
            if self.access_token:
                await self._call("POST", "/auth/logout")
        finally:
            if self.mirror is not None:
                self.mirror.logout()
            self._clear()

    async def request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        """Any gated call; a session rejection ends the local session."""
        return await self._call(method, path, **kwargs)

    async def aclose(self) -> None:
        if self.mirror is not None:
            self.mirror.close()
        await self._http.aclose()

    async def _call(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        response = await self._http.request(method, path, headers=self.headers(), **kwargs)

        healed = response.headers.get(ApplicationConfig.SESSION_HEADER)
        if healed and healed != self.session_token:
            logger.warning("Server assigned session %s... to this client", healed[:8])
            self.session_token = healed

        if response.is_success:
            return response.json()

        code, message = _error_of(response)
        if self.mirror is not None:
            self.mirror.record_rejection(response.status_code, code)
        raise SessionApiError(response.status_code, code, message)

    def _forced_logout(self, reason: str) -> None:
        self._clear()
        if self.on_forced_logout is not None:
            self.on_forced_logout(reason)

    def _clear(self) -> None:
        self.access_token = None
        self.session_token = None


def _error_of(response: httpx.Response):
    try:
        body = response.json()
    except ValueError:
        return None, response.text
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        return body["error"].get("code"), body["error"].get("message", "")
    if isinstance(body, dict):
        return None, str(body.get("detail", ""))
    return None, response.text
