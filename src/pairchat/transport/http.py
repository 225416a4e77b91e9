"""
REST HTTP client for the chat backend.

Every route lives under ``<base_url>/api``. Error responses carry a JSON
body of the form ``{"message": "..."}``; its text is kept on the raised
HttpError as ``server_message``.
"""

from typing import Any, Optional

import httpx

from pairchat.config import DEFAULT_BASE_URL
from pairchat.errors import HttpError


class HttpClient:
    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 30.0,
    ):
        self._base_url = base_url.rstrip("/")
        self._token = token
        self._client = httpx.AsyncClient(
            base_url=f"{self._base_url}/api",
            headers={"User-Agent": "pairchat/0.1.0", "Accept": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def token(self) -> Optional[str]:
        return self._token

    def set_token(self, token: Optional[str]) -> None:
        self._token = token

    def _auth_headers(self, authenticated: bool) -> dict[str, str]:
        headers: dict[str, str] = {"Content-Type": "application/json"}
        if authenticated and self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    @staticmethod
    def _check(resp: httpx.Response) -> Any:
        if resp.status_code >= 400:
            server_message = None
            try:
                body = resp.json()
            except ValueError:
                body = None
            if isinstance(body, dict) and isinstance(body.get("message"), str):
                server_message = body["message"]
            raise HttpError(
                resp.status_code,
                f"HTTP {resp.status_code}: {server_message or resp.text[:200]}",
                server_message=server_message,
            )
        if not resp.content:
            return None
        return resp.json()

    async def get(self, path: str, authenticated: bool = True) -> Any:
        resp = await self._client.get(path, headers=self._auth_headers(authenticated))
        return self._check(resp)

    async def post(self, path: str, body: Optional[dict[str, Any]] = None, authenticated: bool = True) -> Any:
        resp = await self._client.post(path, json=body, headers=self._auth_headers(authenticated))
        return self._check(resp)

    async def close(self) -> None:
        await self._client.aclose()
