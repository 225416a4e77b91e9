"""
Auth: username/password login against /api/auth.

The backend answers login and register with ``{id, username, email, token}``;
the token is kept on the HttpClient as a bearer token.
"""

from typing import Any

import httpx

from pairchat.errors import AuthError, PairChatError
from pairchat.transport.http import HttpClient


class Auth:
    def __init__(self, http: HttpClient):
        self._http = http

    async def login(self, username: str, password: str) -> dict[str, Any]:
        try:
            result = await self._http.post(
                "/auth/login", {"username": username, "password": password}, authenticated=False,
            )
        except (PairChatError, httpx.HTTPError) as e:
            raise AuthError(f"Failed to log in: {e}") from e
        self._http.set_token(result["token"])
        return result

    async def register(self, username: str, email: str, password: str) -> dict[str, Any]:
        try:
            result = await self._http.post(
                "/auth/register",
                {"username": username, "email": email, "password": password},
                authenticated=False,
            )
        except (PairChatError, httpx.HTTPError) as e:
            raise AuthError(f"Failed to register: {e}") from e
        self._http.set_token(result["token"])
        return result

    async def logout(self) -> None:
        try:
            await self._http.post("/auth/logout")
        except (PairChatError, httpx.HTTPError) as e:
            raise AuthError(f"Failed to log out: {e}") from e
        finally:
            self._http.set_token(None)
