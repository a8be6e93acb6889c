"""
Session lifecycle — OTP, password login, registration, logout.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from storesync.domain import AuthSession, User, user_from_remote
from storesync.remote import E, RemoteResult, Requests
from storesync.store import LocalState

logger = logging.getLogger(__name__)


class SessionManager:
    """
    Creates and destroys the device session.

    A successful login stores the token first, then resolves the profile
    from `/me` (falling back to whatever user data the login response carried).

    Example:
        sessions = SessionManager(requests, state)
        await sessions.generate_otp("+911234567890")
        result = await sessions.verify_otp("+911234567890", "123456")
        if result.success:
            session = result.data
    """

    def __init__(self, requests: Requests, state: LocalState) -> None:
        self._requests = requests
        self._state = state

    async def current(self) -> AuthSession | None:
        return await self._state.session()

    async def generate_otp(self, phone_number: str) -> RemoteResult[Any]:
        result = await self._requests.post(E.Auth.GENERATE_OTP, {"identifier": phone_number})
        if not result.success:
            logger.warning("Failed to generate OTP: %s", result.error)
        return result

    async def verify_otp(self, phone_number: str, code: str) -> RemoteResult[AuthSession]:
        result = await self._requests.post(
            E.Auth.VERIFY_OTP, {"identifier": phone_number, "code": code}
        )
        return await self._establish(result, {"phoneNumber": phone_number})

    async def login(self, email: str, password: str) -> RemoteResult[AuthSession]:
        result = await self._requests.post(E.Auth.LOGIN, {"email": email, "password": password})
        return await self._establish(result, {"email": email})

    async def register(self, registration: Mapping[str, Any]) -> RemoteResult[Any]:
        """Register; when the server answers with a token the session starts at once."""
        result = await self._requests.post(E.Auth.REGISTER, dict(registration))
        if result.success and _token(result.data):
            return await self._establish(result, registration)
        return result

    async def create_manager(self, registration: Mapping[str, Any]) -> RemoteResult[Any]:
        """Bootstrap the first administrative account. Never carries a token."""
        return await self._requests.post(E.Auth.CREATE_MANAGER, dict(registration))

    async def fetch_current_user(self) -> User | None:
        result = await self._requests.get(E.Auth.ME)
        if not result.success or not isinstance(result.data, Mapping):
            logger.warning("Could not load current user: %s", result.error)
            return None
        user = user_from_remote(result.data)
        if user is not None:
            await self._state.save_user(user)
        return user

    async def logout(self) -> None:
        await self._state.clear_session()
        logger.info("Session cleared")

    async def _establish(
        self,
        result: RemoteResult[Any],
        identity: Mapping[str, Any],
    ) -> RemoteResult[AuthSession]:
        if not result.success:
            return result
        token = _token(result.data)
        if not token:
            return RemoteResult.invalid("Sign-in did not return a session token.")

        await self._state.save_token(token)

        user = await self.fetch_current_user()
        if user is None:
            data = result.data if isinstance(result.data, Mapping) else {}
            embedded = data.get("user")
            source = embedded if isinstance(embedded, Mapping) else data
            user = user_from_remote({**identity, **source})
            if user is None:
                await self._state.clear_session()
                return RemoteResult.invalid("Sign-in did not identify a user.")
            await self._state.save_user(user)

        logger.info("Session established for user %s", user.id)
        return RemoteResult.ok(AuthSession(user=user, token=token), status=result.status)


def _token(data: Any) -> str | None:
    if isinstance(data, Mapping):
        token = data.get("token")
        if isinstance(token, str) and token:
            return token
    return None


__all__ = ("SessionManager",)
