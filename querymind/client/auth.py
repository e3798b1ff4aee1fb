"""Boundary to the external authentication provider.

QueryMind does not implement authentication. A provider (hosted auth
service, SSO bridge, ...) is plugged in through the AuthProvider protocol;
AuthState tracks the signed-in user for the UI.
"""

import logging
from typing import Protocol

from pydantic import BaseModel

logger = logging.getLogger(__name__)


class AuthUser(BaseModel):
    id: str
    email: str


class AuthResult(BaseModel):
    """Outcome of an auth operation."""

    success: bool
    error: str | None = None
    user: AuthUser | None = None


class AuthProvider(Protocol):
    async def sign_in(self, email: str, password: str) -> AuthResult: ...

    async def sign_up(self, email: str, password: str) -> AuthResult: ...

    async def sign_out(self) -> AuthResult: ...

    async def current_user(self) -> AuthUser | None: ...


class AuthState:
    """Current user as seen by the UI, with a loading flag.

    ``loading`` is True until the first lookup finishes and while an
    operation is running.
    """

    def __init__(self, provider: AuthProvider) -> None:
        self._provider = provider
        self.user: AuthUser | None = None
        self.loading = True

    async def refresh(self) -> AuthUser | None:
        self.loading = True
        try:
            self.user = await self._provider.current_user()
        finally:
            self.loading = False
        return self.user

    async def sign_in(self, email: str, password: str) -> AuthResult:
        return await self._run("sign_in", self._provider.sign_in(email, password))

    async def sign_up(self, email: str, password: str) -> AuthResult:
        return await self._run("sign_up", self._provider.sign_up(email, password))

    async def sign_out(self) -> AuthResult:
        result = await self._run("sign_out", self._provider.sign_out())
        if result.success:
            self.user = None
        return result

    async def _run(self, operation: str, pending) -> AuthResult:
        self.loading = True
        try:
            result = await pending
        finally:
            self.loading = False
        if result.success and result.user is not None:
            self.user = result.user
        if not result.success:
            logger.warning(f"Auth {operation} failed: {result.error}")
        return result


def get_initials(name: str) -> str:
    """Up to two uppercase initials, one per space-separated part."""
    return "".join(part[0] for part in name.split(" ") if part).upper()[:2]


def extract_name_from_email(email: str) -> str:
    """Turn ``jane.doe@example.com`` into ``Jane Doe``."""
    local_part = email.split("@")[0]
    parts = local_part.replace("_", ".").replace("-", ".").split(".")
    return " ".join(part[:1].upper() + part[1:].lower() for part in parts)
