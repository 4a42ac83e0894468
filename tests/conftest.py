"""Fixtures partagées par les tests."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from authportal.config import AuthConfig
from authportal.controller import AuthViewController
from authportal.services.provider import AuthProvider
from authportal.state import SessionUser


class FakeAuthProvider(AuthProvider):
    """Fournisseur en mémoire : enregistre les appels et renvoie les résultats préparés.

    ``outcomes`` associe un nom d'opération à une valeur de retour ou à une
    exception à lever. ``gate`` permet de suspendre les appels jusqu'à ce que
    le test le libère.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.outcomes: dict[str, Any] = {}
        self.gate: asyncio.Event | None = None

    async def _respond(self, operation: str, *args: Any) -> Any:
        self.calls.append((operation, args))
        if self.gate is not None:
            await self.gate.wait()
        outcome = self.outcomes.get(operation)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    def count(self, operation: str) -> int:
        return sum(1 for name, _ in self.calls if name == operation)

    async def get_current_session(self) -> SessionUser | None:
        return await self._respond("get_current_session")

    async def sign_in(self, email: str, password: str) -> SessionUser:
        return await self._respond("sign_in", email, password)

    async def sign_up(self, email: str, password: str) -> None:
        await self._respond("sign_up", email, password)

    async def confirm_sign_up(self, email: str, code: str) -> None:
        await self._respond("confirm_sign_up", email, code)

    async def sign_out(self) -> None:
        await self._respond("sign_out")


@pytest.fixture
def auth_config() -> AuthConfig:
    return AuthConfig(
        user_pool_id="us-east-1_TestPool",
        user_pool_client_id="test-client-id",
        region="us-east-1",
    )


@pytest.fixture
def provider() -> FakeAuthProvider:
    return FakeAuthProvider()


@pytest.fixture
def controller(provider: FakeAuthProvider, auth_config: AuthConfig) -> AuthViewController:
    return AuthViewController(provider, auth_config)


@pytest.fixture
def session_user() -> SessionUser:
    return SessionUser(username="a@b.com", email="a@b.com", user_id="u1")
