"""Machine à états pilotant le formulaire d'authentification affiché."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from authportal.config import AuthConfig
from authportal.services.provider import (
    AuthProvider,
    AuthProviderError,
    ProviderUnavailableError,
)
from authportal.state import AppState, Credentials, SessionUser, ViewState

logger = logging.getLogger(__name__)

T = TypeVar("T")
Listener = Callable[[], None]


class AuthViewController:
    """Relie les saisies de l'utilisateur au fournisseur d'identité.

    Une seule opération peut être en cours : tant que ``state.busy`` est vrai,
    toute nouvelle soumission est ignorée (pas de file d'attente). Chaque
    méthode ``submit_*`` retourne True si la soumission a été acceptée.
    """

    def __init__(
        self,
        provider: AuthProvider,
        config: AuthConfig,
        state: AppState | None = None,
    ) -> None:
        self._provider = provider
        self._config = config
        self.state = state or AppState()
        self._listeners: list[Listener] = []

    # ------------------------------------------------------------ Abonnés -
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Enregistre un callback appelé après chaque changement d'état."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener()

    # ------------------------------------------------------------- Champs -
    def set_field(self, name: str, value: str) -> None:
        if name not in Credentials.field_names():
            raise ValueError(f"Champ inconnu : {name}")
        setattr(self.state.credentials, name, value)

    def show_sign_up(self) -> None:
        self._navigate(ViewState.SIGN_IN, ViewState.SIGN_UP)

    def show_sign_in(self) -> None:
        self._navigate(ViewState.SIGN_UP, ViewState.SIGN_IN)

    def _navigate(self, source: ViewState, target: ViewState) -> None:
        if self.state.busy or self.state.view is not source:
            return
        self.state.view = target
        self.state.error_message = None
        self._notify()

    # -------------------------------------------------------- Opérations -
    async def initialize(self) -> None:
        """Détermine l'état initial à partir d'une éventuelle session existante."""
        if self.state.busy:
            return
        self._begin()
        try:
            user = await self._with_timeout(self._provider.get_current_session())
        except Exception:  # noqa: BLE001
            logger.info("Aucune session existante n'a pu être restaurée", exc_info=True)
            user = None
        finally:
            self.state.busy = False

        if user is not None:
            self._enter_session(user)
        else:
            self.state.view = ViewState.SIGN_IN
        self._notify()

    async def submit_sign_in(self) -> bool:
        if not self._admit(ViewState.SIGN_IN):
            return False
        email = self.state.credentials.email
        password = self.state.credentials.password

        succeeded, user = await self._attempt(self._provider.sign_in(email, password))
        if succeeded and user is None:
            logger.warning("Le fournisseur n'a renvoyé aucun utilisateur après la connexion")
            self.state.error_message = "Connexion impossible : aucun utilisateur renvoyé."
        elif succeeded:
            if user.email is None:
                user = SessionUser(username=user.username, email=email, user_id=user.user_id)
            self._enter_session(user)
        self._notify()
        return True

    async def submit_sign_up(self) -> bool:
        if not self._admit(ViewState.SIGN_UP):
            return False
        credentials = self.state.credentials

        succeeded, _ = await self._attempt(
            self._provider.sign_up(credentials.email, credentials.password)
        )
        if succeeded:
            self.state.view = ViewState.CONFIRM_SIGN_UP
        self._notify()
        return True

    async def submit_confirmation(self) -> bool:
        if not self._admit(ViewState.CONFIRM_SIGN_UP):
            return False
        credentials = self.state.credentials

        succeeded, _ = await self._attempt(
            self._provider.confirm_sign_up(credentials.email, credentials.verification_code)
        )
        if succeeded:
            self.state.view = ViewState.SIGN_IN
            credentials.clear()
        self._notify()
        return True

    async def sign_out(self) -> bool:
        """Déconnecte l'utilisateur.

        Un échec du fournisseur est journalisé mais n'est jamais affiché : la
        session locale est abandonnée dans tous les cas.
        """
        if not self._admit(ViewState.AUTHENTICATED):
            return False
        try:
            await self._with_timeout(self._provider.sign_out())
        except Exception:  # noqa: BLE001
            logger.warning("Échec de la déconnexion, session locale abandonnée", exc_info=True)
        finally:
            self.state.busy = False

        self.state.reset()
        self._notify()
        return True

    # ------------------------------------------------------------- Interne -
    def _admit(self, expected: ViewState) -> bool:
        if self.state.busy or self.state.view is not expected:
            return False
        self._begin()
        return True

    def _begin(self) -> None:
        self.state.error_message = None
        self.state.busy = True
        self._notify()

    async def _attempt(self, call: Awaitable[T]) -> tuple[bool, T | None]:
        """Attend l'appel au fournisseur et mémorise son message d'erreur."""
        try:
            result = await self._with_timeout(call)
        except AuthProviderError as exc:
            self.state.error_message = exc.message or exc.__class__.__name__
            return False, None
        except Exception as exc:  # noqa: BLE001
            logger.exception("Erreur inattendue du fournisseur d'identité")
            self.state.error_message = str(exc) or exc.__class__.__name__
            return False, None
        finally:
            self.state.busy = False
        return True, result

    async def _with_timeout(self, call: Awaitable[T]) -> T:
        timeout = self._config.provider_timeout
        if timeout is None:
            return await call
        try:
            return await asyncio.wait_for(call, timeout)
        except asyncio.TimeoutError as exc:
            raise ProviderUnavailableError(
                f"Le fournisseur d'identité n'a pas répondu en {timeout:g} s."
            ) from exc

    def _enter_session(self, user: SessionUser) -> None:
        self.state.session_user = user
        self.state.view = ViewState.AUTHENTICATED
