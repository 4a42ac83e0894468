"""Interface abstraite du fournisseur d'identité et erreurs associées."""

from __future__ import annotations

from abc import ABC, abstractmethod

from authportal.state import SessionUser


class AuthProviderError(RuntimeError):
    """Erreur générique levée par un fournisseur d'identité.

    ``message`` contient le texte fourni par le fournisseur, affiché tel quel.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidCredentialsError(AuthProviderError):
    """Email ou mot de passe refusé."""


class PolicyViolationError(AuthProviderError):
    """Mot de passe ou paramètre refusé par la politique du user pool."""


class DuplicateUserError(AuthProviderError):
    """Un compte existe déjà pour cet email."""


class InvalidCodeError(AuthProviderError):
    """Code de confirmation incorrect."""


class ExpiredCodeError(AuthProviderError):
    """Code de confirmation expiré."""


class ProviderUnavailableError(AuthProviderError):
    """Fournisseur injoignable ou saturé."""


class UnknownAuthError(AuthProviderError):
    """Erreur du fournisseur qui n'entre dans aucune autre catégorie."""


class AuthProvider(ABC):
    """Opérations attendues d'un fournisseur d'identité."""

    @abstractmethod
    async def get_current_session(self) -> SessionUser | None:
        """Retourne l'utilisateur d'une session existante, ou None."""

    @abstractmethod
    async def sign_in(self, email: str, password: str) -> SessionUser:
        ...

    @abstractmethod
    async def sign_up(self, email: str, password: str) -> None:
        ...

    @abstractmethod
    async def confirm_sign_up(self, email: str, code: str) -> None:
        ...

    @abstractmethod
    async def sign_out(self) -> None:
        """Invalide la session. Les erreurs ne doivent pas bloquer l'appelant."""
