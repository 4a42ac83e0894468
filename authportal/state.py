"""Structures de données partagées entre la couche UI et les services."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum


class ViewState(str, Enum):
    """Formulaire actuellement affiché."""

    SIGN_IN = "signIn"
    SIGN_UP = "signUp"
    CONFIRM_SIGN_UP = "confirmSignUp"
    AUTHENTICATED = "authenticated"


@dataclass(slots=True)
class Credentials:
    """Valeurs saisies dans les formulaires d'authentification."""

    email: str = ""
    password: str = ""
    confirm_password: str = ""
    verification_code: str = ""

    @classmethod
    def field_names(cls) -> tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    def clear(self) -> None:
        """Vide tous les champs."""
        for name in self.field_names():
            setattr(self, name, "")

    def is_empty(self) -> bool:
        return not any(getattr(self, name) for name in self.field_names())


@dataclass(frozen=True, slots=True)
class SessionUser:
    """Utilisateur connecté tel que renvoyé par le fournisseur d'identité."""

    username: str
    email: str | None
    user_id: str


@dataclass(slots=True)
class AppState:
    """État interne de l'application."""

    view: ViewState = ViewState.SIGN_IN
    credentials: Credentials = field(default_factory=Credentials)
    session_user: SessionUser | None = None
    error_message: str | None = None
    busy: bool = False

    @property
    def is_authenticated(self) -> bool:
        """Retourne True si l'utilisateur est authentifié."""
        return self.view is ViewState.AUTHENTICATED and self.session_user is not None

    def reset(self) -> None:
        """Réinitialise l'état de l'application sur le formulaire de connexion."""
        self.view = ViewState.SIGN_IN
        self.credentials.clear()
        self.session_user = None
        self.error_message = None
