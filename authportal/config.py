"""Gestion centralisée de la configuration Cognito."""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

DEFAULT_REGION = "us-east-1"
DEFAULT_SESSION_CACHE = ".cognito_session"
_PLACEHOLDER_PREFIX = "YOUR_"


class ConfigError(RuntimeError):
    """Erreur levée lorsque la configuration est invalide."""


@dataclass(frozen=True, slots=True)
class AuthConfig:
    """Paramètres nécessaires pour interagir avec le user pool Cognito.

    Construite une seule fois au démarrage puis passée explicitement au
    contrôleur et au fournisseur d'identité.
    """

    user_pool_id: str
    user_pool_client_id: str
    region: str = DEFAULT_REGION
    cognito_domain: str = ""
    session_cache_path: str = DEFAULT_SESSION_CACHE
    provider_timeout: float | None = None
    log_level: str = "INFO"

    @property
    def oauth_domain(self) -> str | None:
        """Domaine hébergé OAuth, ou None si aucun domaine n'est configuré.

        Purement informatif : journalisé au démarrage, aucun flux OAuth
        hébergé n'est utilisé par le client.
        """
        if not self.cognito_domain:
            return None
        return f"{self.cognito_domain}.auth.{self.region}.amazoncognito.com"

    def credentials_are_configured(self) -> bool:
        """Indique si les identifiants du user pool ont été renseignés."""
        return all(
            value and not value.startswith(_PLACEHOLDER_PREFIX)
            for value in (self.user_pool_id, self.user_pool_client_id)
        )

    def validate(self) -> None:
        """Lève ConfigError si la configuration ne permet pas de joindre Cognito."""
        if not self.credentials_are_configured():
            raise ConfigError(
                "Le user pool Cognito n'est pas configuré. "
                "Définissez USER_POOL_ID et USER_POOL_CLIENT_ID."
            )
        if not self.region:
            raise ConfigError("La région AWS n'est pas configurée. Définissez AWS_REGION.")


def _parse_timeout(raw: str | None) -> float | None:
    if raw is None or not raw.strip():
        return None
    try:
        timeout = float(raw)
    except ValueError as exc:
        raise ConfigError(f"AUTH_PROVIDER_TIMEOUT doit être un nombre, reçu {raw!r}.") from exc
    if timeout <= 0:
        raise ConfigError("AUTH_PROVIDER_TIMEOUT doit être strictement positif.")
    return timeout


def load_config() -> AuthConfig:
    """Charge la configuration Cognito depuis l'environnement."""
    load_dotenv()

    user_pool_id = os.getenv("USER_POOL_ID", "YOUR_USER_POOL_ID")
    client_id = os.getenv("USER_POOL_CLIENT_ID", "YOUR_CLIENT_ID")
    region = os.getenv("AWS_REGION", DEFAULT_REGION)
    domain = os.getenv("COGNITO_DOMAIN", "")

    return AuthConfig(
        user_pool_id=user_pool_id,
        user_pool_client_id=client_id,
        region=region,
        cognito_domain=domain,
        session_cache_path=os.getenv("AUTH_SESSION_CACHE", DEFAULT_SESSION_CACHE),
        provider_timeout=_parse_timeout(os.getenv("AUTH_PROVIDER_TIMEOUT")),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
