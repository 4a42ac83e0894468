"""Encapsulation des appels au user pool Cognito."""

from __future__ import annotations

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Any

import boto3
from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectionClosedError,
    ConnectTimeoutError,
    EndpointConnectionError,
    ReadTimeoutError,
)

from authportal.config import AuthConfig
from authportal.logs import mask_email
from authportal.services.provider import (
    AuthProvider,
    AuthProviderError,
    DuplicateUserError,
    ExpiredCodeError,
    InvalidCodeError,
    InvalidCredentialsError,
    PolicyViolationError,
    ProviderUnavailableError,
    UnknownAuthError,
)
from authportal.state import SessionUser

logger = logging.getLogger(__name__)

_ERRORS_BY_CODE: dict[str, type[AuthProviderError]] = {
    "NotAuthorizedException": InvalidCredentialsError,
    "UserNotFoundException": InvalidCredentialsError,
    "UserNotConfirmedException": InvalidCredentialsError,
    "InvalidPasswordException": PolicyViolationError,
    "InvalidParameterException": PolicyViolationError,
    "UsernameExistsException": DuplicateUserError,
    "CodeMismatchException": InvalidCodeError,
    "ExpiredCodeException": ExpiredCodeError,
    "TooManyRequestsException": ProviderUnavailableError,
    "LimitExceededException": ProviderUnavailableError,
    "InternalErrorException": ProviderUnavailableError,
}

_NETWORK_ERRORS = (
    EndpointConnectionError,
    ConnectionClosedError,
    ConnectTimeoutError,
    ReadTimeoutError,
)


def translate_client_error(exc: ClientError) -> AuthProviderError:
    """Convertit une erreur Cognito en erreur de la taxonomie locale."""
    error = exc.response.get("Error", {})
    code = error.get("Code", "")
    message = error.get("Message") or str(exc)
    return _ERRORS_BY_CODE.get(code, UnknownAuthError)(message)


class CognitoAuthProvider(AuthProvider):
    """Fournisseur d'identité adossé à un user pool Cognito.

    Les appels boto3 sont bloquants : ils sont exécutés dans un thread via
    ``asyncio.to_thread``. Le refresh token est conservé dans un fichier cache
    pour retrouver la session au prochain lancement.
    """

    def __init__(
        self,
        config: AuthConfig,
        *,
        client: Any | None = None,
        cache_path: str | None = None,
    ) -> None:
        self._config = config
        self._cache_path = Path(cache_path or config.session_cache_path)
        self._client = client or boto3.client("cognito-idp", region_name=config.region)
        self._access_token: str | None = None

    # ------------------------------------------------------------ Opérations -
    async def get_current_session(self) -> SessionUser | None:
        cached = self._read_cache()
        if cached is None:
            return None

        try:
            response = await self._call(
                "initiate_auth",
                AuthFlow="REFRESH_TOKEN_AUTH",
                ClientId=self._config.user_pool_client_id,
                AuthParameters={"REFRESH_TOKEN": cached["refresh_token"]},
            )
        except InvalidCredentialsError:
            logger.info("Session en cache refusée par Cognito, suppression du cache")
            self._remove_cache()
            return None

        access_token = response["AuthenticationResult"]["AccessToken"]
        user = await self._resolve_user(access_token)
        self._access_token = access_token
        return user

    async def sign_in(self, email: str, password: str) -> SessionUser:
        response = await self._call(
            "initiate_auth",
            AuthFlow="USER_PASSWORD_AUTH",
            ClientId=self._config.user_pool_client_id,
            AuthParameters={"USERNAME": email, "PASSWORD": password},
        )

        challenge = response.get("ChallengeName")
        if challenge:
            raise UnknownAuthError(f"Étape d'authentification non prise en charge : {challenge}")

        result = response["AuthenticationResult"]
        access_token = result["AccessToken"]
        user = await self._resolve_user(access_token, fallback_email=email)
        self._access_token = access_token

        refresh_token = result.get("RefreshToken")
        if refresh_token:
            self._write_cache(username=user.username, refresh_token=refresh_token)

        logger.info("Connexion de %s", mask_email(email))
        return user

    async def sign_up(self, email: str, password: str) -> None:
        response = await self._call(
            "sign_up",
            ClientId=self._config.user_pool_client_id,
            Username=email,
            Password=password,
            UserAttributes=[{"Name": "email", "Value": email}],
        )
        logger.info(
            "Inscription de %s (confirmé=%s)",
            mask_email(email),
            response.get("UserConfirmed"),
        )

    async def confirm_sign_up(self, email: str, code: str) -> None:
        await self._call(
            "confirm_sign_up",
            ClientId=self._config.user_pool_client_id,
            Username=email,
            ConfirmationCode=code,
        )
        logger.info("Compte %s confirmé", mask_email(email))

    async def sign_out(self) -> None:
        """Invalide les jetons côté Cognito puis supprime la session locale.

        La session locale est supprimée même si l'appel distant échoue.
        """
        access_token, self._access_token = self._access_token, None
        try:
            if access_token:
                await self._call("global_sign_out", AccessToken=access_token)
        finally:
            self._remove_cache()

    # ------------------------------------------------------------- Interne -
    async def _call(self, operation: str, **params: Any) -> dict[str, Any]:
        method = getattr(self._client, operation)
        try:
            return await asyncio.to_thread(method, **params)
        except ClientError as exc:
            raise translate_client_error(exc) from exc
        except _NETWORK_ERRORS as exc:
            raise ProviderUnavailableError(str(exc)) from exc
        except BotoCoreError as exc:
            raise UnknownAuthError(str(exc)) from exc

    async def _resolve_user(
        self, access_token: str, *, fallback_email: str | None = None
    ) -> SessionUser:
        response = await self._call("get_user", AccessToken=access_token)
        attributes = {
            attribute["Name"]: attribute["Value"]
            for attribute in response.get("UserAttributes", [])
        }
        username = response["Username"]
        return SessionUser(
            username=username,
            email=attributes.get("email") or fallback_email,
            user_id=attributes.get("sub", username),
        )

    def _read_cache(self) -> dict[str, str] | None:
        try:
            data = json.loads(self._cache_path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except (OSError, ValueError):
            logger.warning("Cache de session illisible %s, suppression", self._cache_path)
            self._remove_cache()
            return None

        if not isinstance(data, dict) or not data.get("refresh_token"):
            logger.warning("Cache de session invalide %s, suppression", self._cache_path)
            self._remove_cache()
            return None
        return data

    def _write_cache(self, *, username: str, refresh_token: str) -> None:
        payload = json.dumps({"username": username, "refresh_token": refresh_token})
        try:
            self._remove_cache()
            descriptor = os.open(self._cache_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(descriptor, "w", encoding="utf-8") as handle:
                handle.write(payload)
        except OSError:
            logger.warning("Impossible d'écrire le cache de session %s", self._cache_path, exc_info=True)

    def _remove_cache(self) -> None:
        try:
            os.remove(self._cache_path)
        except FileNotFoundError:
            pass
