from authportal.services.cognito_client import CognitoAuthProvider
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

__all__ = [
    "AuthProvider",
    "AuthProviderError",
    "CognitoAuthProvider",
    "DuplicateUserError",
    "ExpiredCodeError",
    "InvalidCodeError",
    "InvalidCredentialsError",
    "PolicyViolationError",
    "ProviderUnavailableError",
    "UnknownAuthError",
]
