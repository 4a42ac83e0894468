"""Client de bureau d'authentification Cognito."""

__version__ = "0.1.0"
