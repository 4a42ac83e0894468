"""Configuration de la journalisation.

Ne jamais journaliser de mot de passe, de code de confirmation ou de jeton.
Les adresses email passent par ``mask_email``.
"""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def mask_email(email: str | None) -> str:
    """Masque une adresse email pour la journalisation.

    >>> mask_email("john.doe@example.com")
    'jo***@***.com'
    >>> mask_email("a@b.co")
    'a***@***.co'
    """
    if not email or "@" not in email:
        return "***"

    local, domain = email.rsplit("@", 1)
    domain_parts = domain.rsplit(".", 1)
    visible_local = local[:2] if len(local) > 2 else local[:1]
    tld = domain_parts[-1] if len(domain_parts) > 1 else ""

    return f"{visible_local}***@***.{tld}" if tld else f"{visible_local}***@***"


def configure_logging(level: str = "INFO") -> None:
    """Installe un unique handler console sur le logger racine."""
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    # botocore est très bavard en DEBUG
    logging.getLogger("botocore").setLevel(logging.WARNING)
