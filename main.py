"""Point d'entrée de l'application Auth Portal."""

from __future__ import annotations

import logging

from authportal.config import ConfigError, load_config
from authportal.controller import AuthViewController
from authportal.logs import configure_logging
from authportal.services import CognitoAuthProvider
from authportal.ui.app import MainWindow

logger = logging.getLogger("authportal")


def main() -> None:
    """Initialise les dépendances puis lance l'interface Tkinter."""
    config = load_config()
    configure_logging(config.log_level)
    logger.debug(
        "Configuration Cognito : region=%s user_pool_id=%s client_id=%s domain=%s",
        config.region,
        config.user_pool_id,
        config.user_pool_client_id,
        config.oauth_domain,
    )

    warning = None
    try:
        config.validate()
    except ConfigError as exc:
        logger.warning("%s", exc)
        warning = str(exc)

    provider = CognitoAuthProvider(config)
    controller = AuthViewController(provider, config)
    app = MainWindow(controller, config_warning=warning)
    app.run()


if __name__ == "__main__":
    main()
