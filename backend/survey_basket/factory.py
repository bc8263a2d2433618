"""Application factory wiring Flask extensions and blueprints."""

from __future__ import annotations

from flask import Flask

from survey_basket.core.config import BaseConfig, finalize_auth_settings, get_config
from survey_basket.core.logger import configure_logging, init_app as init_logging


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
) -> Flask:
    """Build and configure the Flask application.

    :raises ConfigurationError: When the auth settings are missing or invalid
        (e.g. an empty ``JWT_SECRET_KEY``).
    """

    app = Flask(__name__, instance_relative_config=instance_relative_config)

    app.config.from_object(get_config() if config is None else config)
    if instance_relative_config and instance_config_filename:
        app.config.from_pyfile(instance_config_filename, silent=True)

    # Fail fast before any extension reads the JWT settings.
    finalize_auth_settings(app.config)

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    from survey_basket.core import proxy

    proxy.init_app(app)

    from survey_basket.core import extensions

    extensions.init_app(app)

    init_logging(app)

    from survey_basket.core import cors

    cors.init_app(app)

    from survey_basket.api import init_app as init_api

    init_api(app)

    from survey_basket.core import errors

    errors.init_app(app)

    from survey_basket import cli as app_cli

    app_cli.init_app(app)

    return app
