"""Flask application factory."""

import os

from flask import Flask

from .config import config
from .extensions import db, migrate, login_manager
from .utils.logging import configure_logging, get_logger

logger = get_logger(__name__)


def create_app(config_name=None):
    """Create and configure the Flask application."""
    if config_name is None:
        config_name = os.environ.get('FLASK_CONFIG', 'development')

    app = Flask(__name__)
    app.config.from_object(config[config_name])
    configure_logging(app.config['LOG_LEVEL'])

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)

    # Principal from the bearer token on every request
    from .errors import AuthenticationError, register_error_handlers
    from .utils.identity import load_principal

    login_manager.request_loader(load_principal)

    @login_manager.unauthorized_handler
    def unauthorized():
        raise AuthenticationError()

    register_error_handlers(app)

    # Register blueprints
    from .routes import register_blueprints
    register_blueprints(app)

    from .cli import register_commands
    register_commands(app)

    logger.info("Storefront API started with %s config", config_name)
    return app
