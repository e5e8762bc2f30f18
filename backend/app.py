"""Flask application factory for the Safety Checklist backend."""
from flask import Flask
import logging
from pathlib import Path
from .models import db, create_backend_tables
from .blueprints import auth, checklists, templates, uploads
from .cli import init_db_command, stats_command
from .logging_config import setup_logging

logger = logging.getLogger(__name__)


def create_app(test_config=None):
    """Flask application factory for the Safety Checklist backend.

    Creates and configures a Flask application instance with:
    - SQLAlchemy database integration
    - Blueprint registration for API endpoints
    - Bearer token authentication
    - CLI command registration

    Args:
        test_config (dict, optional): Configuration overrides for testing

    Returns:
        Flask: Configured Flask application instance
    """
    setup_logging()
    logger.info("Starting Flask application initialization")

    app = Flask(__name__, instance_relative_config=True)

    if test_config is None:
        # Load the instance config, if it exists, when not testing
        if app.config.from_pyfile('config.py', silent=True):
            logger.info("Loaded configuration from instance/config.py")
        else:
            logger.debug("No instance config file found, using defaults")
    else:
        app.config.from_mapping(test_config)
        logger.info("Loaded test configuration")

    Path(app.instance_path).mkdir(parents=True, exist_ok=True)

    if 'SQLALCHEMY_DATABASE_URI' not in app.config:
        app.config['SQLALCHEMY_DATABASE_URI'] = 'sqlite:///checklist_backend.db'
    logger.info(f"Using database URI: {app.config['SQLALCHEMY_DATABASE_URI']}")
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
    app.config.setdefault('MAX_BLUEPRINT_BYTES', 50 * 1024 * 1024)
    app.config.setdefault('MAX_CONTENT_LENGTH', app.config['MAX_BLUEPRINT_BYTES'] + 1024 * 1024)

    db.init_app(app)

    for module in (auth, templates, checklists, uploads):
        app.register_blueprint(module.bp)
    logger.info("API blueprints registered")

    auth.init_auth(app)

    app.cli.add_command(init_db_command)
    app.cli.add_command(stats_command)

    if app.config.get('CREATE_TABLES'):
        with app.app_context():
            create_backend_tables()

    logger.info("Flask application initialization completed successfully")
    return app


if __name__ == '__main__':
    app = create_app()
    app.run(debug=True)
