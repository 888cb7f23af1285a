import logging

from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from .config import Config, TestingConfig

# Initialize SQLAlchemy outside the create_app function
db = SQLAlchemy()

logger = logging.getLogger(__name__)


def create_app(config_class=Config, config_name=None):
    # map friendly names to classes
    if config_name:
        if config_name == 'testing':
            config_class = TestingConfig
        else:
            config_class = config_name   # allow import path string fallback

    app = Flask(__name__)
    app.config.from_object(config_class)

    logging.basicConfig(
        level=app.config.get('LOG_LEVEL', 'INFO'),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    db.init_app(app)

    from .routes import register_blueprints
    register_blueprints(app)

    from .errors import register_error_handlers
    register_error_handlers(app)

    # Models must be imported before create_all so the tables are known
    from . import models

    with app.app_context():
        db.create_all()

    logger.info("Sternkern app created with %s", getattr(config_class, '__name__', config_class))
    return app
