# lotbook/__init__.py

from flask import Flask
from .config import Config
from .extensions import db, migrate
from .utils.logging import configure_logging

def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    # Extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Models must be imported before migrations/create_all see the metadata
    from . import models  # noqa: F401

    # Blueprints
    from .blueprints.api.routes import api_bp
    from .blueprints.health.routes import health_bp

    app.register_blueprint(api_bp, url_prefix="/api")
    app.register_blueprint(health_bp, url_prefix="/health")

    return app
