# backend/cargobid/__init__.py
from datetime import timedelta

from flask import Flask, jsonify, request
from sqlalchemy.exc import OperationalError
from werkzeug.exceptions import HTTPException

from .config import Config, validate_config
from .extensions import db, migrate
from .services.concurrency import StorageUnavailableError


def create_app(config_overrides: dict | None = None) -> Flask:
    """
    Build the application.

    Raises ConfigurationError (before any route is registered) when
    DATABASE_URL, SESSION_SECRET or JWT_SECRET is missing.
    """
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)

    validate_config(app.config)

    app.config["PERMANENT_SESSION_LIFETIME"] = timedelta(
        hours=app.config["SESSION_LIFETIME_HOURS"]
    )
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Register blueprints
    from .routes.system import system_bp
    from .routes.auth import auth_bp
    from .routes.companies import companies_bp, carriers_bp
    from .routes.addresses import addresses_bp
    from .routes.quotes import quotes_bp
    from .routes.bids import bids_bp
    from .routes.audit import audit_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(companies_bp)
    app.register_blueprint(carriers_bp)
    app.register_blueprint(addresses_bp)
    app.register_blueprint(quotes_bp)
    app.register_blueprint(bids_bp)
    app.register_blueprint(audit_bp)

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        if origin in app.config.get("CORS_ORIGINS", []):
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Access-Control-Allow-Credentials"] = "true"
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,DELETE,PATCH,OPTIONS"
        return response

    register_error_handlers(app)

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app


def register_error_handlers(app: Flask) -> None:
    """Last line of defence: one failing request never takes the process down."""

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        if e.code == 401:
            return "", 401
        return jsonify({"message": e.description}), e.code

    @app.errorhandler(StorageUnavailableError)
    @app.errorhandler(OperationalError)
    def handle_storage_error(e):
        app.logger.exception("Data store unavailable")
        db.session.rollback()
        return jsonify({"message": "Service temporarily unavailable"}), 500

    @app.errorhandler(Exception)
    def handle_unexpected_error(e):
        app.logger.exception("Unhandled error on %s %s", request.method, request.path)
        db.session.rollback()
        return jsonify({"message": "Internal server error"}), 500
