import logging

from flask import Flask, jsonify
from sqlalchemy.exc import SQLAlchemyError

from postdesk.config import Config
from postdesk.core.logging import (
    EVENT_APP_START,
    EVENT_AUTH_REJECTED,
    EVENT_DB_WRITE_FAILED,
    log_event,
    setup_logging,
)
from postdesk.db import db
from postdesk.extensions.extensions import jwt, ma

logger = logging.getLogger(__name__)


def _register_auth_handlers():
    # Every credential problem is reported the same way: 400, no details.
    def _rejected(reason):
        log_event(logger, "info", EVENT_AUTH_REJECTED, reason=reason)
        return jsonify({"error": "Missing or invalid access token"}), 400

    @jwt.unauthorized_loader
    def _missing_token(_message):
        return _rejected("missing")

    @jwt.invalid_token_loader
    def _invalid_token(_message):
        return _rejected("invalid")

    @jwt.expired_token_loader
    def _expired_token(_jwt_header, _jwt_payload):
        return _rejected("expired")


def _register_error_handlers(app):
    @app.errorhandler(404)
    def _not_found(_error):
        return jsonify({"error": "Not found"}), 404

    @app.errorhandler(405)
    def _method_not_allowed(_error):
        return jsonify({"error": "Method not allowed"}), 405

    @app.errorhandler(413)
    def _too_large(_error):
        return jsonify({"error": "Media file is too large"}), 413

    @app.errorhandler(SQLAlchemyError)
    def _database_error(error):
        db.session.rollback()
        log_event(
            logger,
            "exception",
            EVENT_DB_WRITE_FAILED,
            error_type=type(error).__name__,
        )
        return jsonify({"error": "Internal server error"}), 500


def create_app(config_overrides=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)

    setup_logging(getattr(logging, app.config.get("LOG_LEVEL", "INFO"), logging.INFO))

    db.init_app(app)
    jwt.init_app(app)
    ma.init_app(app)
    _register_auth_handlers()
    _register_error_handlers(app)

    from postdesk.routes.post_routes import post_bp

    app.register_blueprint(post_bp, url_prefix="/api")

    with app.app_context():
        from postdesk.models import media_model, post_model  # noqa: F401

        db.create_all()

    log_event(logger, "info", EVENT_APP_START, database=app.config["SQLALCHEMY_DATABASE_URI"].split(":", 1)[0])
    return app
