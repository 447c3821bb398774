import logging
import os

from flask import Flask, jsonify, request
from flask_caching import Cache
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_login import LoginManager

from config import config

logger = logging.getLogger(__name__)

login_manager = LoginManager()
cache = Cache()


def get_real_ip():
    """
    Get the real client IP address, accounting for reverse proxies.
    Checks X-Forwarded-For, X-Real-IP, and falls back to remote_addr.
    """
    # X-Forwarded-For: client, proxy1, proxy2, ...
    # We want the leftmost (original client) IP
    if request.headers.get("X-Forwarded-For"):
        return request.headers.get("X-Forwarded-For").split(",")[0].strip()
    if request.headers.get("X-Real-IP"):
        return request.headers.get("X-Real-IP")
    return get_remote_address()


limiter = Limiter(
    key_func=get_real_ip,
    default_limits=["10000 per day", "1000 per hour"],
    storage_uri=os.environ.get("RATELIMIT_STORAGE_URI", "memory://"),
)


def create_app(config_name=None, api=None):
    """
    Build the session front-end.

    Args:
        config_name: key into config.config (FLASK_CONFIG env var when None)
        api: remote API client to use instead of one built from config
    """
    app = Flask(__name__)

    # Determine configuration
    if config_name is None:
        config_name = os.environ.get("FLASK_CONFIG", "default")

    app.config.from_object(config[config_name]())

    app.config["SESSION_COOKIE_SAMESITE"] = "Lax"
    app.config["SESSION_COOKIE_HTTPONLY"] = True
    app.config["SESSION_COOKIE_SECURE"] = (
        False
        if app.config.get("DEBUG")
        else app.config.get("FLASK_ENV") == "production"
    )
    app.config["PERMANENT_SESSION_LIFETIME"] = app.config.get("SESSION_TIMEOUT", 3600)

    # Initialize extensions
    login_manager.init_app(app)
    cache.init_app(app)
    limiter.init_app(app)

    # Remote API client and session store
    from pickem.services.api_client import PickemAPI
    from pickem.services.session_store import SessionStore

    app.extensions["pickem_api"] = api or PickemAPI.from_config(app.config)
    app.extensions["pickem_store"] = SessionStore()

    # Import and register blueprints
    from pickem.routes.auth import bp as auth_bp

    app.register_blueprint(auth_bp, url_prefix="/auth")

    from pickem.routes.picks import bp as picks_bp

    app.register_blueprint(picks_bp, url_prefix="/picks")

    from pickem.routes.leagues import bp as leagues_bp

    app.register_blueprint(leagues_bp, url_prefix="/leagues")

    from pickem.routes.matchups import bp as matchups_bp

    app.register_blueprint(matchups_bp, url_prefix="/matchups")

    from pickem.routes.api import bp as api_bp

    app.register_blueprint(api_bp, url_prefix="/api")

    # Register error handlers
    register_error_handlers(app)

    # Request timing
    from pickem.utils.performance import log_request_performance, track_request_performance

    app.before_request(track_request_performance)
    app.after_request(log_request_performance)

    # Setup logging
    from pickem.utils.logging_config import setup_logging

    setup_logging(app)

    # Show configuration warnings
    show_config_warnings(app, config_name)

    return app


@login_manager.user_loader
def load_user(user_id):
    from pickem.services import get_store

    return get_store().load_user(user_id)


@login_manager.unauthorized_handler
def unauthorized():
    return jsonify({"error": "Authentication required"}), 401


def show_config_warnings(app, config_name):
    """Log configuration warnings and status"""
    logger.info(f"Pick'em client starting with '{config_name}' configuration")

    if config_name == "production" and app.config.get("DEBUG"):
        logger.warning("DEBUG mode is enabled in production!")

    if not os.environ.get("SECRET_KEY") and not app.config.get("TESTING"):
        logger.warning(
            "Using auto-generated SECRET_KEY (sessions will reset on restart)"
        )

    logger.info(f"Remote API: {app.config.get('PICKEM_API_BASE_URL')}")
    logger.info(f"Cache backend: {app.config.get('CACHE_TYPE')}")


def register_error_handlers(app):
    """Register global error handlers"""
    from pickem.errors import PickemError, RemoteError

    @app.after_request
    def add_security_headers(response):
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate, max-age=0"

        # Add Strict-Transport-Security in production
        if not app.config.get("DEBUG") and not app.config.get("TESTING"):
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains"
            )
        return response

    @app.errorhandler(PickemError)
    def handle_pickem_error(error):
        if isinstance(error, RemoteError):
            app.logger.warning(
                f"Remote API error: {error.message} (status {error.status}) - Path: {request.path}"
            )
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(400)
    def bad_request_error(error):
        app.logger.warning(
            f"400 Bad Request: {str(error)} - Path: {request.path} - Method: {request.method}"
        )
        return jsonify({"error": "Bad request"}), 400

    @app.errorhandler(404)
    def not_found_error(error):
        return jsonify({"error": "Resource not found"}), 404

    @app.errorhandler(405)
    def method_not_allowed_error(error):
        return jsonify({"error": "Method not allowed"}), 405

    @app.errorhandler(429)
    def too_many_requests_error(error):
        return jsonify({"error": "Too many requests"}), 429

    @app.errorhandler(500)
    def internal_error(error):
        return jsonify({"error": "Internal server error"}), 500
