import os
import secrets
import warnings

from dotenv import load_dotenv

basedir = os.path.abspath(os.path.dirname(__file__))
load_dotenv(os.path.join(basedir, ".env"))


class Config:
    # Generate a secure key if not provided (with a warning)
    _secret_key = os.environ.get("SECRET_KEY")

    if not _secret_key:
        _secret_key = secrets.token_urlsafe(32)
        warnings.warn(
            "🔐 SECRET_KEY not set! Using auto-generated key. "
            "This will cause sessions to reset on app restart.",
            UserWarning,
        )

    SECRET_KEY = _secret_key

    # Remote pick'em API
    PICKEM_API_BASE_URL = (
        os.environ.get("PICKEM_API_BASE_URL") or "http://localhost:3000/api"
    )
    PICKEM_API_TIMEOUT = float(os.environ.get("PICKEM_API_TIMEOUT") or 15)

    # Game rules
    TOURNAMENT_MIN_STARTING_WEEK = int(
        os.environ.get("TOURNAMENT_MIN_STARTING_WEEK") or 14
    )

    # Application settings
    SESSION_TIMEOUT = int(os.environ.get("SESSION_TIMEOUT") or 3600)
    PICK_STATE_TIMEOUT = int(
        os.environ.get("PICK_STATE_TIMEOUT") or 7 * 24 * 3600
    )  # seconds
    PICK_SUBMIT_TIMEOUT = int(os.environ.get("PICK_SUBMIT_TIMEOUT") or 60)  # seconds
    TIMEZONE = os.environ.get("TIMEZONE", "UTC")  # Default to UTC if not specified

    # Caching configuration
    CACHE_TYPE = os.environ.get("CACHE_TYPE", "RedisCache")
    CACHE_DEFAULT_TIMEOUT = int(
        os.environ.get("CACHE_DEFAULT_TIMEOUT", 300)
    )  # 5 minutes
    CACHE_REDIS_URL = os.environ.get("CACHE_REDIS_URL", "redis://localhost:6379/0")
    CACHE_KEY_PREFIX = "pickem:"

    # Rate limiting
    RATELIMIT_ENABLED = os.environ.get("RATELIMIT_ENABLED", "True").lower() == "true"

    # Logging configuration
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    LOG_TO_CONSOLE = os.environ.get("LOG_TO_CONSOLE", "True").lower() == "true"
    LOG_TO_FILE = os.environ.get("LOG_TO_FILE", "True").lower() == "true"
    LOG_DIR = os.environ.get("LOG_DIR", "logs")
    SLOW_REQUEST_THRESHOLD = float(os.environ.get("SLOW_REQUEST_THRESHOLD", "2.0"))

    # Environment detection
    FLASK_ENV = os.environ.get("FLASK_ENV", "development")
    DEBUG = FLASK_ENV == "development"
    TESTING = False


class DevelopmentConfig(Config):
    """Development configuration with helpful defaults"""

    DEBUG = True

    def __init__(self):
        # Fallback to SimpleCache if Redis isn't available in development
        try:
            import redis

            redis_client = redis.Redis.from_url(self.CACHE_REDIS_URL)
            redis_client.ping()
        except ImportError:
            self._use_simple_cache()
        except redis.exceptions.ConnectionError:
            self._use_simple_cache()

    def _use_simple_cache(self):
        self.CACHE_TYPE = "SimpleCache"
        warnings.warn(
            "🔶 Redis not available, falling back to SimpleCache for development.",
            UserWarning,
        )


class ProductionConfig(Config):
    """Production configuration with security focus"""

    DEBUG = False

    # In production, require explicit environment variables
    def __init__(self):
        if not os.environ.get("SECRET_KEY"):
            warnings.warn(
                "🚨 PRODUCTION WARNING: SECRET_KEY not explicitly set! "
                "Using auto-generated key is not recommended for production.",
                UserWarning,
            )
        if not os.environ.get("PICKEM_API_BASE_URL"):
            warnings.warn(
                "🚨 PRODUCTION WARNING: PICKEM_API_BASE_URL not set, "
                "using the localhost default.",
                UserWarning,
            )


class TestingConfig(Config):
    """Testing configuration"""

    TESTING = True
    DEBUG = False
    CACHE_TYPE = "SimpleCache"
    RATELIMIT_ENABLED = False
    LOG_TO_CONSOLE = False
    LOG_TO_FILE = False
    PICKEM_API_BASE_URL = "http://pickem.test/api"


# Configuration mapping
config = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
    "default": DevelopmentConfig,
}
