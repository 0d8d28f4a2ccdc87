# config/base.py
import os


def _coerce_bool(value, default=False):
    """Convert environment-style truthy/falsey values to bool."""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    value_str = str(value).strip().lower()
    if value_str in {"1", "true", "yes", "on"}:
        return True
    if value_str in {"0", "false", "no", "off"}:
        return False
    return default


def _coerce_int(value, default, *, minimum=1):
    """Parse an integer environment value, falling back to ``default`` when invalid."""
    if value is None or str(value).strip() == "":
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return max(number, minimum)


def _pool_options(uri):
    """Engine options for the configured database URI."""
    if uri and uri.startswith("sqlite"):
        # SQLite manages its own locking; pooling options do not apply
        return {
            "connect_args": {
                "check_same_thread": False,
                "timeout": 5,
            }
        }
    return {
        "pool_size": _coerce_int(os.environ.get("DB_POOL_SIZE"), 10),
        "max_overflow": _coerce_int(os.environ.get("DB_MAX_OVERFLOW"), 0, minimum=0),
        "pool_timeout": _coerce_int(os.environ.get("DB_POOL_TIMEOUT"), 30),
        "pool_pre_ping": True,
    }


class Config:
    # SECRET_KEY must be set via environment variable for security
    # For production, it must be set via environment variable
    _flask_env = os.environ.get("FLASK_ENV", "development")
    _is_testing = _flask_env == "testing"
    _is_production = _flask_env == "production"

    SECRET_KEY = os.environ.get("SECRET_KEY")

    # Only require SECRET_KEY in production mode
    if not SECRET_KEY and _is_production:
        raise ValueError(
            "SECRET_KEY environment variable is required in production. "
            'Generate with: python -c "import secrets; print(secrets.token_hex(32))"'
        )

    if not SECRET_KEY and not _is_testing:
        import warnings

        warnings.warn(
            "SECRET_KEY not set. Using default for development only. "
            "Set SECRET_KEY environment variable before deploying.",
            UserWarning,
        )
        SECRET_KEY = "dev-secret-key-change-in-production"

    if not SECRET_KEY:
        SECRET_KEY = "test-secret-key-placeholder"

    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {}

    # Role given to a bearer-token request that does not state one.
    # The upstream gateway is trusted to have authenticated the caller.
    DEFAULT_PRINCIPAL_ROLE = os.environ.get("DEFAULT_PRINCIPAL_ROLE", "admin").strip().lower() or "admin"

    # Events listed by the matching screen are limited to upcoming ones
    MATCH_EVENTS_FUTURE_ONLY = _coerce_bool(os.environ.get("MATCH_EVENTS_FUTURE_ONLY"), default=True)

    REPORT_EXPORT_LIMIT = _coerce_int(os.environ.get("REPORT_EXPORT_LIMIT"), 5000)

    JSON_SORT_KEYS = False


class DevelopmentConfig(Config):
    DEBUG = True
    # Get the project root directory (parent of config directory)
    _config_dir = os.path.dirname(os.path.abspath(__file__))
    _project_root = os.path.dirname(_config_dir)
    instance_path = os.path.join(_project_root, "instance")

    if not os.path.exists(instance_path):
        os.makedirs(instance_path, exist_ok=True)

    # Windows needs forward slashes in a SQLite URI
    db_path = os.path.join(instance_path, "impactnow_dev.db").replace("\\", "/")
    db_uri = f"sqlite:///{db_path}"

    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL", db_uri)
    SQLALCHEMY_ECHO = _coerce_bool(os.environ.get("SQLALCHEMY_ECHO"), default=False)
    SQLALCHEMY_ENGINE_OPTIONS = _pool_options(SQLALCHEMY_DATABASE_URI)


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = os.environ.get("SECRET_KEY", "test-secret-key-for-testing-only")
    # conftest points this at a temporary file so event writes get their own connection
    SQLALCHEMY_DATABASE_URI = os.environ.get("TEST_DATABASE_URL", "sqlite:///:memory:")
    SQLALCHEMY_ECHO = False
    SQLALCHEMY_ENGINE_OPTIONS = _pool_options(SQLALCHEMY_DATABASE_URI)


class ProductionConfig(Config):
    DEBUG = False
    uri = os.environ.get("DATABASE_URL")
    if uri and uri.startswith("postgres://"):
        uri = uri.replace("postgres://", "postgresql://", 1)
    SQLALCHEMY_DATABASE_URI = uri
    SQLALCHEMY_ECHO = False
    SQLALCHEMY_ENGINE_OPTIONS = _pool_options(uri)
