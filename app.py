# app.py

import os

from dotenv import load_dotenv
from flask import Flask
from flask_login import LoginManager

# Load environment variables from .env file first
load_dotenv()

# Module imports after load_dotenv() - E402 is intentional
from config import DevelopmentConfig, ProductionConfig, TestingConfig  # noqa: E402
from config.monitoring import (  # noqa: E402
    DevelopmentMonitoringConfig,
    ProductionMonitoringConfig,
    TestingMonitoringConfig,
)
from config.validation import validate_and_exit  # noqa: E402
from impactnow.cli import register_cli  # noqa: E402
from impactnow.middleware.auth_context import init_auth_context  # noqa: E402
from impactnow.models import db, enable_sqlite_pragmas  # noqa: E402
from impactnow.routes import init_routes  # noqa: E402
from impactnow.utils.error_handler import init_error_handlers  # noqa: E402
from impactnow.utils.logging_config import setup_logging  # noqa: E402
from impactnow.utils.monitoring import init_monitoring  # noqa: E402

CONFIG_BY_ENV = {
    "production": (ProductionConfig, ProductionMonitoringConfig),
    "testing": (TestingConfig, TestingMonitoringConfig),
    "development": (DevelopmentConfig, DevelopmentMonitoringConfig),
}

app = Flask(__name__)

flask_env = os.environ.get("FLASK_ENV", "development")
if flask_env == "production":
    # Refuse to start with missing secrets or database settings
    validate_and_exit(flask_env)

app_config, monitoring_config = CONFIG_BY_ENV.get(flask_env, CONFIG_BY_ENV["development"])
app.config.from_object(app_config)
app.config.from_object(monitoring_config)

# Initialize extensions
db.init_app(app)
login_manager = LoginManager()
login_manager.init_app(app)
init_auth_context(app, login_manager)

# Register login manager in app extensions for testing
app.extensions["login_manager"] = login_manager

# Initialize logging and monitoring
setup_logging(app)
init_monitoring(app, db)

with app.app_context():
    # Foreign keys stay off under test so fixtures can insert rows in any order
    enable_sqlite_pragmas(db.engine, foreign_keys=not app.config.get("TESTING", False))
    # Test fixtures manage their own schema
    if not app.config.get("TESTING", False):
        db.create_all()

# Initialize routes, CLI commands and JSON error handlers
init_routes(app)
register_cli(app)
init_error_handlers(app, db)


if __name__ == "__main__":
    port = int(os.environ.get("PORT", 5000))
    app.run(host="0.0.0.0", port=port)
