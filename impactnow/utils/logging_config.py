# impactnow/utils/logging_config.py
"""
Logging setup driven by the monitoring configuration
"""

import json
import logging
import os
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler

from flask import has_request_context, request

TEXT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class RequestContextFilter(logging.Filter):
    """Attach the request method and path to records emitted inside a request"""

    def filter(self, record):
        if has_request_context():
            record.method = request.method
            record.path = request.path
        else:
            record.method = None
            record.path = None
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per line for log shippers"""

    def __init__(self, app_name="ImpactNow"):
        super().__init__()
        self.app_name = app_name

    def format(self, record):
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "app": self.app_name,
        }
        if getattr(record, "path", None):
            payload["method"] = record.method
            payload["path"] = record.path
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def _build_formatter(app):
    if str(app.config.get("LOG_FORMAT", "json")).lower() == "json":
        return JSONFormatter(app.config.get("APP_NAME", "ImpactNow"))
    return logging.Formatter(TEXT_FORMAT)


def setup_logging(app):
    """
    Configure the Flask app logger and the ``impactnow`` package logger.

    Safe to call more than once: handlers installed by a previous call are
    replaced, not duplicated.
    """
    level_name = str(app.config.get("LOG_LEVEL", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)
    formatter = _build_formatter(app)
    context_filter = RequestContextFilter()

    handlers = []
    if app.config.get("ENABLE_CONSOLE_LOGGING", True):
        console_handler = logging.StreamHandler()
        handlers.append(console_handler)

    if app.config.get("ENABLE_FILE_LOGGING", False):
        log_dir = app.config.get("LOG_DIR", "logs")
        try:
            os.makedirs(log_dir, exist_ok=True)
            file_handler = RotatingFileHandler(
                os.path.join(log_dir, "impactnow.log"),
                maxBytes=app.config.get("LOG_FILE_MAX_BYTES", 10485760),
                backupCount=app.config.get("LOG_FILE_BACKUP_COUNT", 10),
            )
            handlers.append(file_handler)
        except OSError as e:
            app.logger.warning(f"File logging disabled, cannot write to {log_dir}: {str(e)}")

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        handler.addFilter(context_filter)
        handler._impactnow_handler = True  # type: ignore[attr-defined]

    for logger in (app.logger, logging.getLogger("impactnow")):
        for existing in list(logger.handlers):
            if getattr(existing, "_impactnow_handler", False):
                logger.removeHandler(existing)
                existing.close()
        for handler in handlers:
            logger.addHandler(handler)
        logger.setLevel(level)

    app.logger.debug(f"Logging configured at {level_name} ({len(handlers)} handler(s))")
    return app.logger
