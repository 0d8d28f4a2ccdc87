# impactnow/models/base.py

import logging
from datetime import datetime, timezone

from flask import current_app
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import event
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)

db = SQLAlchemy()


def _utcnow():
    return datetime.now(timezone.utc)


class BaseModel(db.Model):
    """Abstract base carrying audit timestamps and guarded persistence helpers"""

    __abstract__ = True

    created_at = db.Column(db.DateTime, default=_utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)

    @classmethod
    def safe_create(cls, **kwargs):
        """Create and commit a new row. Returns ``(instance, error)``."""
        try:
            instance = cls(**kwargs)
            db.session.add(instance)
            db.session.commit()
            return instance, None
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f"Database error creating {cls.__name__}: {str(e)}")
            return None, str(e)


def enable_sqlite_pragmas(engine, *, foreign_keys=True):
    """
    Apply WAL journaling and a busy timeout to every new SQLite connection.

    Event writes run on a dedicated session while other requests keep
    reading, so readers must not block the writer. No-op for other backends and
    for engines that were already configured.
    """
    if not engine.url.drivername.startswith("sqlite"):
        return False
    if getattr(engine, "_impactnow_pragmas", False):
        return False

    def _on_connect(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        try:
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA synchronous=NORMAL")
            cursor.execute("PRAGMA busy_timeout=5000")
            if foreign_keys:
                cursor.execute("PRAGMA foreign_keys=ON")
        except Exception as e:
            logger.warning("Could not apply SQLite pragmas: %s", e)
        finally:
            cursor.close()

    event.listen(engine, "connect", _on_connect)
    engine._impactnow_pragmas = True
    return True
