# impactnow/utils/monitoring.py
"""
Health check and Prometheus metrics endpoints
"""

from datetime import datetime, timezone

from flask import Response, current_app, jsonify
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from sqlalchemy import text


def check_database(db):
    """Return ``(ok, detail)`` for a trivial round trip to the database"""
    try:
        db.session.execute(text("SELECT 1"))
        return True, "ok"
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Health check database query failed: {str(e)}")
        return False, "unavailable"


def init_monitoring(app, db):
    """Register the health endpoint and, when enabled, the metrics endpoint"""

    @app.route(app.config.get("HEALTH_CHECK_ENDPOINT", "/health"), methods=["GET"])
    def health_check():
        database_ok, database_detail = check_database(db)
        payload = {
            "status": "healthy" if database_ok else "degraded",
            "database": database_detail,
            "app": app.config.get("APP_NAME", "ImpactNow"),
            "version": app.config.get("APP_VERSION", "1.0.0"),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        return jsonify(payload), 200 if database_ok else 503

    if app.config.get("MONITORING_ENABLED", False):

        @app.route(app.config.get("METRICS_ENDPOINT", "/metrics"), methods=["GET"])
        def metrics():
            return Response(generate_latest(), mimetype=CONTENT_TYPE_LATEST)
