import json as jsonlib
import logging
from unittest.mock import patch

from flask import Flask, json
from prometheus_client import REGISTRY
from sqlalchemy.exc import OperationalError

from config.monitoring import EventMonitoring
from impactnow.models import db
from impactnow.utils.logging_config import JSONFormatter, setup_logging
from impactnow.utils.monitoring import init_monitoring


def _sample(name, labels=None):
    return REGISTRY.get_sample_value(name, labels or {}) or 0.0


class TestHealthEndpoint:
    """Test /health"""

    def test_healthy(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        data = json.loads(response.data)
        assert data["status"] == "healthy"
        assert data["database"] == "ok"
        assert data["app"] == "ImpactNow"

    def test_degraded_when_database_fails(self, client):
        failure = OperationalError("SELECT 1", {}, Exception("unable to open database file"))
        with patch.object(db.session, "execute", side_effect=failure):
            response = client.get("/health")
        assert response.status_code == 503
        assert json.loads(response.data)["status"] == "degraded"


class TestMetrics:
    """Test Prometheus metrics for event writes"""

    def test_metrics_endpoint_when_enabled(self):
        metrics_app = Flask(__name__)
        metrics_app.config.update(MONITORING_ENABLED=True, METRICS_ENDPOINT="/metrics")
        init_monitoring(metrics_app, db)

        response = metrics_app.test_client().get("/metrics")
        assert response.status_code == 200
        assert b"impactnow_event_writes_total" in response.data

    def test_metrics_endpoint_disabled_in_testing(self, client):
        assert client.get("/metrics").status_code == 404

    def test_record_write(self):
        labels = {"operation": "update", "status": "not_found"}
        before = _sample("impactnow_event_writes_total", labels)
        EventMonitoring.record_write(operation="update", status="not_found", duration_seconds=0.02)
        assert _sample("impactnow_event_writes_total", labels) == before + 1

    def test_skipped_skills_counter(self, client, admin_headers, reference_data):
        before = _sample("impactnow_event_skipped_skills_total")
        response = client.post(
            "/api/events",
            json={
                "name": "Drive",
                "description": "Donations",
                "location": "Community Center",
                "date": "2030-01-15",
                "volunteersNeeded": 3,
                "skills": ["juggling", "unicycling", "cooking"],
            },
            headers=admin_headers,
        )
        assert response.status_code == 201
        assert _sample("impactnow_event_skipped_skills_total") == before + 2

    def test_zero_skipped_is_not_counted(self):
        before = _sample("impactnow_event_skipped_skills_total")
        EventMonitoring.record_skipped_skills(0)
        assert _sample("impactnow_event_skipped_skills_total") == before


class TestErrorHandlers:
    """Test JSON error responses for unrouted requests"""

    def test_not_found(self, client):
        response = client.get("/api/does-not-exist")
        assert response.status_code == 404
        assert json.loads(response.data) == {"error": "Resource not found"}

    def test_method_not_allowed(self, client):
        response = client.patch("/api/events")
        assert response.status_code == 405
        assert json.loads(response.data) == {"error": "Method not allowed"}


class TestLoggingSetup:
    """Test logging configuration"""

    def test_setup_is_idempotent(self, app):
        app.config.update(ENABLE_CONSOLE_LOGGING=True, ENABLE_FILE_LOGGING=False)
        try:
            setup_logging(app)
            setup_logging(app)
            tagged = [h for h in app.logger.handlers if getattr(h, "_impactnow_handler", False)]
            package_tagged = [
                h for h in logging.getLogger("impactnow").handlers if getattr(h, "_impactnow_handler", False)
            ]
            assert len(tagged) == 1
            assert len(package_tagged) == 1
        finally:
            app.config.update(ENABLE_CONSOLE_LOGGING=False)
            setup_logging(app)

    def test_file_logging(self, app, tmp_path):
        app.config.update(ENABLE_FILE_LOGGING=True, LOG_DIR=str(tmp_path))
        try:
            setup_logging(app)
            app.logger.warning("disk check")
        finally:
            app.config.update(ENABLE_FILE_LOGGING=False)
            setup_logging(app)
        assert "disk check" in (tmp_path / "impactnow.log").read_text()

    def test_json_formatter(self):
        record = logging.LogRecord("impactnow.test", logging.ERROR, __file__, 1, "boom %s", ("now",), None)
        payload = jsonlib.loads(JSONFormatter("ImpactNow").format(record))
        assert payload["message"] == "boom now"
        assert payload["level"] == "ERROR"
        assert payload["app"] == "ImpactNow"
