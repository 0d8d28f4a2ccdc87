# impactnow/routes/report.py

"""
Volunteer history reports
"""

from http import HTTPStatus

from flask import current_app, jsonify, make_response

from impactnow.services.report_service import VolunteerHistoryReportService
from impactnow.utils.error_handler import json_error
from impactnow.utils.permissions import admin_required


def _report_service():
    return VolunteerHistoryReportService(limit=current_app.config.get("REPORT_EXPORT_LIMIT", 5000))


def register_report_routes(app):
    """Register report routes"""

    @app.route("/api/reports/volunteer-history", methods=["GET"])
    @admin_required
    def api_volunteer_history_report():
        try:
            return jsonify([row.to_dict() for row in _report_service().history_rows()])
        except Exception as e:
            current_app.logger.error(f"Error fetching volunteer history: {str(e)}", exc_info=True)
            return json_error("Failed to fetch volunteer history", HTTPStatus.INTERNAL_SERVER_ERROR)

    @app.route("/api/reports/volunteer-history.csv", methods=["GET"])
    @admin_required
    def api_volunteer_history_csv():
        try:
            filename, csv_content = _report_service().export_csv()
        except Exception as e:
            current_app.logger.error(f"Error generating CSV report: {str(e)}", exc_info=True)
            return json_error("Failed to generate CSV report", HTTPStatus.INTERNAL_SERVER_ERROR)

        response = make_response(csv_content)
        response.headers["Content-Type"] = "text/csv"
        response.headers["Content-Disposition"] = f'attachment; filename="{filename}"'
        return response
