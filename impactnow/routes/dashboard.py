# impactnow/routes/dashboard.py

"""
Volunteer dashboard, own events and volunteering history API
"""

from http import HTTPStatus

from flask import current_app, jsonify, request
from flask_login import current_user, login_required

from impactnow.services.volunteer_dashboard_service import DashboardError, VolunteerDashboardService
from impactnow.utils.error_handler import json_error
from impactnow.utils.permissions import can_view_volunteer


def register_dashboard_routes(app):
    """Register dashboard and volunteer history routes"""

    @app.route("/api/dashboard/<username>", methods=["GET"])
    @login_required
    def api_dashboard(username):
        if not can_view_volunteer(current_user, username):
            return json_error("Access denied", HTTPStatus.FORBIDDEN)
        try:
            return jsonify(VolunteerDashboardService().dashboard(username))
        except DashboardError as e:
            return json_error(e.message, e.status)
        except Exception as e:
            current_app.logger.error(f"Error fetching dashboard data for {username}: {str(e)}", exc_info=True)
            return json_error("Failed to fetch dashboard data", HTTPStatus.INTERNAL_SERVER_ERROR)

    @app.route("/api/events/user/<username>", methods=["GET"])
    @login_required
    def api_user_events(username):
        if not can_view_volunteer(current_user, username):
            return json_error("Access denied", HTTPStatus.FORBIDDEN)
        try:
            return jsonify(VolunteerDashboardService().user_events(username))
        except DashboardError as e:
            return json_error(e.message, e.status)
        except Exception as e:
            current_app.logger.error(f"Error fetching events for {username}: {str(e)}", exc_info=True)
            return json_error("Failed to fetch user events", HTTPStatus.INTERNAL_SERVER_ERROR)

    @app.route("/api/volunteer-history/stats", methods=["GET"])
    @login_required
    def api_volunteer_history_stats():
        # Admins may ask about anyone; everyone else gets their own numbers
        username = request.args.get("username") or getattr(current_user, "username", None)
        if not username:
            return json_error("Username is required", HTTPStatus.BAD_REQUEST)
        if not can_view_volunteer(current_user, username):
            return json_error("Access denied", HTTPStatus.FORBIDDEN)
        try:
            return jsonify(VolunteerDashboardService().history_stats(username))
        except DashboardError as e:
            return json_error(e.message, e.status)
        except Exception as e:
            current_app.logger.error(f"Error fetching volunteer statistics for {username}: {str(e)}", exc_info=True)
            return json_error("Failed to fetch volunteer statistics", HTTPStatus.INTERNAL_SERVER_ERROR)

    @app.route("/api/volunteer-history/record/<record_id>", methods=["GET"])
    @login_required
    def api_volunteer_history_record(record_id):
        try:
            owner, row = VolunteerDashboardService().history_record(record_id)
        except DashboardError as e:
            return json_error(e.message, e.status)
        except Exception as e:
            current_app.logger.error(f"Error fetching volunteer history record {record_id}: {str(e)}", exc_info=True)
            return json_error("Failed to fetch the volunteer history record", HTTPStatus.INTERNAL_SERVER_ERROR)

        if not can_view_volunteer(current_user, owner):
            return json_error("You do not have permission to access this record", HTTPStatus.FORBIDDEN)
        return jsonify(row.to_dict())
