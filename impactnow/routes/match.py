# impactnow/routes/match.py

"""
Volunteer matching API used by the admin matching screen
"""

from http import HTTPStatus

from flask import current_app, jsonify, request
from flask_login import current_user

from impactnow.services.match_service import MatchError, MatchService
from impactnow.utils.error_handler import json_error
from impactnow.utils.permissions import admin_required


def register_match_routes(app):
    """Register volunteer matching routes"""

    @app.route("/api/match-volunteers/volunteers", methods=["GET"])
    @admin_required
    def api_match_volunteers():
        try:
            term = request.args.get("term")
            service = MatchService()
            if term is None:
                return jsonify(service.list_volunteers())
            return jsonify(service.search_volunteers(term))
        except MatchError as e:
            return json_error(e.message, e.status)
        except Exception as e:
            current_app.logger.error(f"Error fetching volunteers: {str(e)}", exc_info=True)
            return json_error("Server error while fetching volunteers", HTTPStatus.INTERNAL_SERVER_ERROR)

    @app.route("/api/match-volunteers/volunteers/find", methods=["GET"])
    @admin_required
    def api_match_find_volunteer():
        try:
            volunteer = MatchService().find_volunteer(request.args.get("type"), request.args.get("term"))
            return jsonify(volunteer)
        except MatchError as e:
            return json_error(e.message, e.status)
        except Exception as e:
            current_app.logger.error(f"Error searching for volunteer: {str(e)}", exc_info=True)
            return json_error("Failed to search for volunteer", HTTPStatus.INTERNAL_SERVER_ERROR)

    @app.route("/api/match-volunteers/volunteers/<username>/history", methods=["GET"])
    @admin_required
    def api_match_volunteer_history(username):
        try:
            return jsonify(MatchService().volunteer_history(username))
        except MatchError as e:
            return json_error(e.message, e.status)
        except Exception as e:
            current_app.logger.error(f"Error fetching history for {username}: {str(e)}", exc_info=True)
            return json_error("Server error while fetching volunteer history", HTTPStatus.INTERNAL_SERVER_ERROR)

    @app.route("/api/match-volunteers/volunteers/<username>/skills", methods=["GET"])
    @admin_required
    def api_match_volunteer_skills(username):
        try:
            return jsonify({"username": username, "skills": MatchService().volunteer_skills(username)})
        except MatchError as e:
            return json_error(e.message, e.status)
        except Exception as e:
            current_app.logger.error(f"Error fetching skills for {username}: {str(e)}", exc_info=True)
            return json_error("Server error while fetching volunteer skills", HTTPStatus.INTERNAL_SERVER_ERROR)

    @app.route("/api/match-volunteers/events", methods=["GET"])
    @admin_required
    def api_match_events():
        try:
            events = MatchService().list_match_events(
                request.args.get("term"),
                future_only=current_app.config.get("MATCH_EVENTS_FUTURE_ONLY", True),
            )
            return jsonify([event.to_dict() for event in events])
        except Exception as e:
            current_app.logger.error(f"Error fetching events for matching: {str(e)}", exc_info=True)
            return json_error("Server error while fetching events", HTTPStatus.INTERNAL_SERVER_ERROR)

    @app.route("/api/match-volunteers/events/skills/<skill_name>", methods=["GET"])
    @admin_required
    def api_match_events_for_skill(skill_name):
        try:
            events = MatchService().events_for_skill(
                skill_name, future_only=current_app.config.get("MATCH_EVENTS_FUTURE_ONLY", True)
            )
            return jsonify([event.to_dict() for event in events])
        except Exception as e:
            current_app.logger.error(f"Error fetching events for skill {skill_name}: {str(e)}", exc_info=True)
            return json_error("Server error while fetching events by skill", HTTPStatus.INTERNAL_SERVER_ERROR)

    @app.route("/api/match-volunteers/match", methods=["POST"])
    @admin_required
    def api_create_match():
        data = request.get_json(silent=True) or {}
        if not isinstance(data, dict):
            return json_error("Invalid JSON data", HTTPStatus.BAD_REQUEST)
        try:
            result = MatchService().create_match(data.get("username"), data.get("eventId"))
            current_app.logger.info(
                f"Volunteer {result.username} matched to event {result.event_id} by {current_user.get_id()}"
            )
            return jsonify(result.to_dict()), HTTPStatus.CREATED
        except MatchError as e:
            return json_error(e.message, e.status)
        except Exception as e:
            current_app.logger.error(f"Error matching volunteer to event: {str(e)}", exc_info=True)
            return json_error("Server error while matching volunteer to event", HTTPStatus.INTERNAL_SERVER_ERROR)

    @app.route("/api/match-volunteers/matches", methods=["GET"])
    @admin_required
    def api_list_matches():
        try:
            return jsonify(MatchService().list_matches())
        except Exception as e:
            current_app.logger.error(f"Error fetching matches: {str(e)}", exc_info=True)
            return json_error("Server error while fetching matches", HTTPStatus.INTERNAL_SERVER_ERROR)

    @app.route("/api/match-volunteers/match/<match_id>", methods=["DELETE"])
    @admin_required
    def api_delete_match(match_id):
        try:
            MatchService().delete_match(match_id)
            return jsonify({"message": "Match removed successfully"})
        except MatchError as e:
            return json_error(e.message, e.status)
        except Exception as e:
            current_app.logger.error(f"Error removing match {match_id}: {str(e)}", exc_info=True)
            return json_error("Server error while removing match", HTTPStatus.INTERNAL_SERVER_ERROR)
