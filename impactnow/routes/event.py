# impactnow/routes/event.py

"""
Event management and event search API
"""

from http import HTTPStatus

from flask import current_app, jsonify, request
from flask_login import current_user, login_required

from config.base import _coerce_bool
from impactnow.services.event_repository import (
    DEFAULT_PAGE_SIZE,
    EventRepository,
    EventStorageError,
    InvalidEventId,
    parse_event_id,
)
from impactnow.services.event_workflow import (
    EventNotFoundError,
    EventValidationError,
    EventWorkflowService,
    EventWriteError,
    LocationNotFoundError,
)
from impactnow.services.match_service import MatchError, MatchService
from impactnow.utils.error_handler import json_error
from impactnow.utils.permissions import admin_required, can_view_volunteer


def _json_payload():
    """Return the request JSON object, or ``None`` when the body is not an object"""
    payload = request.get_json(silent=True)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        return None
    return payload


def _write_error_response(exc):
    if isinstance(exc, EventValidationError):
        return jsonify({"errors": exc.errors}), HTTPStatus.BAD_REQUEST
    if isinstance(exc, LocationNotFoundError):
        return json_error("No matching location found", HTTPStatus.BAD_REQUEST)
    if isinstance(exc, EventNotFoundError):
        return json_error("Event not found", HTTPStatus.NOT_FOUND)
    return None


def register_event_routes(app):
    """Register event routes"""

    @app.route("/api/events", methods=["GET"])
    def api_list_events():
        try:
            future_only = _coerce_bool(request.args.get("future"), default=False)
            events = EventRepository().list_events(future_only=future_only)
            return jsonify([event.to_dict() for event in events])
        except Exception as e:
            current_app.logger.error(f"Error fetching events: {str(e)}", exc_info=True)
            return json_error("Failed to fetch events", HTTPStatus.INTERNAL_SERVER_ERROR)

    @app.route("/api/events/browse", methods=["GET"])
    def api_browse_events():
        """Paginated event listing for the volunteer-facing search page"""
        try:
            page = request.args.get("page", 1, type=int) or 1
            limit = request.args.get("limit", DEFAULT_PAGE_SIZE, type=int) or DEFAULT_PAGE_SIZE
            return jsonify(EventRepository().browse_events(page=page, limit=limit).to_dict())
        except Exception as e:
            current_app.logger.error(f"Error browsing events: {str(e)}", exc_info=True)
            return json_error("Failed to fetch events", HTTPStatus.INTERNAL_SERVER_ERROR)

    @app.route("/api/events/<event_id>", methods=["GET"])
    def api_get_event(event_id):
        try:
            event = EventRepository().get_event(parse_event_id(event_id))
            if event is None:
                return json_error("Event not found", HTTPStatus.NOT_FOUND)
            return jsonify(event.to_dict())
        except InvalidEventId:
            return json_error("Invalid event ID", HTTPStatus.BAD_REQUEST)
        except Exception as e:
            current_app.logger.error(f"Error fetching event {event_id}: {str(e)}", exc_info=True)
            return json_error("Failed to fetch event", HTTPStatus.INTERNAL_SERVER_ERROR)

    @app.route("/api/events", methods=["POST"])
    @admin_required
    def api_create_event():
        payload = _json_payload()
        if payload is None:
            return json_error("Invalid JSON data", HTTPStatus.BAD_REQUEST)
        try:
            result = EventWorkflowService().create_event(payload)
            current_app.logger.info(
                f"Event {result.event.id} created by {current_user.get_id()}"
                + (f", skipped skills: {result.skipped_skills}" if result.skipped_skills else "")
            )
            return jsonify(result.to_dict()), HTTPStatus.CREATED
        except (EventValidationError, LocationNotFoundError) as e:
            return _write_error_response(e)
        except EventWriteError as e:
            current_app.logger.error(f"Event create rolled back: {str(e)}")
            return json_error("Failed to create event", HTTPStatus.INTERNAL_SERVER_ERROR)
        except Exception as e:
            current_app.logger.error(f"Error creating event: {str(e)}", exc_info=True)
            return json_error("Failed to create event", HTTPStatus.INTERNAL_SERVER_ERROR)

    @app.route("/api/events/<event_id>", methods=["PUT"])
    @admin_required
    def api_update_event(event_id):
        payload = _json_payload()
        if payload is None:
            return json_error("Invalid JSON data", HTTPStatus.BAD_REQUEST)
        try:
            result = EventWorkflowService().update_event(event_id, payload)
            current_app.logger.info(f"Event {result.event.id} updated by {current_user.get_id()}")
            return jsonify(result.to_dict())
        except InvalidEventId:
            return json_error("Invalid event ID", HTTPStatus.BAD_REQUEST)
        except (EventValidationError, LocationNotFoundError, EventNotFoundError) as e:
            return _write_error_response(e)
        except EventWriteError as e:
            current_app.logger.error(f"Event update rolled back for {event_id}: {str(e)}")
            return json_error("Failed to update event", HTTPStatus.INTERNAL_SERVER_ERROR)
        except Exception as e:
            current_app.logger.error(f"Error updating event {event_id}: {str(e)}", exc_info=True)
            return json_error("Failed to update event", HTTPStatus.INTERNAL_SERVER_ERROR)

    @app.route("/api/events/<event_id>", methods=["DELETE"])
    @admin_required
    def api_delete_event(event_id):
        try:
            deleted = EventWorkflowService().delete_event(event_id)
            current_app.logger.info(f"Event {deleted.id} deleted by {current_user.get_id()}")
            return jsonify({"message": "Event deleted successfully", "deletedEvent": deleted.to_dict()})
        except InvalidEventId:
            return json_error("Invalid event ID", HTTPStatus.BAD_REQUEST)
        except EventNotFoundError as e:
            return _write_error_response(e)
        except EventWriteError as e:
            current_app.logger.error(f"Event delete rolled back for {event_id}: {str(e)}")
            return json_error("Failed to delete event", HTTPStatus.INTERNAL_SERVER_ERROR)
        except Exception as e:
            current_app.logger.error(f"Error deleting event {event_id}: {str(e)}", exc_info=True)
            return json_error("Failed to delete event", HTTPStatus.INTERNAL_SERVER_ERROR)

    @app.route("/api/events/search/skills", methods=["GET"])
    def api_search_events_by_skills():
        raw = (request.args.get("skills") or "").strip()
        if not raw:
            return json_error("Skills parameter is required", HTTPStatus.BAD_REQUEST)
        try:
            names = [name.strip().lower() for name in raw.split(",") if name.strip()]
            events = EventRepository().search_events_by_skills(names)
            return jsonify([event.to_dict() for event in events])
        except Exception as e:
            current_app.logger.error(f"Error searching events by skills: {str(e)}", exc_info=True)
            return json_error("Failed to search events", HTTPStatus.INTERNAL_SERVER_ERROR)

    @app.route("/api/events/search/location", methods=["GET"])
    def api_search_events_by_location():
        term = (request.args.get("location") or "").strip()
        if not term:
            return json_error("Location search term is required", HTTPStatus.BAD_REQUEST)
        try:
            events = EventRepository().search_events_by_location(term)
            return jsonify([event.to_dict() for event in events])
        except Exception as e:
            current_app.logger.error(f"Error searching events by location: {str(e)}", exc_info=True)
            return json_error("Failed to search events", HTTPStatus.INTERNAL_SERVER_ERROR)

    @app.route("/api/events/search", methods=["GET"])
    def api_search_events():
        try:
            events = EventRepository().search_events(
                request.args.get("searchType"), request.args.get("searchTerm")
            )
            return jsonify([event.to_dict() for event in events])
        except Exception as e:
            current_app.logger.error(f"Error searching events: {str(e)}", exc_info=True)
            return json_error("Failed to search events", HTTPStatus.INTERNAL_SERVER_ERROR)

    @app.route("/api/events/category/<urgency>", methods=["GET"])
    def api_events_by_category(urgency):
        urgency = urgency.strip()
        if not urgency:
            return json_error("Urgency level is required", HTTPStatus.BAD_REQUEST)
        try:
            events = EventRepository().list_events(urgency=urgency)
            return jsonify([event.to_dict() for event in events])
        except Exception as e:
            current_app.logger.error(f"Error fetching events for urgency {urgency}: {str(e)}", exc_info=True)
            return json_error("Failed to fetch events", HTTPStatus.INTERNAL_SERVER_ERROR)

    @app.route("/api/events/locations", methods=["GET"])
    def api_event_locations():
        try:
            return jsonify(EventRepository().list_locations())
        except EventStorageError as e:
            current_app.logger.error(f"Invalid location lookup result: {str(e)}")
            return json_error("Failed to fetch locations", HTTPStatus.INTERNAL_SERVER_ERROR)
        except Exception as e:
            current_app.logger.error(f"Error fetching locations: {str(e)}", exc_info=True)
            return json_error("Failed to fetch locations", HTTPStatus.INTERNAL_SERVER_ERROR)

    @app.route("/api/events/skills", methods=["GET"])
    def api_event_skills():
        try:
            return jsonify(EventRepository().list_skills())
        except EventStorageError as e:
            current_app.logger.error(f"Invalid skill lookup result: {str(e)}")
            return json_error("Failed to fetch skills", HTTPStatus.INTERNAL_SERVER_ERROR)
        except Exception as e:
            current_app.logger.error(f"Error fetching skills: {str(e)}", exc_info=True)
            return json_error("Failed to fetch skills", HTTPStatus.INTERNAL_SERVER_ERROR)

    @app.route("/api/events/<event_id>/signup", methods=["POST"])
    @login_required
    def api_event_signup(event_id):
        """Self-service signup: records the match and a confirmation notification"""
        payload = _json_payload() or {}
        username = payload.get("username") or getattr(current_user, "username", None)
        if not can_view_volunteer(current_user, username):
            current_app.logger.warning(f"Principal {current_user.get_id()} denied signup on behalf of {username}")
            return json_error("Access denied", HTTPStatus.FORBIDDEN)
        try:
            parsed_id = parse_event_id(event_id)
            result = MatchService().create_match(username, parsed_id, notify=True)
            return (
                jsonify(
                    {
                        "message": f"Successfully signed up for {result.event_name}",
                        "signup": result.to_dict(),
                    }
                ),
                HTTPStatus.CREATED,
            )
        except InvalidEventId:
            return json_error("Invalid event ID", HTTPStatus.BAD_REQUEST)
        except MatchError as e:
            return json_error(e.message, e.status)
        except Exception as e:
            current_app.logger.error(f"Error signing up for event {event_id}: {str(e)}", exc_info=True)
            return json_error("Failed to sign up for event", HTTPStatus.INTERNAL_SERVER_ERROR)
