# impactnow/routes/notification.py

"""
Notification API
"""

from http import HTTPStatus

from flask import current_app, jsonify, request
from flask_login import current_user, login_required

from impactnow.services.notification_service import (
    NotificationError,
    NotificationService,
    NotificationValidationError,
)
from impactnow.utils.error_handler import json_error
from impactnow.utils.permissions import admin_required, can_view_volunteer


def _notification_error_response(exc):
    if isinstance(exc, NotificationValidationError):
        return jsonify({"errors": exc.errors}), HTTPStatus.BAD_REQUEST
    return json_error(exc.message, exc.status)


def register_notification_routes(app):
    """Register notification routes"""

    @app.route("/api/notifications/send", methods=["POST"])
    @admin_required
    def api_send_notification():
        try:
            notification = NotificationService().send_to_volunteer(request.get_json(silent=True))
            current_app.logger.info(f"Notification {notification.id} sent by {current_user.get_id()}")
            return jsonify(
                {
                    "message": "Notification added to database successfully",
                    "success": True,
                    "notification": notification.to_dict(),
                }
            )
        except NotificationError as e:
            return _notification_error_response(e)
        except Exception as e:
            current_app.logger.error(f"Error sending notification: {str(e)}", exc_info=True)
            return json_error("Failed to send notification", HTTPStatus.INTERNAL_SERVER_ERROR)

    @app.route("/api/notifications/send-to-all", methods=["POST"])
    @admin_required
    def api_send_notification_to_all():
        try:
            result = NotificationService().send_to_all(request.get_json(silent=True))
            status = HTTPStatus.MULTI_STATUS if result.partial else HTTPStatus.OK
            return jsonify(result.to_dict()), status
        except NotificationError as e:
            return _notification_error_response(e)
        except Exception as e:
            current_app.logger.error(f"Error sending notification to all volunteers: {str(e)}", exc_info=True)
            return json_error(
                "Failed to send notification to all volunteers", HTTPStatus.INTERNAL_SERVER_ERROR
            )

    @app.route("/api/notifications/volunteer/<username>", methods=["GET"])
    @login_required
    def api_volunteer_notifications(username):
        if not can_view_volunteer(current_user, username):
            return json_error("Access denied", HTTPStatus.FORBIDDEN)
        try:
            return jsonify(NotificationService().notifications_for(username))
        except NotificationError as e:
            return _notification_error_response(e)
        except Exception as e:
            current_app.logger.error(f"Error fetching notifications for {username}: {str(e)}", exc_info=True)
            return json_error("Failed to fetch notifications", HTTPStatus.INTERNAL_SERVER_ERROR)

    @app.route("/api/notifications/all", methods=["GET"])
    @admin_required
    def api_all_notifications():
        try:
            return jsonify(NotificationService().list_all())
        except Exception as e:
            current_app.logger.error(f"Error fetching all notifications: {str(e)}", exc_info=True)
            return json_error("Failed to fetch notifications", HTTPStatus.INTERNAL_SERVER_ERROR)

    @app.route("/api/notifications/<notification_id>", methods=["DELETE"])
    @admin_required
    def api_delete_notification(notification_id):
        try:
            NotificationService().delete(notification_id)
            return jsonify({"message": "Notification deleted successfully", "success": True})
        except NotificationError as e:
            return _notification_error_response(e)
        except Exception as e:
            current_app.logger.error(f"Error deleting notification {notification_id}: {str(e)}", exc_info=True)
            return json_error("Failed to delete notification", HTTPStatus.INTERNAL_SERVER_ERROR)
