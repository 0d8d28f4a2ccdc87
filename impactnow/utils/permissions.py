# impactnow/utils/permissions.py

from functools import wraps

from flask import current_app, jsonify
from flask_login import current_user

from impactnow.models import ROLE_ADMIN


def has_role(user, role_name):
    """Check if the request principal holds ``role_name``"""
    if not user or not user.is_authenticated:
        return False
    return getattr(user, "role", None) == role_name


def can_view_volunteer(user, username):
    """Admins see every volunteer; a volunteer sees only their own records"""
    if has_role(user, ROLE_ADMIN):
        return True
    return bool(user and user.is_authenticated and getattr(user, "username", None) == username)


def admin_required(f):
    """Decorator requiring an authenticated admin principal"""

    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_user.is_authenticated:
            return current_app.login_manager.unauthorized()

        if not has_role(current_user, ROLE_ADMIN):
            current_app.logger.warning(
                f"Non-admin principal {current_user.get_id()} denied access to {f.__name__}"
            )
            return jsonify({"error": "Access denied. Admin privileges required."}), 403

        return f(*args, **kwargs)

    return decorated_function
