# impactnow/middleware/auth_context.py
"""
Pre-authenticated request principal.

Token verification happens upstream. A request counts as authenticated when
it carries a bearer token; the caller's role and username come from the
``X-User-Role`` and ``X-Username`` headers, with the role defaulting to
``DEFAULT_PRINCIPAL_ROLE``.
"""

from flask import current_app, jsonify
from flask_login import UserMixin

from impactnow.models import ROLE_ADMIN, ROLE_VOLUNTEER

ROLE_HEADER = "X-User-Role"
USERNAME_HEADER = "X-Username"
KNOWN_ROLES = (ROLE_ADMIN, ROLE_VOLUNTEER)


class RequestPrincipal(UserMixin):
    """Caller identity attached to a single request"""

    def __init__(self, token, role, username=None):
        self.token = token
        self.role = role
        self.username = username

    def get_id(self):
        return self.username or f"token:{self.token[:8]}"

    @property
    def is_admin(self):
        return self.role == ROLE_ADMIN

    @property
    def is_volunteer(self):
        return self.role == ROLE_VOLUNTEER

    def __repr__(self):
        return f"<RequestPrincipal {self.username or '-'} role={self.role}>"


def extract_bearer_token(request):
    auth_header = request.headers.get("Authorization", "")
    scheme, _, token = auth_header.partition(" ")
    if scheme.lower() != "bearer":
        return None
    token = token.strip()
    return token or None


def load_principal_from_request(request):
    """Flask-Login request loader building a ``RequestPrincipal``"""
    token = extract_bearer_token(request)
    if token is None:
        return None

    default_role = current_app.config.get("DEFAULT_PRINCIPAL_ROLE", ROLE_ADMIN)
    role = (request.headers.get(ROLE_HEADER) or default_role).strip().lower()
    if role not in KNOWN_ROLES:
        current_app.logger.warning(f"Unknown principal role '{role}' on {request.path}")
        return None

    username = (request.headers.get(USERNAME_HEADER) or "").strip() or None
    return RequestPrincipal(token, role, username)


def init_auth_context(app, login_manager):
    """Wire the request principal into Flask-Login"""
    login_manager.request_loader(load_principal_from_request)

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({"error": "Authentication required"}), 401
