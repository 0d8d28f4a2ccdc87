# impactnow/routes/__init__.py
"""
Application routes package
"""

from .dashboard import register_dashboard_routes
from .event import register_event_routes
from .match import register_match_routes
from .notification import register_notification_routes
from .report import register_report_routes


def init_routes(app):
    """Initialize all application routes"""
    register_event_routes(app)
    register_match_routes(app)
    register_notification_routes(app)
    register_report_routes(app)
    register_dashboard_routes(app)
