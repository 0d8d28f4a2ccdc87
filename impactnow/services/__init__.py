# impactnow/services/__init__.py
"""
Service layer for event, matching, notification and report workflows
"""
