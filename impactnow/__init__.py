# impactnow/__init__.py
"""
ImpactNow volunteer coordination backend
"""
