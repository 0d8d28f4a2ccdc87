# config/validation.py

"""
Startup checks for the ImpactNow API environment.

Only production is checked: development and testing fall back to local
SQLite and a generated secret.
"""

import os
import sys
from typing import List, Optional, Tuple

VALID_PRINCIPAL_ROLES = ("admin", "volunteer")
PLACEHOLDER_SECRETS = ("your-secret-key", "your_secret_key", "dev-secret-key-change-in-production")
POSITIVE_INT_SETTINGS = ("DB_POOL_SIZE", "DB_POOL_TIMEOUT")


def _check_secret_key() -> Optional[str]:
    secret_key = os.environ.get("SECRET_KEY", "")
    if secret_key and secret_key not in PLACEHOLDER_SECRETS:
        return None
    return (
        "SECRET_KEY must be set to a non-default value in production. "
        'Generate one with: python -c "import secrets; print(secrets.token_hex(32))"'
    )


def _check_database_url() -> Optional[str]:
    if os.environ.get("DATABASE_URL"):
        return None
    return "DATABASE_URL must point at the production MySQL or PostgreSQL database."


def _check_principal_role() -> Optional[str]:
    role = os.environ.get("DEFAULT_PRINCIPAL_ROLE")
    if not role or role.strip().lower() in VALID_PRINCIPAL_ROLES:
        return None
    return f"DEFAULT_PRINCIPAL_ROLE must be one of {', '.join(VALID_PRINCIPAL_ROLES)} (got '{role}')."


def _check_positive_int(name: str) -> Optional[str]:
    raw = os.environ.get(name)
    if raw is None:
        return None
    try:
        if int(raw) >= 1:
            return None
    except ValueError:
        pass
    return f"{name} must be a positive integer (got '{raw}')."


def validate_environment(flask_env: str = None) -> Tuple[bool, List[str]]:
    """
    Check the environment variables production needs.

    Returns ``(is_valid, errors)``. ``flask_env`` defaults to ``FLASK_ENV``.
    """
    if flask_env is None:
        flask_env = os.environ.get("FLASK_ENV", "development")
    if flask_env != "production":
        return True, []

    results = [_check_secret_key(), _check_database_url(), _check_principal_role()]
    results.extend(_check_positive_int(name) for name in POSITIVE_INT_SETTINGS)
    errors = [message for message in results if message]
    return not errors, errors


def validate_and_exit(flask_env: str = None) -> None:
    """Print every configuration problem to stderr and exit with status 1."""
    is_valid, errors = validate_environment(flask_env)
    if is_valid:
        return

    print("=" * 80, file=sys.stderr)
    print("ENVIRONMENT VALIDATION FAILED", file=sys.stderr)
    print("=" * 80, file=sys.stderr)
    for i, error in enumerate(errors, 1):
        print(f"{i}. {error}", file=sys.stderr)
    print("\nFix the settings above in .env or the deployment environment.", file=sys.stderr)
    sys.exit(1)
