"""Sentry error tracking utilities."""

import os

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

from checkin.utils.environment import is_debug, get_environment

# Track if Sentry has been initialized
_sentry_initialized = False


def configure_sentry(dsn_env_var: str = "SENTRY_DSN") -> bool:
    """Initialize Sentry for error tracking.

    Only initializes in non-debug environments (staging/production).
    Requires SENTRY_DSN environment variable to be set.

    Returns:
        True if Sentry was initialized, False otherwise
    """
    global _sentry_initialized

    if _sentry_initialized:
        return True

    if is_debug():
        return False

    dsn = os.getenv(dsn_env_var)
    if not dsn:
        return False

    sentry_sdk.init(
        dsn=dsn,
        environment=get_environment(),
        traces_sample_rate=float(os.getenv("SENTRY_TRACES_SAMPLE_RATE", "0.2")),
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
        ],
        # Request bodies here carry passwords
        send_default_pii=False,
    )

    _sentry_initialized = True
    return True

def capture_exception(exception: Exception) -> None:
    """Capture an exception and send it to Sentry."""
    if not _sentry_initialized:
        return

    sentry_sdk.capture_exception(exception)


def set_user_context(account_id: str) -> None:
    """Attach the acting account id to subsequent Sentry events."""
    if not _sentry_initialized:
        return

    sentry_sdk.set_user({"id": account_id})
