"""Utility modules for the check-in backend."""

from checkin.utils.logger import logger, setup_logger
from checkin.utils.environment import is_production, is_debug, get_environment
from checkin.utils.sentry_utils import configure_sentry, capture_exception
from checkin.utils.response_utils import error_response, app_error_response
from checkin.utils.constants import (
    API_VERSION,
    API_PREFIX,
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
)

__all__ = [
    # Logger
    "logger",
    "setup_logger",
    # Environment
    "is_production",
    "is_debug",
    "get_environment",
    # Sentry
    "configure_sentry",
    "capture_exception",
    # Response
    "error_response",
    "app_error_response",
    # Constants
    "API_VERSION",
    "API_PREFIX",
    "DEFAULT_PAGE_SIZE",
    "MAX_PAGE_SIZE",
]
