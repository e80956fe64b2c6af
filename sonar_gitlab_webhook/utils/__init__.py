"""
Utility modules for the webhook bridge.
"""

from sonar_gitlab_webhook.utils.logging import (
    get_logger,
    setup_logging,
    ContextLoggerAdapter,
    JSONFormatter,
    log_notification,
    log_api_call,
    log_error_with_context,
)

__all__ = [
    "get_logger",
    "setup_logging",
    "ContextLoggerAdapter",
    "JSONFormatter",
    "log_notification",
    "log_api_call",
    "log_error_with_context",
]
