"""Business logic services package."""

from sonar_gitlab_webhook.services.interpreter import (
    InterpreterError,
    NotificationParseError,
    decide,
    interpret,
    parse_notification,
    resolve_target,
)
from sonar_gitlab_webhook.services.comment_publisher import (
    CommentPublisher,
    PublishError,
    format_comment,
    get_comment_publisher,
    resolve_endpoint,
)

__all__ = [
    'InterpreterError',
    'NotificationParseError',
    'decide',
    'interpret',
    'parse_notification',
    'resolve_target',
    'CommentPublisher',
    'PublishError',
    'format_comment',
    'get_comment_publisher',
    'resolve_endpoint',
]
