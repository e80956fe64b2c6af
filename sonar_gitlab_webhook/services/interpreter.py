"""
Notification Interpreter component.

Decodes SonarQube quality gate webhooks and decides what, if anything, should
be published to GitLab. Everything here is free of I/O so routing decisions
can be tested without a network.
"""

from typing import Optional

from pydantic import ValidationError

from sonar_gitlab_webhook.models.notification import Notification
from sonar_gitlab_webhook.models.routing import (
    CommentInput,
    CommitTarget,
    Decision,
    Forward,
    Incomplete,
    MergeRequestTarget,
    RoutingTarget,
    Suppressed,
)


DEFAULT_PROPERTY_PREFIX = "sonar.analysis."

PROJECT_ID_KEY = "project_id"
COMMIT_SHA_KEY = "commit_sha"
MR_IID_KEY = "mr_iid"


class InterpreterError(Exception):
    """Base exception for Notification Interpreter errors."""
    pass


class NotificationParseError(InterpreterError):
    """Request body is not a decodable SonarQube notification."""
    pass


def parse_notification(raw: bytes) -> Notification:
    """
    Decode a raw webhook body into a Notification.

    Args:
        raw: Request body as received

    Returns:
        Decoded notification

    Raises:
        NotificationParseError: If the body is not valid JSON or does not match
            the notification schema
    """
    try:
        return Notification.model_validate_json(raw)
    except ValidationError as e:
        raise NotificationParseError(f"Failed to parse JSON: {e.error_count()} error(s)") from e


def resolve_target(
    notification: Notification,
    property_prefix: str = DEFAULT_PROPERTY_PREFIX
) -> Optional[RoutingTarget]:
    """
    Pick the GitLab resource the comment belongs to.

    A commit wins over a merge request when both identifiers are supplied.

    Args:
        notification: Decoded notification
        property_prefix: Prefix of the routing keys in ``properties``

    Returns:
        Commit or merge request target, or None if neither pair is complete
    """
    properties = notification.properties
    project_id = properties.get(property_prefix + PROJECT_ID_KEY, "")
    commit_sha = properties.get(property_prefix + COMMIT_SHA_KEY, "")
    mr_iid = properties.get(property_prefix + MR_IID_KEY, "")

    if project_id and commit_sha:
        return CommitTarget(project_id=project_id, commit_sha=commit_sha)
    if project_id and mr_iid:
        return MergeRequestTarget(project_id=project_id, mr_iid=mr_iid)
    return None


def decide(
    notification: Notification,
    property_prefix: str = DEFAULT_PROPERTY_PREFIX
) -> Decision:
    """Apply the main-branch rule and routing resolution to a notification."""
    if notification.branch.is_main:
        return Suppressed(reason="Skipping main branch")

    target = resolve_target(notification, property_prefix)
    if target is None:
        return Incomplete(
            reason=(
                f"Missing required properties: {property_prefix}{PROJECT_ID_KEY} with "
                f"{property_prefix}{COMMIT_SHA_KEY} or {property_prefix}{MR_IID_KEY}"
            )
        )

    return Forward(
        target=target,
        comment_input=CommentInput(
            quality_gate=notification.quality_gate,
            branch_url=notification.branch.url,
        ),
    )


def interpret(raw: bytes, property_prefix: str = DEFAULT_PROPERTY_PREFIX) -> Decision:
    """
    Turn a raw webhook body into a publishing decision.

    Args:
        raw: Request body as received
        property_prefix: Prefix of the routing keys in ``properties``

    Returns:
        Suppressed for the main branch, Incomplete when no routing target can
        be resolved, otherwise Forward with the target and comment input

    Raises:
        NotificationParseError: If the body cannot be decoded
    """
    return decide(parse_notification(raw), property_prefix)
