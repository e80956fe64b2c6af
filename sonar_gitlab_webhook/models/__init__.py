"""Data models for the SonarQube to GitLab webhook bridge."""

from .api_response import WebhookResponse
from .notification import (
    Branch,
    Notification,
    Project,
    QualityGate,
    QualityGateCondition,
)
from .routing import (
    CommentInput,
    CommitTarget,
    Decision,
    Forward,
    GitLabCredentials,
    Incomplete,
    MergeRequestTarget,
    RoutingTarget,
    Suppressed,
)

__all__ = [
    # Notification models
    "Notification",
    "Project",
    "Branch",
    "QualityGate",
    "QualityGateCondition",
    # Routing models
    "CommitTarget",
    "MergeRequestTarget",
    "RoutingTarget",
    "CommentInput",
    "Suppressed",
    "Incomplete",
    "Forward",
    "Decision",
    "GitLabCredentials",
    # API response models
    "WebhookResponse",
]
