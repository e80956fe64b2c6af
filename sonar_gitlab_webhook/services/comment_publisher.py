"""
Comment Publisher component.

Renders quality gate results as GitLab comments and posts them through the
GitLab REST API v4, either on a commit or as a merge request note.
A single attempt is made per notification.
"""

import time
from typing import Optional

import httpx

from sonar_gitlab_webhook.models.routing import (
    CommentInput,
    CommitTarget,
    GitLabCredentials,
    MergeRequestTarget,
    RoutingTarget,
)
from sonar_gitlab_webhook.utils.logging import get_logger, log_api_call

logger = get_logger(__name__)


class PublishError(Exception):
    """Comment could not be created in GitLab."""

    def __init__(self, message: str, status_code: Optional[int] = None, detail: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail


def format_comment(comment_input: CommentInput) -> str:
    """
    Render the quality gate result as the comment body.

    The branch URL and status are embedded as-is, without HTML escaping.

    Args:
        comment_input: Quality gate and branch URL

    Returns:
        Comment text, header first and one line per condition
    """
    quality_gate = comment_input.quality_gate
    comment = f"SonarQube Quality Gate: <a href='{comment_input.branch_url}'>{quality_gate.status}</a>\n\n"
    for condition in quality_gate.conditions:
        comment += (
            f"- {condition.metric} ({condition.operator}): {condition.value} "
            f"({condition.status}) [Threshold: {condition.error_threshold}]\n"
        )
    return comment


def resolve_endpoint(base_url: str, target: RoutingTarget) -> str:
    """
    Build the GitLab API URL that accepts comments for the target.

    Identifiers are inserted verbatim.

    Args:
        base_url: GitLab base URL
        target: Commit or merge request target

    Returns:
        Absolute endpoint URL
    """
    base = base_url.rstrip("/")
    if isinstance(target, CommitTarget):
        return f"{base}/api/v4/projects/{target.project_id}/repository/commits/{target.commit_sha}/comments"
    if isinstance(target, MergeRequestTarget):
        return f"{base}/api/v4/projects/{target.project_id}/merge_requests/{target.mr_iid}/notes"
    raise TypeError(f"Unsupported routing target: {target!r}")


class CommentPublisher:
    """Publishes quality gate comments to GitLab."""

    def __init__(
        self,
        credentials: GitLabCredentials,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: Optional[float] = None,
    ):
        """
        Initialize the Comment Publisher.

        Args:
            credentials: GitLab base URL and private access token
            transport: Optional httpx transport (tests pass a MockTransport)
            timeout: Request timeout in seconds, httpx default when omitted
        """
        self._credentials = credentials
        self._transport = transport
        self._timeout = timeout

    async def publish(self, target: RoutingTarget, comment_input: CommentInput) -> None:
        """
        Post the rendered comment on the target.

        Args:
            target: Commit or merge request to comment on
            comment_input: Quality gate and branch URL to render

        Raises:
            PublishError: If GitLab does not answer 201 Created or the request
                cannot be sent
        """
        endpoint = resolve_endpoint(self._credentials.base_url, target)
        comment = format_comment(comment_input)

        start_time = time.monotonic()
        try:
            async with self._client() as client:
                response = await client.post(
                    endpoint,
                    data={"note": comment},
                    headers={
                        "PRIVATE-TOKEN": self._credentials.token,
                        "Content-Type": "application/x-www-form-urlencoded",
                    },
                )
        except (httpx.HTTPError, httpx.InvalidURL, UnicodeEncodeError) as e:
            duration_ms = (time.monotonic() - start_time) * 1000
            reason = str(e) or type(e).__name__
            log_api_call(logger, "gitlab", endpoint, "POST", duration_ms=duration_ms, error=reason)
            raise PublishError(f"Failed to post comment: {reason}", detail=reason) from e

        duration_ms = (time.monotonic() - start_time) * 1000
        if response.status_code != httpx.codes.CREATED:
            log_api_call(
                logger,
                "gitlab",
                endpoint,
                "POST",
                status_code=response.status_code,
                duration_ms=duration_ms,
                error=response.text or f"HTTP {response.status_code}",
            )
            raise PublishError(
                f"Failed to post comment: {response.text}",
                status_code=response.status_code,
                detail=response.text,
            )

        log_api_call(logger, "gitlab", endpoint, "POST", status_code=response.status_code, duration_ms=duration_ms)
        logger.debug(f"Posted quality gate comment on {target.describe()}")

    def _client(self) -> httpx.AsyncClient:
        kwargs = {}
        if self._transport is not None:
            kwargs["transport"] = self._transport
        if self._timeout is not None:
            kwargs["timeout"] = self._timeout
        return httpx.AsyncClient(**kwargs)


def get_comment_publisher() -> CommentPublisher:
    """
    Factory function to create CommentPublisher with settings from config.

    Returns:
        CommentPublisher instance configured with application settings
    """
    from sonar_gitlab_webhook.config import settings

    return CommentPublisher(credentials=settings.gitlab_credentials())
