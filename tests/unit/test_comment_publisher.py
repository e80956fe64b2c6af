"""
Unit tests for the Comment Publisher.
"""

from typing import List

import httpx
import pytest

from sonar_gitlab_webhook.models.notification import QualityGate, QualityGateCondition
from sonar_gitlab_webhook.models.routing import (
    CommentInput,
    CommitTarget,
    GitLabCredentials,
    MergeRequestTarget,
)
from sonar_gitlab_webhook.services.comment_publisher import (
    CommentPublisher,
    PublishError,
    format_comment,
    resolve_endpoint,
)


BASE_URL = "http://gitlab.example.com"


@pytest.fixture
def credentials():
    """GitLab credentials pointing at a fake instance."""
    return GitLabCredentials(base_url=BASE_URL, token="token123")


@pytest.fixture
def comment_input():
    """Quality gate result with two conditions."""
    return CommentInput(
        quality_gate=QualityGate(
            name="Sonar way",
            status="ERROR",
            conditions=[
                QualityGateCondition(
                    metric="new_coverage",
                    operator="LESS_THAN",
                    value="72.5",
                    status="ERROR",
                    error_threshold="80",
                ),
                QualityGateCondition(
                    metric="new_bugs",
                    operator="GREATER_THAN",
                    value="0",
                    status="OK",
                    error_threshold="0",
                ),
            ],
        ),
        branch_url="https://sonar.example.com/dashboard?id=my-service&branch=feature",
    )


def recording_transport(requests: List[httpx.Request], status_code: int = 201, text: str = "{}"):
    """MockTransport that records requests and answers with a fixed response."""

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(status_code, text=text)

    return httpx.MockTransport(handler)


class TestFormatComment:
    """Tests for comment rendering."""

    def test_header_only_without_conditions(self):
        """Test that an empty condition list yields just the header."""
        comment = format_comment(CommentInput(quality_gate=QualityGate(status="OK"), branch_url=""))

        assert comment == "SonarQube Quality Gate: <a href=''>OK</a>\n\n"

    def test_conditions_in_input_order(self, comment_input):
        """Test that each condition gets one line, in order."""
        comment = format_comment(comment_input)

        assert comment == (
            "SonarQube Quality Gate: "
            "<a href='https://sonar.example.com/dashboard?id=my-service&branch=feature'>ERROR</a>\n\n"
            "- new_coverage (LESS_THAN): 72.5 (ERROR) [Threshold: 80]\n"
            "- new_bugs (GREATER_THAN): 0 (OK) [Threshold: 0]\n"
        )

    def test_rendering_is_deterministic(self, comment_input):
        """Test that rendering twice gives identical output."""
        assert format_comment(comment_input) == format_comment(comment_input)

    def test_branch_url_is_not_escaped(self):
        """Test that the URL and status are embedded verbatim."""
        comment = format_comment(
            CommentInput(quality_gate=QualityGate(status="<b>OK</b>"), branch_url="http://x/'a'<b>")
        )

        assert comment.startswith("SonarQube Quality Gate: <a href='http://x/'a'<b>'><b>OK</b></a>")


class TestResolveEndpoint:
    """Tests for GitLab endpoint resolution."""

    def test_commit_endpoint(self):
        """Test commit comments endpoint."""
        url = resolve_endpoint(BASE_URL, CommitTarget(project_id="123", commit_sha="abc123"))

        assert url == "http://gitlab.example.com/api/v4/projects/123/repository/commits/abc123/comments"

    def test_merge_request_endpoint(self):
        """Test merge request notes endpoint."""
        url = resolve_endpoint(BASE_URL, MergeRequestTarget(project_id="123", mr_iid="456"))

        assert url == "http://gitlab.example.com/api/v4/projects/123/merge_requests/456/notes"

    def test_trailing_slash_on_base_url(self):
        """Test that a trailing slash does not double up."""
        url = resolve_endpoint(BASE_URL + "/", MergeRequestTarget(project_id="123", mr_iid="456"))

        assert url == "http://gitlab.example.com/api/v4/projects/123/merge_requests/456/notes"

    def test_identifiers_are_not_encoded(self):
        """Test that path identifiers are inserted verbatim."""
        url = resolve_endpoint(BASE_URL, CommitTarget(project_id="group%2Fproject", commit_sha="abc123"))

        assert "/projects/group%2Fproject/" in url


class TestCommentPublisher:
    """Tests for publishing comments to GitLab."""

    @pytest.mark.asyncio
    async def test_publish_to_commit(self, credentials):
        """Test the header-only comment posted on a commit."""
        requests: List[httpx.Request] = []
        publisher = CommentPublisher(credentials, transport=recording_transport(requests))

        await publisher.publish(
            CommitTarget(project_id="123", commit_sha="abc123"),
            CommentInput(quality_gate=QualityGate(status="OK"), branch_url=""),
        )

        assert len(requests) == 1
        request = requests[0]
        assert request.method == "POST"
        assert str(request.url) == f"{BASE_URL}/api/v4/projects/123/repository/commits/abc123/comments"
        assert request.headers["PRIVATE-TOKEN"] == "token123"
        assert request.headers["Content-Type"] == "application/x-www-form-urlencoded"
        assert request.content == (
            b"note=SonarQube+Quality+Gate%3A+%3Ca+href%3D%27%27%3EOK%3C%2Fa%3E%0A%0A"
        )

    @pytest.mark.asyncio
    async def test_publish_to_merge_request(self, credentials):
        """Test the header-only comment posted as a merge request note."""
        requests: List[httpx.Request] = []
        publisher = CommentPublisher(credentials, transport=recording_transport(requests))

        await publisher.publish(
            MergeRequestTarget(project_id="123", mr_iid="456"),
            CommentInput(quality_gate=QualityGate(status="FAILED"), branch_url=""),
        )

        assert len(requests) == 1
        assert str(requests[0].url) == f"{BASE_URL}/api/v4/projects/123/merge_requests/456/notes"
        assert requests[0].content == (
            b"note=SonarQube+Quality+Gate%3A+%3Ca+href%3D%27%27%3EFAILED%3C%2Fa%3E%0A%0A"
        )

    @pytest.mark.asyncio
    async def test_publish_form_encodes_conditions(self, credentials, comment_input):
        """Test that the full comment round-trips through form encoding."""
        requests: List[httpx.Request] = []
        publisher = CommentPublisher(credentials, transport=recording_transport(requests))

        await publisher.publish(CommitTarget(project_id="123", commit_sha="abc123"), comment_input)

        from urllib.parse import parse_qs
        form = parse_qs(requests[0].content.decode())
        assert form == {"note": [format_comment(comment_input)]}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code", [200, 400, 401, 404, 500])
    async def test_non_created_status_raises(self, credentials, comment_input, status_code):
        """Test that anything but 201 Created is a failure."""
        requests: List[httpx.Request] = []
        publisher = CommentPublisher(
            credentials,
            transport=recording_transport(requests, status_code, '{"message":"401 Unauthorized"}'),
        )

        with pytest.raises(PublishError) as exc_info:
            await publisher.publish(CommitTarget(project_id="123", commit_sha="abc123"), comment_input)

        assert exc_info.value.status_code == status_code
        assert exc_info.value.detail == '{"message":"401 Unauthorized"}'
        assert len(requests) == 1

    @pytest.mark.asyncio
    async def test_non_created_status_with_empty_body(self, credentials, comment_input):
        """Test failure reporting when GitLab returns no body."""
        publisher = CommentPublisher(credentials, transport=recording_transport([], 502, ""))

        with pytest.raises(PublishError) as exc_info:
            await publisher.publish(MergeRequestTarget(project_id="123", mr_iid="456"), comment_input)

        assert exc_info.value.status_code == 502
        assert exc_info.value.detail == ""

    @pytest.mark.asyncio
    async def test_transport_error_raises_once(self, credentials, comment_input):
        """Test that a connection failure is reported without retrying."""
        calls = {"n": 0}

        def handler(request: httpx.Request) -> httpx.Response:
            calls["n"] += 1
            raise httpx.ConnectError("Connection refused", request=request)

        publisher = CommentPublisher(credentials, transport=httpx.MockTransport(handler))

        with pytest.raises(PublishError) as exc_info:
            await publisher.publish(CommitTarget(project_id="123", commit_sha="abc123"), comment_input)

        assert exc_info.value.status_code is None
        assert "Connection refused" in exc_info.value.detail
        assert calls["n"] == 1

    @pytest.mark.asyncio
    async def test_timeout_raises_publish_error(self, credentials, comment_input):
        """Test that a timeout is reported as a publish failure."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("", request=request)

        publisher = CommentPublisher(credentials, transport=httpx.MockTransport(handler), timeout=1.0)

        with pytest.raises(PublishError) as exc_info:
            await publisher.publish(CommitTarget(project_id="123", commit_sha="abc123"), comment_input)

        assert exc_info.value.detail == "ReadTimeout"

    @pytest.mark.asyncio
    async def test_non_ascii_token_raises_publish_error(self, comment_input):
        """Test that a token httpx cannot put in a header is a publish failure."""
        requests: List[httpx.Request] = []
        publisher = CommentPublisher(
            GitLabCredentials(base_url=BASE_URL, token="tök€n"),
            transport=recording_transport(requests),
        )

        with pytest.raises(PublishError) as exc_info:
            await publisher.publish(CommitTarget(project_id="123", commit_sha="abc123"), comment_input)

        assert exc_info.value.status_code is None
        assert "ascii" in exc_info.value.detail
        assert requests == []
