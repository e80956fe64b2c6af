"""Routing targets, interpreter decisions and GitLab credentials."""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from sonar_gitlab_webhook.models.notification import QualityGate


class CommitTarget(BaseModel):
    """Comment thread of a single commit."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["commit"] = "commit"
    project_id: str = Field(min_length=1)
    commit_sha: str = Field(min_length=1)

    def describe(self) -> str:
        return f"commit {self.commit_sha} in project {self.project_id}"


class MergeRequestTarget(BaseModel):
    """Notes of a merge request, addressed by its project-scoped IID."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["merge_request"] = "merge_request"
    project_id: str = Field(min_length=1)
    mr_iid: str = Field(min_length=1)

    def describe(self) -> str:
        return f"merge request !{self.mr_iid} in project {self.project_id}"


RoutingTarget = Annotated[
    Union[CommitTarget, MergeRequestTarget],
    Field(discriminator="kind"),
]


class CommentInput(BaseModel):
    """Everything needed to render the comment without the raw payload."""

    model_config = ConfigDict(frozen=True)

    quality_gate: QualityGate
    branch_url: str = ""


class Suppressed(BaseModel):
    """Notification intentionally not forwarded (main branch)."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["suppressed"] = "suppressed"
    reason: str


class Incomplete(BaseModel):
    """Notification without a usable routing target."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["incomplete"] = "incomplete"
    reason: str


class Forward(BaseModel):
    """Notification to be published as a GitLab comment."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["forward"] = "forward"
    target: RoutingTarget
    comment_input: CommentInput


Decision = Annotated[
    Union[Suppressed, Incomplete, Forward],
    Field(discriminator="kind"),
]


class GitLabCredentials(BaseModel):
    """GitLab API location and private access token."""

    model_config = ConfigDict(frozen=True)

    base_url: str = ""
    token: str = ""
