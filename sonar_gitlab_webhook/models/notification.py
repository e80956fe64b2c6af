"""SonarQube webhook notification data models."""

from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class _SonarModel(BaseModel):
    """Base for payload models: camelCase on the wire, immutable once decoded."""

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        # null on the wire means "not set", so the field default applies
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data


class QualityGateCondition(_SonarModel):
    """Evaluation of a single quality gate condition."""

    metric: str = ""
    operator: str = ""
    value: str = ""
    status: str = ""
    error_threshold: str = Field(default="", alias="errorThreshold")


class QualityGate(_SonarModel):
    """Quality gate verdict with its conditions in evaluation order."""

    name: str = ""
    status: str = ""  # 'OK', 'ERROR', 'FAILED', ...
    conditions: List[QualityGateCondition] = []


class Project(_SonarModel):
    """Analysed SonarQube project."""

    key: str = ""
    name: str = ""
    url: str = ""


class Branch(_SonarModel):
    """Analysed branch or pull request."""

    name: str = ""
    type: str = ""  # 'BRANCH' or 'PULL_REQUEST'
    is_main: bool = Field(default=False, alias="isMain")
    url: str = ""


class Notification(_SonarModel):
    """Quality gate notification posted by SonarQube."""

    server_url: str = Field(default="", alias="serverUrl")
    task_id: str = Field(default="", alias="taskId")
    status: str = ""
    analysed_at: str = Field(default="", alias="analysedAt")
    revision: str = ""
    changed_at: str = Field(default="", alias="changedAt")
    project: Project = Project()
    branch: Branch = Branch()
    quality_gate: QualityGate = Field(default=QualityGate(), alias="qualityGate")
    properties: Dict[str, str] = {}

    @field_validator("properties", mode="before")
    @classmethod
    def _drop_null_properties(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return {key: item for key, item in value.items() if item is not None}
        return value
