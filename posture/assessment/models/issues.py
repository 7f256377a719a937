"""Content validation issue models."""

from enum import Enum

from pydantic import BaseModel, Field


class Severity(str, Enum):
    """How serious a content issue is; any ERROR fails validation."""

    ERROR = "error"
    WARNING = "warning"


class ContentIssue(BaseModel):
    """A single problem found in question-bank content."""

    severity: Severity
    code: str = Field(..., description="Stable machine-readable issue code")
    message: str
    location: str | None = Field(default=None, description="Question, suite or gate path")


class ValidationResult(BaseModel):
    """Outcome of validating a question bank."""

    valid: bool
    issues: list[ContentIssue] = Field(default_factory=list)

    @property
    def errors(self) -> list[ContentIssue]:
        return [issue for issue in self.issues if issue.severity == Severity.ERROR]

    @property
    def warnings(self) -> list[ContentIssue]:
        return [issue for issue in self.issues if issue.severity == Severity.WARNING]
