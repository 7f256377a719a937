"""Exception hierarchy for the assessment engine.

Gate evaluation and visibility resolution never raise these; they are
reserved for content problems caught at load time and for callers that
reference questions or options the bank does not define.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from posture.assessment.models.issues import ContentIssue


class PostureError(Exception):
    """Base exception for all engine errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ContentLoadError(PostureError):
    """Raised when question-bank content cannot be parsed."""


class ContentIntegrityError(PostureError):
    """Raised when content fails validation (duplicates, dangling ids, cycles)."""

    def __init__(self, message: str, issues: "list[ContentIssue] | None" = None) -> None:
        super().__init__(message)
        self.issues = issues or []


class UnknownQuestionError(PostureError):
    """Raised when an answer is submitted for a question the bank lacks."""

    def __init__(self, question_id: str) -> None:
        super().__init__(f"Unknown question: {question_id}")
        self.question_id = question_id


class UnknownOptionError(PostureError):
    """Raised when an answer names an option the question does not offer."""

    def __init__(self, question_id: str, option_id: str) -> None:
        super().__init__(f"Question {question_id} has no option {option_id!r}")
        self.question_id = question_id
        self.option_id = option_id


class ConfigError(PostureError):
    """Raised when configuration files are unreadable or name unknown sections."""
