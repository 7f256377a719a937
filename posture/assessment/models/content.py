"""Question bank models.

Questions and suites are static content; the engine only ever computes
their visibility. Question ids and suite member ids share one namespace.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from posture.assessment.models.enums import Phase
from posture.assessment.models.gate import Gate
from posture.assessment.models.values import FactValue


class AnswerOption(BaseModel):
    """One selectable answer and the facts it establishes."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = Field(..., min_length=1)
    text: str = ""
    facts: dict[str, FactValue] = Field(default_factory=dict)
    points: int = 0
    feedback: str | None = None


class Question(BaseModel):
    """A question definition with its own visibility gate."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = Field(..., min_length=1)
    text: str = ""
    conditions: Gate = Field(default_factory=Gate)
    priority: int = 0
    phase: Phase = Phase.CORE
    options: list[AnswerOption] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    domain: str | None = None
    description: str | None = None

    def get_option(self, option_id: str) -> AnswerOption | None:
        """Find an option by id."""
        for option in self.options:
            if option.id == option_id:
                return option
        return None


class Suite(BaseModel):
    """A bundle of questions unlocked when every gate passes."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: str = Field(..., min_length=1)
    title: str = ""
    description: str = ""
    gates: list[Gate] = Field(default_factory=list)
    question_ids: list[str] = Field(default_factory=list, alias="questionIds")
    priority: int = 0


class QuestionBank(BaseModel):
    """All questions (in declaration order) and suites of an assessment.

    Lookups resolve to the first declaration of an id; duplicate ids are a
    content error reported by ``ContentValidator`` rather than here.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    version: int = 1
    questions: list[Question] = Field(default_factory=list)
    suites: list[Suite] = Field(default_factory=list)

    _questions_by_id: dict[str, Question] = PrivateAttr(default_factory=dict)
    _order: dict[str, int] = PrivateAttr(default_factory=dict)
    _suite_of: dict[str, str] = PrivateAttr(default_factory=dict)

    def model_post_init(self, __context: Any) -> None:
        for index, question in enumerate(self.questions):
            self._questions_by_id.setdefault(question.id, question)
            self._order.setdefault(question.id, index)
        for suite in self.suites:
            for question_id in suite.question_ids:
                self._suite_of.setdefault(question_id, suite.id)

    def get_question(self, question_id: str) -> Question | None:
        return self._questions_by_id.get(question_id)

    def get_suite(self, suite_id: str) -> Suite | None:
        for suite in self.suites:
            if suite.id == suite_id:
                return suite
        return None

    def declaration_index(self, question_id: str) -> int:
        """Position of a question in the bank, used as the final sort key."""
        return self._order.get(question_id, len(self._order))

    def suite_for(self, question_id: str) -> str | None:
        """Id of the suite owning a question, if any."""
        return self._suite_of.get(question_id)

    @property
    def base_question_ids(self) -> list[str]:
        """Questions not owned by any suite, in declaration order."""
        return [q.id for q in self.questions if q.id not in self._suite_of]
