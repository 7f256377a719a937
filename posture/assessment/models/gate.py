"""Declarative gate models.

A gate is a small boolean tree: every ``all`` condition holds, at least one
``any`` condition holds, and no ``none`` condition holds. Each absent clause
is vacuously satisfied, ``any`` included, so an empty gate always passes.
"""

from collections.abc import Iterator
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

Clause = Literal["all", "any", "none"]
CLAUSES: tuple[Clause, ...] = ("all", "any", "none")


class GateCondition(BaseModel):
    """A single leaf predicate over one answer or fact key.

    ``when`` is kept as a plain string so content carrying an unknown
    comparator still loads; such conditions evaluate to ``False``.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    question_id: str = Field(..., alias="questionId", min_length=1)
    when: str = Field(..., description="Comparator name")
    value: Any = None
    values: list[Any] | None = None


class Gate(BaseModel):
    """Conjunction of all/any/none clauses over gate conditions."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    all: list[GateCondition] | None = None
    any: list[GateCondition] | None = None
    none: list[GateCondition] | None = None

    @property
    def is_empty(self) -> bool:
        """True when no clause is present; such a gate passes unconditionally."""
        return self.all is None and self.any is None and self.none is None

    def iter_conditions(self) -> Iterator[tuple[Clause, GateCondition]]:
        """Yield (clause, condition) pairs in declaration order."""
        for clause in CLAUSES:
            for condition in getattr(self, clause) or []:
                yield clause, condition

    def references(self) -> list[str]:
        """Distinct keys this gate reads, in first-seen order."""
        seen: dict[str, None] = {}
        for _, condition in self.iter_conditions():
            seen.setdefault(condition.question_id, None)
        return list(seen)
