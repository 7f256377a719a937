"""Question bank loading from JSON-compatible content.

Accepted shapes:

- ``{"questions": [...], "suites": [...]}``
- ``{"domains": [{"id", "levels": [{"questions": [...]}]}], "suites": [...]}``
- a bare list of questions

Suites declare gates as ``gates`` or ``unlock.gates`` and members as
``questionIds`` or embedded ``questions`` (appended to the bank after the
domain questions, in suite order). Questions may still carry the older
``conditions: {include, exclude}`` fact maps, which are translated into an
equivalent gate.
"""

import json
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from posture.assessment.models import Comparator, Phase, QuestionBank
from posture.exceptions import ContentLoadError
from posture.observability.logging import get_logger

logger = get_logger(__name__)

WILDCARD = "*"

_PHASE_ALIASES = {
    "assessment": Phase.CORE.value,
    "deep_dive": Phase.DEEP_DIVE.value,
    "deepdive": Phase.DEEP_DIVE.value,
}


def translate_legacy_conditions(conditions: dict[str, Any]) -> dict[str, Any]:
    """Translate an ``{include, exclude}`` fact map into a gate.

    ``include`` entries become ``all`` conditions and ``exclude`` entries
    become ``none`` conditions: ``"*"`` tests presence, a list tests
    membership and any other value tests equality.
    """

    def to_conditions(mapping: dict[str, Any]) -> list[dict[str, Any]]:
        result = []
        for key, expected in mapping.items():
            if expected == WILDCARD:
                result.append({"questionId": key, "when": Comparator.EXISTS.value})
            elif isinstance(expected, list):
                result.append({"questionId": key, "when": Comparator.IN.value, "values": expected})
            else:
                result.append({"questionId": key, "when": Comparator.EQUALS.value, "value": expected})
        return result

    gate: dict[str, Any] = {}
    if conditions.get("include"):
        gate["all"] = to_conditions(conditions["include"])
    if conditions.get("exclude"):
        gate["none"] = to_conditions(conditions["exclude"])
    return gate


def _as_list(value: Any, location: str) -> list[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ContentLoadError(f"{location} must be a list, got {type(value).__name__}")
    return value


def _normalize_gate(raw: Any, location: str) -> dict[str, Any]:
    if not isinstance(raw, dict):
        raise ContentLoadError(f"{location}: gate must be an object, got {type(raw).__name__}")
    if "include" in raw or "exclude" in raw:
        return translate_legacy_conditions(raw)
    gate = {clause: raw[clause] for clause in ("all", "any", "none") if clause in raw}
    # Older suite gates list bare conditions, all of which must hold
    if "conditions" in raw and "all" not in gate:
        gate["all"] = raw["conditions"]
    return gate


def _normalize_question(raw: Any, domain: str | None, location: str) -> dict[str, Any]:
    if not isinstance(raw, dict):
        raise ContentLoadError(f"{location}: question must be an object")
    question = dict(raw)

    if "gates" in question:
        gates = question.pop("gates")
        if isinstance(gates, list):
            if len(gates) > 1:
                raise ContentLoadError(
                    f"{location}: question {question.get('id')} declares {len(gates)} gates; "
                    "combine them into one conditions gate"
                )
            gates = gates[0] if gates else {}
        question.setdefault("conditions", gates)

    if question.get("conditions") is not None:
        question["conditions"] = _normalize_gate(question["conditions"], location)
    else:
        question.pop("conditions", None)

    phase = question.get("phase")
    if isinstance(phase, str):
        question["phase"] = _PHASE_ALIASES.get(phase, phase)
    elif phase is None:
        question.pop("phase", None)

    if domain is not None:
        question.setdefault("domain", domain)
    return question


def _normalize_suite(
    raw: Any,
    location: str,
    embedded: list[dict[str, Any]],
) -> dict[str, Any]:
    if not isinstance(raw, dict):
        raise ContentLoadError(f"{location}: suite must be an object")
    suite = {k: v for k, v in raw.items() if k not in ("unlock", "questions", "gates")}

    gates = raw.get("gates")
    if gates is None and isinstance(raw.get("unlock"), dict):
        gates = raw["unlock"].get("gates")
    suite["gates"] = [
        _normalize_gate(gate, f"{location}.gates[{i}]")
        for i, gate in enumerate(_as_list(gates, f"{location}.gates"))
    ]

    member_ids = list(raw.get("questionIds") or raw.get("question_ids") or [])
    for i, question in enumerate(_as_list(raw.get("questions"), f"{location}.questions")):
        normalized = _normalize_question(question, None, f"{location}.questions[{i}]")
        embedded.append(normalized)
        member_ids.append(normalized.get("id"))
    suite["questionIds"] = member_ids
    suite.pop("question_ids", None)
    return suite


def load_question_bank(data: Any) -> QuestionBank:
    """Build a ``QuestionBank`` from parsed JSON content.

    Raises:
        ContentLoadError: If the content shape or any model is invalid
    """
    if isinstance(data, list):
        data = {"questions": data}
    if not isinstance(data, dict):
        raise ContentLoadError(f"Unrecognized content structure: {type(data).__name__}")

    questions: list[dict[str, Any]] = [
        _normalize_question(q, None, f"questions[{i}]")
        for i, q in enumerate(_as_list(data.get("questions"), "questions"))
    ]

    for d, domain in enumerate(_as_list(data.get("domains"), "domains")):
        domain_id = domain.get("id") if isinstance(domain, dict) else None
        if not domain_id:
            raise ContentLoadError(f"domains[{d}]: domain missing id")
        levels = _as_list(domain.get("levels"), f"domains[{d}].levels")
        for l_index, level in enumerate(levels):
            level_location = f"domains[{d}].levels[{l_index}]"
            if not isinstance(level, dict):
                raise ContentLoadError(f"{level_location}: level must be an object")
            level_questions = _as_list(level.get("questions"), f"{level_location}.questions")
            for q_index, raw in enumerate(level_questions):
                location = f"{level_location}.questions[{q_index}]"
                questions.append(_normalize_question(raw, domain_id, location))

    embedded: list[dict[str, Any]] = []
    suites = [
        _normalize_suite(raw, f"suites[{i}]", embedded)
        for i, raw in enumerate(_as_list(data.get("suites"), "suites"))
    ]
    questions.extend(embedded)

    try:
        bank = QuestionBank.model_validate(
            {"version": data.get("version", 1), "questions": questions, "suites": suites}
        )
    except ValidationError as e:
        raise ContentLoadError(f"Invalid question bank content: {e}") from e

    logger.info(
        "question_bank_loaded",
        questions=len(bank.questions),
        suites=len(bank.suites),
    )
    return bank


def load_question_bank_file(path: Path | str) -> QuestionBank:
    """Load a question bank from a JSON file.

    Raises:
        ContentLoadError: If the file is missing, not JSON, or invalid content
    """
    file_path = Path(path)
    try:
        data = json.loads(file_path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ContentLoadError(f"Content file not found: {file_path}") from e
    except json.JSONDecodeError as e:
        raise ContentLoadError(f"Failed to parse {file_path}: {e}") from e
    return load_question_bank(data)
