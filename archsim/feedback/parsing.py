"""Parsing of free-form model responses into SupplementaryFeedback."""

from __future__ import annotations

import json
import logging
import re

from pydantic import ValidationError

from archsim.errors import FeedbackUnavailable
from archsim.feedback.models import SupplementaryFeedback

logger = logging.getLogger(__name__)

_JSON_BLOCK = re.compile(r"\{[\s\S]*\}")
# Control characters other than tab, newline and carriage return
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")
_GRADE = re.compile(r'"architectureGrade"\s*:\s*"([A-F])')

_TEXT_FIELDS = (
    "detailedAnalysis",
    "optimalSolution",
    "costOptimization",
    "scalabilityNotes",
    "securityConsiderations",
)
_LIST_FIELDS = ("pros", "cons")
_FEEDBACK_KEYS = frozenset({*_TEXT_FIELDS, *_LIST_FIELDS, "architectureGrade"})


def _unescape(value: str) -> str:
    return value.replace("\\n", "\n").replace("\\r", "\r").replace("\\t", "\t").replace('\\"', '"')


def _extract_text(text: str, name: str) -> str | None:
    match = re.search(rf'"{name}"\s*:\s*"((?:[^"\\]|\\.)*)"', text)
    return _unescape(match.group(1)) if match else None


def _extract_list(text: str, name: str) -> list[str] | None:
    match = re.search(rf'"{name}"\s*:\s*\[([^\]]*)\]', text)
    if match is None:
        return None
    items = re.findall(r'"((?:[^"\\]|\\.)*)"', match.group(1))
    return [_unescape(item) for item in items]


def parse_fields(text: str) -> SupplementaryFeedback | None:
    """Field-by-field recovery from almost-JSON text. None if nothing matched."""
    data: dict[str, object] = {}
    for name in _TEXT_FIELDS:
        value = _extract_text(text, name)
        if value is not None:
            data[name] = value
    for name in _LIST_FIELDS:
        items = _extract_list(text, name)
        if items is not None:
            data[name] = items
    grade = _GRADE.search(text)
    if grade is not None:
        data["architectureGrade"] = grade.group(1)

    if not data:
        return None
    return SupplementaryFeedback.model_validate(data)


def parse_feedback_text(text: str) -> SupplementaryFeedback:
    """Parse the first JSON object in a response, falling back to field extraction.

    An object carrying none of the feedback fields is not feedback. Raises
    FeedbackUnavailable when neither route yields any feedback field.
    """
    match = _JSON_BLOCK.search(text)
    if match is not None:
        cleaned = _CONTROL_CHARS.sub("", match.group(0))
        try:
            data = json.loads(cleaned, strict=False)
            if isinstance(data, dict) and _FEEDBACK_KEYS.intersection(data):
                return SupplementaryFeedback.model_validate(data)
            logger.debug("JSON object has no feedback fields")
        except (json.JSONDecodeError, ValidationError) as e:
            logger.debug("falling back to field extraction: %s", e)

    feedback = parse_fields(text)
    if feedback is None:
        raise FeedbackUnavailable("response did not contain feedback")
    return feedback
