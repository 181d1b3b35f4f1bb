"""Conditional visibility of elements for one participant.

An element may carry a rule that makes it depend on the participant's answer
to an earlier element. Evaluation is fail-closed: an unanswered dependency,
an unknown condition or an answer in the wrong slot all hide the element.
"""

import enum
import math
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Protocol, TypeVar


class Condition(enum.StrEnum):
    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    CONTAINS = "contains"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    CHOICE_SELECTED = "choice_selected"
    CHOICE_NOT_SELECTED = "choice_not_selected"


class Answer(Protocol):
    text_value: str | None
    number_value: float | None
    choice_ids: list[str] | None


class Gated(Protocol):
    pk: Any
    is_active: bool
    conditional_logic: dict[str, Any] | None


GatedT = TypeVar("GatedT", bound=Gated)


@dataclass(frozen=True)
class ConditionalLogic:
    enabled: bool
    depends_on_element_id: int
    condition: str
    value: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ConditionalLogic":
        """Build from the stored JSON shape. Raises ValueError on a malformed rule."""
        try:
            depends_on = int(data["dependsOnElementId"])
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError("Conditional logic needs a dependsOnElementId.") from e
        condition = data.get("condition")
        valid = {c.value for c in Condition}
        if condition not in valid:
            raise ValueError(
                f"Invalid condition '{condition}'. Must be one of: {valid}"
            )
        value = data.get("value")
        return cls(
            enabled=bool(data.get("enabled", False)),
            depends_on_element_id=depends_on,
            condition=str(condition),
            value=None if value is None else str(value),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "enabled": self.enabled,
            "dependsOnElementId": self.depends_on_element_id,
            "condition": self.condition,
        }
        if self.value is not None:
            data["value"] = self.value
        return data


_LEADING_FLOAT = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def parse_leading_float(raw: str) -> float | None:
    """Parse the numeric prefix of ``raw`` ("3.5 kg" -> 3.5); None if there is none."""
    match = _LEADING_FLOAT.match(raw)
    if match is not None:
        return float(match.group(1))
    stripped = raw.strip()
    for sign, prefix in ((1.0, "Infinity"), (1.0, "+Infinity"), (-1.0, "-Infinity")):
        if stripped.startswith(prefix):
            return sign * math.inf
    return None


def format_number(number: float) -> str:
    """Render a stored number the way participants' clients display it."""
    if math.isfinite(number) and float(number).is_integer() and abs(number) < 1e21:
        return str(int(number))
    if math.isnan(number):
        return "NaN"
    if math.isinf(number):
        return "Infinity" if number > 0 else "-Infinity"
    return repr(float(number))


def evaluate_condition(condition: str, value: str | None, answer: Answer) -> bool:
    """Evaluate one rule against the dependency's answer."""
    text = answer.text_value
    number = answer.number_value
    choice_ids = answer.choice_ids

    if condition == Condition.EQUALS:
        if text is not None:
            return text == value
        if number is not None:
            return format_number(number) == value
        return False

    if condition == Condition.NOT_EQUALS:
        if text is not None:
            return text != value
        if number is not None:
            return format_number(number) != value
        return False

    if condition == Condition.CONTAINS:
        if text is not None and value:
            return value.lower() in text.lower()
        return False

    if condition in (Condition.GREATER_THAN, Condition.LESS_THAN):
        if number is None or not value:
            return False
        threshold = parse_leading_float(value)
        if threshold is None:
            return False
        if condition == Condition.GREATER_THAN:
            return number > threshold
        return number < threshold

    if condition == Condition.CHOICE_SELECTED:
        if choice_ids is not None and value:
            return value in choice_ids
        return False

    if condition == Condition.CHOICE_NOT_SELECTED:
        if choice_ids is not None and value:
            return value not in choice_ids
        return False

    return False


def is_visible(element: Gated, answers: Mapping[Any, Answer]) -> bool:
    if not element.is_active:
        return False
    raw = element.conditional_logic
    if not raw or not raw.get("enabled"):
        return True
    try:
        rule = ConditionalLogic.from_dict(raw)
    except ValueError:
        return False
    answer = answers.get(rule.depends_on_element_id)
    if answer is None:
        return False
    return evaluate_condition(rule.condition, rule.value, answer)


def filter_visible(
    elements: Iterable[GatedT], answers: Mapping[Any, Answer]
) -> list[GatedT]:
    """Keep the elements this participant should see, preserving input order.

    ``answers`` maps element pk to the participant's response for it.
    """
    return [element for element in elements if is_visible(element, answers)]
