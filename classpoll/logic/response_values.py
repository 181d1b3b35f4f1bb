"""Typed view of a response's value.

Responses are stored flat with four optional slots. Consumers that care
about the element type decode them into exactly one of the answer types
below, which also checks that no unrelated slot is populated.
"""

from dataclasses import dataclass
from typing import Protocol

from classpoll.logic.visibility import Answer

CHOICE_TYPES = frozenset({"single_choice", "single_choice_unique", "multiple_choice"})

SLOT_FOR_TYPE: dict[str, str] = {
    "single_choice": "choice_ids",
    "single_choice_unique": "choice_ids",
    "multiple_choice": "choice_ids",
    "text_input": "text_value",
    "number_input": "number_value",
    "file_upload": "file_id",
}


class ResponseShapeError(ValueError):
    """A stored response does not match its element's type."""


@dataclass(frozen=True)
class TextAnswer:
    text: str


@dataclass(frozen=True)
class NumberAnswer:
    number: float


@dataclass(frozen=True)
class ChoiceAnswer:
    choice_ids: tuple[str, ...]


@dataclass(frozen=True)
class FileAnswer:
    file_id: str


AnswerValue = TextAnswer | NumberAnswer | ChoiceAnswer | FileAnswer


class StoredAnswer(Answer, Protocol):
    file_id: str | None


def decode_response_value(element_type: str, response: StoredAnswer) -> AnswerValue | None:
    """Return the typed answer, or None when the matching slot is empty.

    Raises ResponseShapeError if any other slot holds a value.
    """
    if element_type not in SLOT_FOR_TYPE:
        raise ResponseShapeError(f"Unknown element type '{element_type}'.")
    expected = SLOT_FOR_TYPE[element_type]
    populated = {
        slot
        for slot in ("text_value", "number_value", "choice_ids", "file_id")
        if getattr(response, slot) is not None
    }
    stray = populated - {expected}
    if stray:
        raise ResponseShapeError(
            f"Response for a {element_type} element has unexpected values in: {sorted(stray)}"
        )
    if expected not in populated:
        return None

    if expected == "choice_ids":
        return ChoiceAnswer(tuple(response.choice_ids or ()))
    if expected == "text_value":
        return TextAnswer(str(response.text_value))
    if expected == "number_value":
        return NumberAnswer(float(response.number_value))  # type: ignore[arg-type]
    return FileAnswer(str(response.file_id))
