"""JSON shapes for the HTTP API. Keys are camelCase to match the web client."""

import logging
from typing import Any

from classpoll.data.models import Element, Response, Session
from classpoll.logic.response_values import (
    ChoiceAnswer,
    FileAnswer,
    NumberAnswer,
    ResponseShapeError,
    TextAnswer,
    decode_response_value,
)
from classpoll.readers.responses import ElementResults, SessionResults
from classpoll.readers.storage import resolve_storage_url

logger = logging.getLogger(__name__)


def serialize_session(session: Session, include_private: bool = False) -> dict[str, Any]:
    """Session as shown to participants; ``include_private`` adds teacher-only fields."""
    data: dict[str, Any] = {
        "id": session.pk,
        "title": session.title,
        "description": session.description,
        "isActive": session.is_active,
        "sessionCode": session.session_code,
        "resultsPublic": session.results_public,
        "completionTitle": session.completion_title,
        "completionSubtitle": session.completion_subtitle,
        "completionDescription": session.completion_description,
        "completionImageId": session.completion_image_id or None,
        "completionImageUrl": resolve_storage_url(session.completion_image_id),  # pyright: ignore[reportUnknownMemberType, reportUnknownArgumentType]
        "bgColor": session.bg_color or None,
        "accentColor": session.accent_color or None,
        "createdAt": session.created_at.isoformat(),  # pyright: ignore[reportUnknownMemberType]
    }
    if include_private:
        data["teacherId"] = session.teacher_id  # pyright: ignore[reportAttributeAccessIssue]
        data["resultsPinCode"] = session.results_pin_code or None
    return data


def _serialize_choice(choice: dict[str, Any]) -> dict[str, Any]:
    return {**choice, "imageUrl": resolve_storage_url(choice.get("imageId"))}


def serialize_element(element: Element) -> dict[str, Any]:
    """Element with its image and choice-image URLs resolved."""
    choices = element.choices  # pyright: ignore[reportUnknownMemberType]
    return {
        "id": element.pk,
        "sessionId": element.session_id,  # pyright: ignore[reportAttributeAccessIssue]
        "type": element.element_type,
        "title": element.title,
        "subtitle": element.subtitle or None,
        "description": element.description or None,
        "imageId": element.image_id or None,
        "imageUrl": resolve_storage_url(element.image_id),  # pyright: ignore[reportUnknownMemberType, reportUnknownArgumentType]
        "order": element.order,
        "isActive": element.is_active,
        "choices": None if choices is None else [_serialize_choice(c) for c in choices],  # pyright: ignore[reportUnknownVariableType]
        "minValue": element.min_value,
        "maxValue": element.max_value,
        "step": element.step,
        "conditionalLogic": element.conditional_logic,
    }


def _serialize_value(response: Response) -> dict[str, Any] | None:
    try:
        value = decode_response_value(response.element.element_type, response)  # pyright: ignore[reportUnknownMemberType, reportUnknownArgumentType, reportArgumentType]
    except ResponseShapeError as e:
        logger.warning("Response %s: %s", response.pk, e)
        return None
    if isinstance(value, TextAnswer):
        return {"kind": "text", "text": value.text}
    if isinstance(value, NumberAnswer):
        return {"kind": "number", "number": value.number}
    if isinstance(value, ChoiceAnswer):
        return {"kind": "choices", "choiceIds": list(value.choice_ids)}
    if isinstance(value, FileAnswer):
        return {"kind": "file", "fileId": value.file_id}
    return None


def serialize_response(response: Response) -> dict[str, Any]:
    return {
        "id": response.pk,
        "sessionId": response.session_id,  # pyright: ignore[reportAttributeAccessIssue]
        "elementId": response.element_id,  # pyright: ignore[reportAttributeAccessIssue]
        "participantId": response.participant_id,
        "textValue": response.text_value,
        "numberValue": response.number_value,
        "choiceIds": response.choice_ids,
        "fileId": response.file_id,
        "fileUrl": resolve_storage_url(response.file_id),  # pyright: ignore[reportUnknownMemberType, reportUnknownArgumentType]
        "value": _serialize_value(response),
    }


def _serialize_element_results(results: ElementResults) -> dict[str, Any]:
    stats = results.number_stats
    return {
        "element": serialize_element(results.element),
        "responded": results.responded,
        "choices": [
            {
                "choiceId": tally.choice_id,
                "text": tally.text,
                "isCorrect": tally.is_correct,
                "count": tally.count,
                "percentage": tally.percentage,
            }
            for tally in results.choices
        ],
        "numberStats": None
        if stats is None
        else {
            "count": stats.count,
            "average": stats.average,
            "min": stats.minimum,
            "max": stats.maximum,
        },
        "textAnswers": results.text_answers,
        "fileUrls": results.file_urls,
    }


def serialize_results(results: SessionResults) -> dict[str, Any]:
    return {
        "session": serialize_session(results.session),
        "totalParticipants": results.total_participants,
        "elements": [_serialize_element_results(r) for r in results.elements],
    }
