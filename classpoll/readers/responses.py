import logging
from collections import defaultdict
from dataclasses import dataclass, field

from django.db.models import QuerySet
from django.shortcuts import get_object_or_404

from classpoll.data.models import Element, Response, Session
from classpoll.data.models.user import User
from classpoll.readers.elements import get_session_elements
from classpoll.readers.storage import resolve_storage_url

logger = logging.getLogger(__name__)


def get_response_for_teacher(response_pk: int, teacher: User) -> Response:
    """Get a response by PK whose session the teacher owns. 404 otherwise."""
    return get_object_or_404(
        Response.objects.select_related("session"),
        pk=response_pk,
        session__teacher=teacher,
    )


def get_participant_responses(
    session: Session, participant_id: str
) -> QuerySet[Response]:
    return Response.objects.filter(
        session=session, participant_id=participant_id
    ).select_related("element")


def get_session_responses(session: Session) -> QuerySet[Response]:
    return Response.objects.filter(session=session).select_related("element")


def get_element_responses(element: Element) -> QuerySet[Response]:
    return Response.objects.filter(element=element).select_related("element")


def get_taken_choices(element: Element, participant_id: str) -> list[str]:
    """Choice ids already held by participants other than ``participant_id``."""
    taken: list[str] = []
    for ids in (
        Response.objects.filter(element=element)
        .exclude(participant_id=participant_id)
        .values_list("choice_ids", flat=True)
    ):
        taken.extend(ids or [])
    return taken


def find_double_claimed_choices(element: Element) -> dict[str, list[str]]:
    """Map each choice id claimed by more than one participant to its claimants."""
    claimants: dict[str, set[str]] = defaultdict(set)
    for participant_id, ids in Response.objects.filter(element=element).values_list(
        "participant_id", "choice_ids"
    ):
        for choice_id in ids or []:
            claimants[choice_id].add(participant_id)
    return {
        choice_id: sorted(participants)
        for choice_id, participants in claimants.items()
        if len(participants) > 1
    }


def find_all_double_claims() -> dict[int, dict[str, list[str]]]:
    """Scan every unique-choice element; keyed by element PK."""
    found: dict[int, dict[str, list[str]]] = {}
    for element in Element.objects.filter(
        element_type=Element.ElementType.SINGLE_CHOICE_UNIQUE
    ).iterator():
        doubles = find_double_claimed_choices(element)
        if doubles:
            logger.warning(
                "Element %s has double-claimed choices: %s", element.pk, doubles
            )
            found[element.pk] = doubles
    return found


# --- Results summary ---


@dataclass
class ChoiceTally:
    choice_id: str
    text: str | None
    is_correct: bool
    count: int
    percentage: float


@dataclass
class NumberStats:
    count: int
    average: float
    minimum: float
    maximum: float


@dataclass
class ElementResults:
    element: Element
    responded: int
    choices: list[ChoiceTally] = field(default_factory=list)
    number_stats: NumberStats | None = None
    text_answers: list[str] = field(default_factory=list)
    file_urls: list[str] = field(default_factory=list)


@dataclass
class SessionResults:
    session: Session
    total_participants: int
    elements: list[ElementResults]


def _tally_choices(element: Element, responses: list[Response]) -> list[ChoiceTally]:
    counts: dict[str, int] = {}
    for choice in element.choices or []:  # pyright: ignore[reportUnknownMemberType, reportUnknownVariableType]
        counts[choice["id"]] = 0
    for response in responses:
        for choice_id in response.choice_ids or []:  # pyright: ignore[reportUnknownMemberType, reportUnknownVariableType]
            counts[choice_id] = counts.get(choice_id, 0) + 1
    tallies: list[ChoiceTally] = []
    for choice in element.choices or []:  # pyright: ignore[reportUnknownMemberType, reportUnknownVariableType]
        count = counts[choice["id"]]
        tallies.append(
            ChoiceTally(
                choice_id=choice["id"],
                text=choice.get("text"),
                is_correct=bool(choice.get("isCorrect", False)),
                count=count,
                percentage=(count / len(responses) * 100) if responses else 0.0,
            )
        )
    return tallies


def _number_stats(responses: list[Response]) -> NumberStats | None:
    values: list[float] = [
        r.number_value for r in responses if r.number_value is not None  # pyright: ignore[reportUnknownMemberType]
    ]
    if not values:
        return None
    return NumberStats(
        count=len(values),
        average=sum(values) / len(values),
        minimum=min(values),
        maximum=max(values),
    )


def summarize_element(element: Element, responses: list[Response]) -> ElementResults:
    results = ElementResults(element=element, responded=len(responses))
    if element.choices is not None:  # pyright: ignore[reportUnknownMemberType]
        results.choices = _tally_choices(element, responses)
    results.number_stats = _number_stats(responses)
    results.text_answers = [r.text_value for r in responses if r.text_value]  # pyright: ignore[reportUnknownMemberType]
    results.file_urls = [
        url for r in responses if (url := resolve_storage_url(r.file_id))  # pyright: ignore[reportUnknownMemberType, reportUnknownArgumentType]
    ]
    return results


def summarize_session_results(session: Session) -> SessionResults:
    """Aggregate every element's responses for the results view."""
    by_element: dict[int, list[Response]] = defaultdict(list)
    participants: set[str] = set()
    for response in get_session_responses(session):
        by_element[response.element_id].append(response)  # pyright: ignore[reportAttributeAccessIssue]
        participants.add(response.participant_id)  # pyright: ignore[reportUnknownMemberType, reportUnknownArgumentType]
    return SessionResults(
        session=session,
        total_participants=len(participants),
        elements=[
            summarize_element(element, by_element.get(element.pk, []))
            for element in get_session_elements(session)
        ],
    )
