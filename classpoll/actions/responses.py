import logging

from django.db import transaction

from classpoll.data.models import Element, Response, Session

logger = logging.getLogger(__name__)


class ChoiceTakenError(ValueError):
    """The choice on a unique-choice element already belongs to another participant."""

    def __init__(self, choice_id: str) -> None:
        self.choice_id = choice_id
        super().__init__(
            "This choice has already been selected by another participant"
        )


def is_choice_taken(element: Element, choice_id: str, participant_id: str) -> bool:
    """Whether any other participant's response on the element holds ``choice_id``."""
    others = Response.objects.filter(element=element).exclude(
        participant_id=participant_id
    )
    return any(choice_id in (ids or []) for ids in others.values_list("choice_ids", flat=True))


def submit_response(
    element: Element,
    participant_id: str,
    text_value: str | None = None,
    number_value: float | None = None,
    choice_ids: list[str] | None = None,
    file_id: str | None = None,
) -> Response:
    """Record a participant's answer, replacing any earlier one for the element.

    For unique-choice elements the first submitted choice must not be held by
    another participant; ChoiceTakenError is raised otherwise. The element row
    is locked for the duration so concurrent claims on it are serialized.
    Values are stored as given, without checking them against the element type.
    """
    with transaction.atomic():
        locked: Element = Element.objects.select_for_update().get(pk=element.pk)

        if locked.element_type == Element.ElementType.SINGLE_CHOICE_UNIQUE and choice_ids:  # pyright: ignore[reportUnknownMemberType]
            selected = choice_ids[0]
            if is_choice_taken(locked, selected, participant_id):
                logger.warning(
                    "Rejected claim of choice %s on element %s by %s",
                    selected,
                    locked.pk,
                    participant_id,
                )
                raise ChoiceTakenError(selected)

        response: Response
        response, created = Response.objects.update_or_create(  # pyright: ignore[reportUnknownMemberType]
            participant_id=participant_id,
            element=locked,
            defaults={
                "text_value": text_value,
                "number_value": number_value,
                "choice_ids": choice_ids,
                "file_id": file_id,
            },
            create_defaults={
                "session_id": locked.session_id,  # pyright: ignore[reportAttributeAccessIssue]
                "text_value": text_value,
                "number_value": number_value,
                "choice_ids": choice_ids,
                "file_id": file_id,
            },
        )
    logger.debug(
        "%s response %s for element %s",
        "Created" if created else "Updated",
        response.pk,
        element.pk,
    )
    return response


def delete_response(response: Response) -> None:
    response.delete()


def delete_participant_responses(session: Session, participant_id: str) -> int:
    """Remove everything one participant submitted in a session."""
    deleted, _ = Response.objects.filter(
        session=session, participant_id=participant_id
    ).delete()
    logger.info(
        "Deleted %d responses of participant %s in session %s",
        deleted,
        participant_id,
        session.pk,
    )
    return deleted
