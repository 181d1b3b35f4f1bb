from django.db.models import QuerySet
from django.shortcuts import get_object_or_404

from classpoll.data.models import Element, Response, Session
from classpoll.data.models.user import User
from classpoll.logic.visibility import filter_visible


def get_element_for_teacher(element_pk: int, teacher: User) -> Element:
    """Get an element by PK whose session the teacher owns. 404 otherwise."""
    return get_object_or_404(
        Element.objects.select_related("session"),
        pk=element_pk,
        session__teacher=teacher,
    )


def get_element_for_session(session: Session, element_pk: int) -> Element:
    """Get an element by PK, verifying it belongs to the given session."""
    return get_object_or_404(Element, pk=element_pk, session=session)


def get_session_elements(session: Session) -> QuerySet[Element]:
    """All elements of a session in display order, inactive ones included."""
    return Element.objects.filter(session=session).order_by("order", "id")


def get_visible_elements_for_participant(
    session: Session, participant_id: str
) -> list[Element]:
    """Active elements whose conditional rules pass for this participant."""
    answers = {
        response.element_id: response  # pyright: ignore[reportAttributeAccessIssue]
        for response in Response.objects.filter(
            session=session, participant_id=participant_id
        )
    }
    return filter_visible(get_session_elements(session), answers)
