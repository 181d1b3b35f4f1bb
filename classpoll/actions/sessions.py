import logging
import secrets

from django.conf import settings
from django.db import transaction

from classpoll.data.models import Element, Response, Session
from classpoll.data.models.user import User

logger = logging.getLogger(__name__)

SESSION_SETTING_FIELDS = (
    "title",
    "description",
    "results_public",
    "results_pin_code",
    "completion_title",
    "completion_subtitle",
    "completion_description",
    "completion_image_id",
    "bg_color",
    "accent_color",
)


def generate_session_code() -> str:
    """Random six-digit code, never starting with 0."""
    return str(100000 + secrets.randbelow(900000))


def generate_unique_session_code() -> str:
    """Draw codes until one is not held by any session."""
    max_attempts: int = settings.SESSION_CODE_MAX_ATTEMPTS
    for _ in range(max_attempts):
        code = generate_session_code()
        if not Session.objects.filter(session_code=code).exists():
            return code
    raise RuntimeError(f"Could not find a free session code in {max_attempts} attempts.")


def create_session(
    teacher: User,
    title: str,
    description: str = "",
    results_public: bool = True,
    results_pin_code: str = "",
    completion_title: str = "",
    completion_subtitle: str = "",
    completion_description: str = "",
    completion_image_id: str = "",
    bg_color: str = "",
    accent_color: str = "",
) -> Session:
    """Create an active session with a fresh join code."""
    session: Session = Session.objects.create(
        teacher=teacher,
        title=title,
        description=description,
        is_active=True,
        session_code=generate_unique_session_code(),
        results_public=results_public,
        results_pin_code=results_pin_code,
        completion_title=completion_title,
        completion_subtitle=completion_subtitle,
        completion_description=completion_description,
        completion_image_id=completion_image_id,
        bg_color=bg_color,
        accent_color=accent_color,
    )
    logger.info("Created session %s code=%s", session.pk, session.session_code)  # pyright: ignore[reportUnknownMemberType]
    return session


def update_session(session: Session, **changes: object) -> Session:
    """Update session settings. Keys set to None are left untouched."""
    update_fields: list[str] = ["updated_at"]
    for field in SESSION_SETTING_FIELDS:
        value = changes.pop(field, None)
        if value is not None:
            setattr(session, field, value)
            update_fields.append(field)
    if changes:
        raise ValueError(f"Unknown session settings: {sorted(changes)}")
    session.save(update_fields=update_fields)
    return session


def set_session_active(session: Session, is_active: bool) -> Session:
    session.is_active = is_active  # pyright: ignore[reportAttributeAccessIssue]
    session.save(update_fields=["is_active", "updated_at"])
    return session


def delete_session(session: Session) -> None:
    """Delete a session with its elements and responses, children first.

    Deleting rows that are already gone is a no-op, so a failed cascade can
    simply be repeated.
    """
    session_pk = session.pk
    with transaction.atomic():
        responses, _ = Response.objects.filter(session_id=session_pk).delete()
        elements, _ = Element.objects.filter(session_id=session_pk).delete()
        Session.objects.filter(pk=session_pk).delete()
    logger.info(
        "Deleted session %s with %d elements and %d responses",
        session_pk,
        elements,
        responses,
    )


def clone_session(session: Session) -> Session:
    """Copy a session and its elements under a new code, starting inactive.

    Conditional rules are copied in a second pass so dependencies point at
    the cloned elements. Rules whose dependency was not copied are dropped.
    """
    with transaction.atomic():
        clone: Session = Session.objects.create(
            teacher_id=session.teacher_id,  # pyright: ignore[reportAttributeAccessIssue]
            title=f"{session.title} (Copy)",
            is_active=False,
            session_code=generate_unique_session_code(),
            **{
                field: getattr(session, field)
                for field in SESSION_SETTING_FIELDS
                if field != "title"
            },
        )

        originals: list[Element] = list(Element.objects.filter(session=session))
        id_map: dict[int, Element] = {}
        for element in originals:
            id_map[element.pk] = Element.objects.create(
                session=clone,
                element_type=element.element_type,
                title=element.title,
                subtitle=element.subtitle,
                description=element.description,
                image_id=element.image_id,
                order=element.order,
                is_active=element.is_active,
                choices=element.choices,
                min_value=element.min_value,
                max_value=element.max_value,
                step=element.step,
            )

        for element in originals:
            rule = element.conditional_logic
            if not rule or not rule.get("enabled"):  # pyright: ignore[reportUnknownMemberType]
                continue
            copy = id_map[element.pk]
            dependency = id_map.get(rule.get("dependsOnElementId"))  # pyright: ignore[reportUnknownMemberType, reportUnknownArgumentType]
            if dependency is None:
                continue
            copy.conditional_logic = {**rule, "dependsOnElementId": dependency.pk}  # pyright: ignore[reportAttributeAccessIssue]
            copy.save(update_fields=["conditional_logic", "updated_at"])

    logger.info("Cloned session %s into %s", session.pk, clone.pk)
    return clone
