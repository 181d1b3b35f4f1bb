import logging
from collections.abc import Iterable, Mapping
from typing import Any

from classpoll.data.models import Element, Response, Session
from classpoll.data.models.user import User
from classpoll.logic.ordering import (
    DIRECTIONS,
    OrderedRow,
    next_order,
    plan_order_repair,
    plan_step_move,
    sort_rows,
)
from classpoll.logic.visibility import ConditionalLogic

logger = logging.getLogger(__name__)

ELEMENT_CONTENT_FIELDS = (
    "title",
    "subtitle",
    "description",
    "image_id",
    "choices",
    "min_value",
    "max_value",
    "step",
)


def _validate_element_type(element_type: str) -> None:
    valid_types = {choice.value for choice in Element.ElementType}
    if element_type not in valid_types:
        raise ValueError(
            f"Invalid element_type '{element_type}'. Must be one of: {valid_types}"
        )


def _session_rows(session_pk: int) -> list[OrderedRow]:
    return sort_rows(
        OrderedRow(pk=pk, order=order)
        for pk, order in Element.objects.filter(session_id=session_pk).values_list(
            "pk", "order"
        )
    )


def _apply_orders(patches: Iterable[tuple[int, int]]) -> int:
    """Write each order patch as its own update; returns how many were applied."""
    applied = 0
    for pk, order in patches:
        Element.objects.filter(pk=pk).update(order=order)
        applied += 1
    return applied


def get_next_element_order(session: Session) -> int:
    return next_order(
        Element.objects.filter(session=session).values_list("order", flat=True)
    )


def create_element(
    session: Session,
    element_type: str,
    title: str,
    subtitle: str = "",
    description: str = "",
    image_id: str = "",
    choices: list[dict[str, Any]] | None = None,
    min_value: float | None = None,
    max_value: float | None = None,
    step: float | None = None,
) -> Element:
    """Append a new element after the session's current last one."""
    _validate_element_type(element_type)
    element: Element = Element.objects.create(
        session=session,
        element_type=element_type,
        title=title,
        subtitle=subtitle,
        description=description,
        image_id=image_id,
        order=get_next_element_order(session),
        is_active=True,
        choices=choices,
        min_value=min_value,
        max_value=max_value,
        step=step,
    )
    return element


def import_elements(
    session: Session, specs: Iterable[Mapping[str, Any]]
) -> list[Element]:
    """Append several elements in the given sequence."""
    specs = list(specs)
    for spec in specs:
        _validate_element_type(spec["element_type"])
    order = get_next_element_order(session)
    created: list[Element] = []
    for spec in specs:
        created.append(
            Element.objects.create(
                session=session,
                element_type=spec["element_type"],
                title=spec["title"],
                subtitle=spec.get("subtitle") or "",
                description=spec.get("description") or "",
                order=order,
                is_active=True,
                choices=spec.get("choices"),
                min_value=spec.get("min_value"),
                max_value=spec.get("max_value"),
                step=spec.get("step"),
            )
        )
        order += 1
    return created


def duplicate_element(element: Element) -> Element:
    """Append a copy of an element. The copy has no conditional rule."""
    copy: Element = Element.objects.create(
        session_id=element.session_id,  # pyright: ignore[reportAttributeAccessIssue]
        element_type=element.element_type,
        title=f"{element.title} (Copy)",
        subtitle=element.subtitle,
        description=element.description,
        image_id=element.image_id,
        order=get_next_element_order(element.session),  # pyright: ignore[reportUnknownMemberType, reportUnknownArgumentType]
        is_active=element.is_active,
        choices=element.choices,
        min_value=element.min_value,
        max_value=element.max_value,
        step=element.step,
    )
    return copy


def update_element(element: Element, **changes: object) -> Element:
    """Update element content. Keys set to None are left untouched."""
    update_fields: list[str] = ["updated_at"]
    for field in ELEMENT_CONTENT_FIELDS:
        value = changes.pop(field, None)
        if value is not None:
            setattr(element, field, value)
            update_fields.append(field)
    if changes:
        raise ValueError(f"Unknown element fields: {sorted(changes)}")
    element.save(update_fields=update_fields)
    return element


def set_element_active(element: Element, is_active: bool) -> Element:
    element.is_active = is_active  # pyright: ignore[reportAttributeAccessIssue]
    element.save(update_fields=["is_active", "updated_at"])
    return element


def set_conditional_logic(
    element: Element, rule: Mapping[str, Any] | None
) -> Element:
    """Attach, replace or (with None) clear an element's visibility rule."""
    if rule is None:
        element.conditional_logic = None  # pyright: ignore[reportAttributeAccessIssue]
    else:
        element.conditional_logic = ConditionalLogic.from_dict(rule).to_dict()  # pyright: ignore[reportAttributeAccessIssue]
    element.save(update_fields=["conditional_logic", "updated_at"])
    return element


def normalize_element_orders(session: Session) -> int:
    """Renumber a session's elements to 0..n-1 in their current order.

    Returns the number of rows that changed. Each row is patched separately.
    """
    fixed = _apply_orders(plan_order_repair(_session_rows(session.pk)))
    if fixed:
        logger.info("Repaired %d element orders in session %s", fixed, session.pk)
    return fixed


def normalize_all_element_orders(teacher: User | None = None) -> tuple[int, int]:
    """Normalize every session, or every session of one teacher.

    Returns ``(sessions_fixed, elements_fixed)``.
    """
    sessions = Session.objects.all()
    if teacher is not None:
        sessions = sessions.filter(teacher=teacher)
    sessions_fixed = 0
    elements_fixed = 0
    for session in sessions.iterator():
        fixed = normalize_element_orders(session)
        if fixed:
            sessions_fixed += 1
            elements_fixed += fixed
    return sessions_fixed, elements_fixed


def delete_element(element: Element) -> None:
    """Delete an element and its responses, then close the gap it leaves."""
    session: Session = element.session  # pyright: ignore[reportUnknownMemberType, reportAssignmentType]
    element_pk = element.pk
    Response.objects.filter(element_id=element_pk).delete()
    element.delete()
    normalize_element_orders(session)
    logger.info("Deleted element %s from session %s", element_pk, session.pk)


def reorder_elements(
    session: Session, element_orders: Iterable[tuple[int, int]]
) -> None:
    """Set explicit orders. Pairs naming elements of other sessions are skipped.

    The caller is trusted to send a full permutation; the result is not
    checked for gaps or duplicates.
    """
    own_pks = set(
        Element.objects.filter(session=session).values_list("pk", flat=True)
    )
    _apply_orders(
        (pk, order) for pk, order in element_orders if pk in own_pks
    )


def move_element(element: Element, direction: str) -> bool:
    """Swap an element with its neighbour above ("up") or below ("down").

    Broken orders in the session are repaired first. Returns False when the
    element is already first (up) or last (down).
    """
    if direction not in DIRECTIONS:
        raise ValueError(
            f"Invalid direction '{direction}'. Must be one of: {set(DIRECTIONS)}"
        )
    rows = _session_rows(element.session_id)  # pyright: ignore[reportAttributeAccessIssue]
    repairs = plan_order_repair(rows)
    if repairs:
        _apply_orders(repairs)
        logger.info(
            "Repaired %d element orders in session %s before move",
            len(repairs),
            element.session_id,  # pyright: ignore[reportAttributeAccessIssue]
        )
        rows = [OrderedRow(pk=row.pk, order=index) for index, row in enumerate(rows)]

    swap = plan_step_move(rows, element.pk, direction)
    if swap is None:
        return False
    pk, new_order, neighbour_pk, neighbour_order = swap
    Element.objects.filter(pk=pk).update(order=new_order)
    Element.objects.filter(pk=neighbour_pk).update(order=neighbour_order)
    element.order = new_order  # pyright: ignore[reportAttributeAccessIssue]
    return True
