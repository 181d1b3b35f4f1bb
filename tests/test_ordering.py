# pyright: reportUnknownMemberType=false, reportUnknownArgumentType=false
# pyright: reportArgumentType=false, reportAttributeAccessIssue=false
import pytest

from classpoll.actions.elements import (
    create_element,
    delete_element,
    duplicate_element,
    import_elements,
    move_element,
    normalize_all_element_orders,
    normalize_element_orders,
    reorder_elements,
    set_conditional_logic,
)
from classpoll.data.models import Element, Response
from classpoll.logic.ordering import (
    OrderedRow,
    is_dense,
    next_order,
    plan_order_repair,
    plan_step_move,
    sort_rows,
)
from tests.factories import ElementFactory, ResponseFactory, SessionFactory


def _orders(session) -> list[tuple[str, int]]:  # type: ignore[no-untyped-def]
    return list(
        Element.objects.filter(session=session)
        .order_by("order", "id")
        .values_list("title", "order")
    )


# --- Pure planning ---


class TestPlanOrderRepair:
    def test_dense_sequence_needs_nothing(self) -> None:
        rows = [OrderedRow(1, 0), OrderedRow(2, 1), OrderedRow(3, 2)]
        assert plan_order_repair(rows) == []

    def test_gap_is_closed(self) -> None:
        rows = [OrderedRow(1, 0), OrderedRow(2, 5), OrderedRow(3, 9)]
        assert plan_order_repair(rows) == [(2, 1), (3, 2)]

    def test_duplicates_broken_by_pk(self) -> None:
        rows = [OrderedRow(7, 1), OrderedRow(3, 1), OrderedRow(5, 0)]
        assert plan_order_repair(rows) == [(7, 2)]

    def test_empty(self) -> None:
        assert plan_order_repair([]) == []


class TestSortRows:
    def test_sorts_by_order_then_pk(self) -> None:
        rows = [OrderedRow(4, 2), OrderedRow(2, 0), OrderedRow(9, 0)]
        assert [r.pk for r in sort_rows(rows)] == [2, 9, 4]


class TestNextOrder:
    def test_empty_session_starts_at_zero(self) -> None:
        assert next_order([]) == 0

    def test_one_past_the_maximum(self) -> None:
        assert next_order([0, 4, 2]) == 5


class TestPlanStepMove:
    rows = [OrderedRow(10, 0), OrderedRow(20, 1), OrderedRow(30, 2)]

    def test_move_up_swaps_with_previous(self) -> None:
        assert plan_step_move(self.rows, 20, "up") == (20, 0, 10, 1)

    def test_move_down_swaps_with_next(self) -> None:
        assert plan_step_move(self.rows, 20, "down") == (20, 2, 30, 1)

    def test_first_cannot_move_up(self) -> None:
        assert plan_step_move(self.rows, 10, "up") is None

    def test_last_cannot_move_down(self) -> None:
        assert plan_step_move(self.rows, 30, "down") is None

    def test_invalid_direction(self) -> None:
        with pytest.raises(ValueError, match="Invalid direction"):
            plan_step_move(self.rows, 10, "sideways")

    def test_unknown_pk(self) -> None:
        with pytest.raises(ValueError):
            plan_step_move(self.rows, 99, "up")


class TestIsDense:
    def test_dense(self) -> None:
        assert is_dense([2, 0, 1]) is True

    def test_gap(self) -> None:
        assert is_dense([0, 2]) is False

    def test_duplicate(self) -> None:
        assert is_dense([0, 0, 1]) is False


# --- Database-backed ordering actions ---


@pytest.mark.django_db
class TestCreateElement:
    def test_appends_with_dense_orders(self) -> None:
        session = SessionFactory()
        for title in ("A", "B", "C"):
            create_element(session, Element.ElementType.TEXT_INPUT, title)
        assert _orders(session) == [("A", 0), ("B", 1), ("C", 2)]

    def test_new_element_is_active(self) -> None:
        session = SessionFactory()
        element = create_element(session, Element.ElementType.TEXT_INPUT, "Q")
        assert element.is_active is True

    def test_rejects_unknown_type(self) -> None:
        session = SessionFactory()
        with pytest.raises(ValueError, match="Invalid element_type"):
            create_element(session, "slider", "Q")


@pytest.mark.django_db
class TestMoveElement:
    def _session_abc(self):  # type: ignore[no-untyped-def]
        session = SessionFactory()
        elements = [
            ElementFactory(session=session, title=title, order=index)
            for index, title in enumerate("ABC")
        ]
        return session, elements

    def test_move_up_swaps_neighbours(self) -> None:
        session, (_, b, _) = self._session_abc()
        assert move_element(b, "up") is True
        assert _orders(session) == [("B", 0), ("A", 1), ("C", 2)]
        assert b.order == 0

    def test_move_down_swaps_neighbours(self) -> None:
        session, (_, b, _) = self._session_abc()
        assert move_element(b, "down") is True
        assert _orders(session) == [("A", 0), ("C", 1), ("B", 2)]

    def test_first_up_is_noop(self) -> None:
        session, (a, _, _) = self._session_abc()
        assert move_element(a, "up") is False
        assert _orders(session) == [("A", 0), ("B", 1), ("C", 2)]

    def test_last_down_is_noop(self) -> None:
        session, (_, _, c) = self._session_abc()
        assert move_element(c, "down") is False
        assert _orders(session) == [("A", 0), ("B", 1), ("C", 2)]

    def test_repairs_broken_orders_first(self) -> None:
        session = SessionFactory()
        ElementFactory(session=session, title="A", order=3)
        b = ElementFactory(session=session, title="B", order=3)
        ElementFactory(session=session, title="C", order=10)
        assert move_element(b, "down") is True
        assert _orders(session) == [("A", 0), ("C", 1), ("B", 2)]

    def test_invalid_direction_changes_nothing(self) -> None:
        session = SessionFactory()
        ElementFactory(session=session, title="A", order=5)
        b = ElementFactory(session=session, title="B", order=9)
        with pytest.raises(ValueError):
            move_element(b, "left")
        assert _orders(session) == [("A", 5), ("B", 9)]


@pytest.mark.django_db
class TestNormalizeElementOrders:
    def test_closes_gaps_and_duplicates(self) -> None:
        session = SessionFactory()
        ElementFactory(session=session, title="A", order=2)
        ElementFactory(session=session, title="B", order=2)
        ElementFactory(session=session, title="C", order=7)
        assert normalize_element_orders(session) == 3
        assert _orders(session) == [("A", 0), ("B", 1), ("C", 2)]

    def test_dense_session_untouched(self) -> None:
        session = SessionFactory()
        ElementFactory(session=session, order=0)
        ElementFactory(session=session, order=1)
        assert normalize_element_orders(session) == 0

    def test_normalize_all_counts_sessions_and_elements(self) -> None:
        broken = SessionFactory()
        ElementFactory(session=broken, order=4)
        ElementFactory(session=broken, order=8)
        healthy = SessionFactory()
        ElementFactory(session=healthy, order=0)

        assert normalize_all_element_orders() == (1, 2)
        assert is_dense(broken.elements.values_list("order", flat=True))

    def test_normalize_all_scoped_to_teacher(self) -> None:
        mine = SessionFactory()
        ElementFactory(session=mine, order=3)
        theirs = SessionFactory()
        ElementFactory(session=theirs, order=3)

        assert normalize_all_element_orders(mine.teacher) == (1, 1)
        assert theirs.elements.get().order == 3


@pytest.mark.django_db
class TestDeleteElement:
    def test_closes_gap_and_removes_responses(self) -> None:
        session = SessionFactory()
        ElementFactory(session=session, title="A", order=0)
        b = ElementFactory(session=session, title="B", order=1)
        ElementFactory(session=session, title="C", order=2)
        ResponseFactory(element=b, text_value="hi")

        delete_element(b)

        assert _orders(session) == [("A", 0), ("C", 1)]
        assert not Response.objects.filter(element_id=b.pk).exists()


@pytest.mark.django_db
class TestReorderElements:
    def test_applies_given_permutation(self) -> None:
        session = SessionFactory()
        a = ElementFactory(session=session, title="A", order=0)
        b = ElementFactory(session=session, title="B", order=1)
        c = ElementFactory(session=session, title="C", order=2)
        reorder_elements(session, [(c.pk, 0), (a.pk, 1), (b.pk, 2)])
        assert _orders(session) == [("C", 0), ("A", 1), ("B", 2)]

    def test_ignores_elements_of_other_sessions(self) -> None:
        session = SessionFactory()
        ElementFactory(session=session, order=0)
        foreign = ElementFactory(order=0)
        reorder_elements(session, [(foreign.pk, 5)])
        foreign.refresh_from_db()
        assert foreign.order == 0


@pytest.mark.django_db
class TestDuplicateElement:
    def test_copy_is_appended_without_rule(self) -> None:
        session = SessionFactory()
        a = ElementFactory(session=session, title="A", order=0)
        b = ElementFactory(session=session, title="B", order=1)
        set_conditional_logic(
            b, {"enabled": True, "dependsOnElementId": a.pk, "condition": "equals", "value": "x"}
        )

        copy = duplicate_element(b)

        assert copy.title == "B (Copy)"
        assert copy.order == 2
        assert copy.conditional_logic is None
        assert copy.session_id == session.pk


@pytest.mark.django_db
class TestImportElements:
    def test_appends_in_given_sequence(self) -> None:
        session = SessionFactory()
        ElementFactory(session=session, title="Existing", order=0)
        created = import_elements(
            session,
            [
                {"element_type": "text_input", "title": "First"},
                {
                    "element_type": "single_choice",
                    "title": "Second",
                    "choices": [{"id": "x", "text": "X"}],
                },
            ],
        )
        assert [e.order for e in created] == [1, 2]
        assert _orders(session) == [("Existing", 0), ("First", 1), ("Second", 2)]

    def test_unknown_type_creates_nothing(self) -> None:
        session = SessionFactory()
        with pytest.raises(ValueError):
            import_elements(
                session,
                [
                    {"element_type": "text_input", "title": "Ok"},
                    {"element_type": "bogus", "title": "Bad"},
                ],
            )
        assert not session.elements.exists()
