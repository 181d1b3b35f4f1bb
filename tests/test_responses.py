# pyright: reportUnknownMemberType=false, reportUnknownArgumentType=false
# pyright: reportArgumentType=false, reportAttributeAccessIssue=false
from types import SimpleNamespace

import pytest

from classpoll.actions.responses import (
    ChoiceTakenError,
    delete_participant_responses,
    is_choice_taken,
    submit_response,
)
from classpoll.data.models import Element, Response
from classpoll.logic.response_values import (
    ChoiceAnswer,
    FileAnswer,
    NumberAnswer,
    ResponseShapeError,
    TextAnswer,
    decode_response_value,
)
from classpoll.readers.elements import get_visible_elements_for_participant
from classpoll.readers.responses import (
    find_all_double_claims,
    find_double_claimed_choices,
    get_participant_responses,
    get_taken_choices,
    summarize_session_results,
)
from tests.factories import (
    ChoiceElementFactory,
    ElementFactory,
    ResponseFactory,
    SessionFactory,
)

pytestmark = pytest.mark.django_db


def _unique_element():  # type: ignore[no-untyped-def]
    return ChoiceElementFactory(element_type=Element.ElementType.SINGLE_CHOICE_UNIQUE)


class TestSubmitResponse:
    def test_creates_response_in_elements_session(self) -> None:
        element = ElementFactory()
        response = submit_response(element, "p1", text_value="hello")
        assert response.session_id == element.session_id
        assert response.text_value == "hello"

    def test_resubmission_replaces_previous_answer(self) -> None:
        element = ElementFactory(element_type=Element.ElementType.NUMBER_INPUT)
        first = submit_response(element, "p1", number_value=3)
        second = submit_response(element, "p1", number_value=7)

        assert first.pk == second.pk
        assert Response.objects.filter(element=element, participant_id="p1").count() == 1
        second.refresh_from_db()
        assert second.number_value == 7

    def test_separate_participants_get_separate_rows(self) -> None:
        element = ElementFactory()
        submit_response(element, "p1", text_value="a")
        submit_response(element, "p2", text_value="b")
        assert Response.objects.filter(element=element).count() == 2

    def test_values_are_not_checked_against_type(self) -> None:
        element = ElementFactory(element_type=Element.ElementType.TEXT_INPUT)
        response = submit_response(element, "p1", number_value=5)
        assert response.number_value == 5


class TestUniqueChoice:
    def test_second_participant_cannot_take_same_choice(self) -> None:
        element = _unique_element()
        submit_response(element, "p1", choice_ids=["a"])

        with pytest.raises(ChoiceTakenError) as exc_info:
            submit_response(element, "p2", choice_ids=["a"])

        assert exc_info.value.choice_id == "a"
        assert str(exc_info.value) == (
            "This choice has already been selected by another participant"
        )
        assert not Response.objects.filter(element=element, participant_id="p2").exists()

    def test_holder_may_resubmit_own_choice(self) -> None:
        element = _unique_element()
        submit_response(element, "p1", choice_ids=["a"])
        submit_response(element, "p1", choice_ids=["a"])
        assert Response.objects.filter(element=element).count() == 1

    def test_switching_frees_previous_choice(self) -> None:
        element = _unique_element()
        submit_response(element, "p1", choice_ids=["a"])
        submit_response(element, "p1", choice_ids=["b"])
        response = submit_response(element, "p2", choice_ids=["a"])
        assert response.choice_ids == ["a"]

    def test_regular_single_choice_allows_sharing(self) -> None:
        element = ChoiceElementFactory()
        submit_response(element, "p1", choice_ids=["a"])
        submit_response(element, "p2", choice_ids=["a"])
        assert Response.objects.filter(element=element).count() == 2

    def test_empty_selection_skips_check(self) -> None:
        element = _unique_element()
        submit_response(element, "p1", choice_ids=["a"])
        response = submit_response(element, "p2", choice_ids=[])
        assert response.choice_ids == []

    def test_is_choice_taken_ignores_own_response(self) -> None:
        element = _unique_element()
        submit_response(element, "p1", choice_ids=["a"])
        assert is_choice_taken(element, "a", "p1") is False
        assert is_choice_taken(element, "a", "p2") is True


class TestTakenChoices:
    def test_lists_other_participants_choices(self) -> None:
        element = _unique_element()
        ResponseFactory(element=element, participant_id="p1", choice_ids=["a"])
        ResponseFactory(element=element, participant_id="p2", choice_ids=["c"])
        assert sorted(get_taken_choices(element, "p2")) == ["a"]
        assert sorted(get_taken_choices(element, "p3")) == ["a", "c"]


class TestDoubleClaims:
    def test_detects_choice_held_twice(self) -> None:
        element = _unique_element()
        ResponseFactory(element=element, participant_id="p1", choice_ids=["a"])
        ResponseFactory(element=element, participant_id="p2", choice_ids=["a"])
        ResponseFactory(element=element, participant_id="p3", choice_ids=["b"])
        assert find_double_claimed_choices(element) == {"a": ["p1", "p2"]}

    def test_scan_only_reports_unique_elements(self) -> None:
        unique = _unique_element()
        shared = ChoiceElementFactory()
        for element in (unique, shared):
            ResponseFactory(element=element, participant_id="p1", choice_ids=["a"])
            ResponseFactory(element=element, participant_id="p2", choice_ids=["a"])
        assert find_all_double_claims() == {unique.pk: {"a": ["p1", "p2"]}}


class TestDeleteParticipantResponses:
    def test_removes_only_that_participant(self) -> None:
        session = SessionFactory()
        element = ElementFactory(session=session)
        ResponseFactory(element=element, participant_id="p1", text_value="x")
        ResponseFactory(element=element, participant_id="p2", text_value="y")

        assert delete_participant_responses(session, "p1") == 1
        assert list(
            Response.objects.filter(session=session).values_list("participant_id", flat=True)
        ) == ["p2"]


class TestParticipantView:
    def test_visible_elements_follow_answers(self) -> None:
        session = SessionFactory()
        question = ChoiceElementFactory(session=session, order=0)
        follow_up = ElementFactory(
            session=session,
            order=1,
            conditional_logic={
                "enabled": True,
                "dependsOnElementId": question.pk,
                "condition": "choice_selected",
                "value": "b",
            },
        )
        ElementFactory(session=session, order=2, is_active=False)

        assert get_visible_elements_for_participant(session, "p1") == [question]

        submit_response(question, "p1", choice_ids=["b"])
        assert get_visible_elements_for_participant(session, "p1") == [question, follow_up]
        assert get_visible_elements_for_participant(session, "p2") == [question]

    def test_participant_responses_scoped_to_session(self) -> None:
        session = SessionFactory()
        element = ElementFactory(session=session)
        ResponseFactory(element=element, participant_id="p1", text_value="mine")
        ResponseFactory(participant_id="p1", text_value="elsewhere")
        assert [r.text_value for r in get_participant_responses(session, "p1")] == ["mine"]


class TestDecodeResponseValue:
    def _stored(self, **values):  # type: ignore[no-untyped-def]
        slots = {"text_value": None, "number_value": None, "choice_ids": None, "file_id": None}
        slots.update(values)
        return SimpleNamespace(**slots)

    def test_each_type_maps_to_its_slot(self) -> None:
        assert decode_response_value("text_input", self._stored(text_value="hi")) == TextAnswer("hi")
        assert decode_response_value("number_input", self._stored(number_value=2.5)) == NumberAnswer(2.5)
        assert decode_response_value(
            "multiple_choice", self._stored(choice_ids=["a", "b"])
        ) == ChoiceAnswer(("a", "b"))
        assert decode_response_value("file_upload", self._stored(file_id="f1")) == FileAnswer("f1")

    def test_empty_slot_decodes_to_none(self) -> None:
        assert decode_response_value("text_input", self._stored()) is None

    def test_stray_slot_rejected(self) -> None:
        with pytest.raises(ResponseShapeError):
            decode_response_value("text_input", self._stored(text_value="a", number_value=1))

    def test_unknown_type_rejected(self) -> None:
        with pytest.raises(ResponseShapeError):
            decode_response_value("slider", self._stored())


class TestSessionResults:
    def test_tallies_choices_and_numbers(self) -> None:
        session = SessionFactory()
        choice = ChoiceElementFactory(session=session, order=0)
        number = ElementFactory(
            session=session, order=1, element_type=Element.ElementType.NUMBER_INPUT
        )
        submit_response(choice, "p1", choice_ids=["a"])
        submit_response(choice, "p2", choice_ids=["a"])
        submit_response(choice, "p3", choice_ids=["b"])
        submit_response(number, "p1", number_value=2)
        submit_response(number, "p2", number_value=4)

        results = summarize_session_results(session)

        assert results.total_participants == 3
        choice_results, number_results = results.elements
        counts = {t.choice_id: t.count for t in choice_results.choices}
        assert counts == {"a": 2, "b": 1, "c": 0}
        assert number_results.number_stats is not None
        assert number_results.number_stats.average == 3
        assert number_results.number_stats.minimum == 2
        assert number_results.number_stats.maximum == 4

    def test_empty_session(self) -> None:
        results = summarize_session_results(SessionFactory())
        assert results.total_participants == 0
        assert results.elements == []
