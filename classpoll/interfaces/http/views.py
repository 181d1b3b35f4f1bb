import json
from typing import Any

from django.contrib.auth import login, logout
from django.contrib.auth.decorators import login_required
from django.core.exceptions import BadRequest
from django.http import HttpRequest, HttpResponse, JsonResponse
from django.views.decorators.csrf import csrf_exempt, ensure_csrf_cookie
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from classpoll.actions.elements import (
    create_element,
    delete_element,
    duplicate_element,
    import_elements,
    move_element,
    normalize_all_element_orders,
    reorder_elements,
    set_conditional_logic,
    set_element_active,
    update_element,
)
from classpoll.actions.responses import (
    ChoiceTakenError,
    delete_participant_responses,
    delete_response,
    submit_response,
)
from classpoll.actions.sessions import (
    clone_session,
    create_session,
    delete_session,
    set_session_active,
    update_session,
)
from classpoll.actions.users import create_teacher
from classpoll.data.models.user import User
from classpoll.interfaces.http.forms import (
    ActiveForm,
    ConditionalLogicForm,
    ElementForm,
    EmailAuthenticationForm,
    ImportElementsForm,
    MoveForm,
    RegistrationForm,
    ReorderForm,
    ResultsAccessForm,
    SessionForm,
    SubmitResponseForm,
    from_camel,
    provided_data,
)
from classpoll.interfaces.http.serializers import (
    serialize_element,
    serialize_response,
    serialize_results,
    serialize_session,
)
from classpoll.readers.elements import (
    get_element_for_session,
    get_element_for_teacher,
    get_session_elements,
    get_visible_elements_for_participant,
)
from classpoll.readers.responses import (
    get_element_responses,
    get_participant_responses,
    get_response_for_teacher,
    get_session_responses,
    get_taken_choices,
    summarize_session_results,
)
from classpoll.readers.sessions import (
    get_session_by_code,
    get_session_for_teacher,
    get_teacher_sessions,
    verify_results_access,
)


def _read_json(request: HttpRequest) -> dict[str, Any]:
    """Parse a JSON object body into form-ready (snake_case) data."""
    if not request.body:
        return {}
    try:
        payload = json.loads(request.body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise BadRequest("Malformed JSON body.") from e
    if not isinstance(payload, dict):
        raise BadRequest("JSON body must be an object.")
    return from_camel(payload)


def _invalid(form: Any) -> JsonResponse:
    return JsonResponse({"errors": form.errors.get_json_data()}, status=400)


def _teacher(request: HttpRequest) -> User:
    return request.user  # type: ignore[return-value]


# --- Error handlers ---


def not_found_view(request: HttpRequest, exception: Exception | None = None) -> JsonResponse:
    return JsonResponse({"error": "Not found"}, status=404)


def bad_request_view(request: HttpRequest, exception: Exception | None = None) -> JsonResponse:
    return JsonResponse({"error": str(exception) or "Bad request"}, status=400)


# --- Auth ---


@require_GET
@ensure_csrf_cookie
def csrf_view(request: HttpRequest) -> JsonResponse:
    """Sets the CSRF cookie for the web client."""
    return JsonResponse({"ok": True})


@require_POST
def register_view(request: HttpRequest) -> JsonResponse:
    form = RegistrationForm(_read_json(request))
    if not form.is_valid():
        return _invalid(form)
    user = create_teacher(
        email=form.cleaned_data["email"],
        password=form.cleaned_data["password"],
        display_name=form.cleaned_data["display_name"],
    )
    login(request, user, backend="classpoll.backends.EmailBackend")
    return JsonResponse({"id": user.pk, "email": user.email}, status=201)


@require_POST
def login_view(request: HttpRequest) -> JsonResponse:
    form = EmailAuthenticationForm(request, data=_read_json(request))
    if not form.is_valid():
        return _invalid(form)
    user = form.get_user()
    login(request, user, backend="classpoll.backends.EmailBackend")  # type: ignore[arg-type]
    return JsonResponse({"id": user.pk, "email": user.email})  # type: ignore[union-attr]


@require_POST
def logout_view(request: HttpRequest) -> HttpResponse:
    logout(request)
    return HttpResponse(status=204)


# --- Teacher: sessions ---


@login_required
@require_http_methods(["GET", "POST"])
def sessions_view(request: HttpRequest) -> JsonResponse:
    """List the caller's sessions, or create one."""
    if request.method == "POST":
        form = SessionForm(_read_json(request))
        if not form.is_valid():
            return _invalid(form)
        settings_data = provided_data(form)
        if settings_data.get("results_public") is None:
            settings_data.pop("results_public", None)
        session = create_session(_teacher(request), **settings_data)
        return JsonResponse(serialize_session(session, include_private=True), status=201)

    sessions = get_teacher_sessions(_teacher(request))
    return JsonResponse(
        {"sessions": [serialize_session(s, include_private=True) for s in sessions]}
    )


@login_required
@require_http_methods(["GET", "POST"])
def session_detail_view(request: HttpRequest, session_id: int) -> JsonResponse:
    session = get_session_for_teacher(session_id, _teacher(request))

    if request.method == "POST":
        form = SessionForm(_read_json(request), partial=True)
        if not form.is_valid():
            return _invalid(form)
        update_session(session, **provided_data(form))

    return JsonResponse(serialize_session(session, include_private=True))


@login_required
@require_POST
def session_active_view(request: HttpRequest, session_id: int) -> JsonResponse:
    session = get_session_for_teacher(session_id, _teacher(request))
    form = ActiveForm(_read_json(request))
    if not form.is_valid():
        return _invalid(form)
    set_session_active(session, form.cleaned_data["is_active"])
    return JsonResponse(serialize_session(session, include_private=True))


@login_required
@require_POST
def delete_session_view(request: HttpRequest, session_id: int) -> HttpResponse:
    session = get_session_for_teacher(session_id, _teacher(request))
    delete_session(session)
    return HttpResponse(status=204)


@login_required
@require_POST
def clone_session_view(request: HttpRequest, session_id: int) -> JsonResponse:
    session = get_session_for_teacher(session_id, _teacher(request))
    clone = clone_session(session)
    return JsonResponse(serialize_session(clone, include_private=True), status=201)


@login_required
@require_POST
def normalize_orders_view(request: HttpRequest) -> JsonResponse:
    """Repair element orders across all of the caller's sessions."""
    sessions_fixed, elements_fixed = normalize_all_element_orders(_teacher(request))
    return JsonResponse(
        {"sessionsFixed": sessions_fixed, "elementsFixed": elements_fixed}
    )


# --- Teacher: elements ---


@login_required
@require_http_methods(["GET", "POST"])
def session_elements_view(request: HttpRequest, session_id: int) -> JsonResponse:
    """List a session's elements with image URLs, or append a new one."""
    session = get_session_for_teacher(session_id, _teacher(request))

    if request.method == "POST":
        data = _read_json(request)
        if "type" in data:
            data["element_type"] = data.pop("type")
        form = ElementForm(data)
        if not form.is_valid():
            return _invalid(form)
        element = create_element(session, **form.cleaned_data)
        return JsonResponse(serialize_element(element), status=201)

    return JsonResponse(
        {"elements": [serialize_element(e) for e in get_session_elements(session)]}
    )


@login_required
@require_POST
def import_elements_view(request: HttpRequest, session_id: int) -> JsonResponse:
    session = get_session_for_teacher(session_id, _teacher(request))
    form = ImportElementsForm(_read_json(request))
    if not form.is_valid():
        return _invalid(form)
    created = import_elements(session, form.cleaned_data["elements"])
    return JsonResponse(
        {"elements": [serialize_element(e) for e in created]}, status=201
    )


@login_required
@require_POST
def reorder_elements_view(request: HttpRequest, session_id: int) -> HttpResponse:
    session = get_session_for_teacher(session_id, _teacher(request))
    form = ReorderForm(_read_json(request))
    if not form.is_valid():
        return _invalid(form)
    reorder_elements(session, form.cleaned_data["element_orders"])
    return HttpResponse(status=204)


@login_required
@require_http_methods(["GET", "POST"])
def element_detail_view(request: HttpRequest, element_id: int) -> JsonResponse:
    element = get_element_for_teacher(element_id, _teacher(request))

    if request.method == "POST":
        form = ElementForm(_read_json(request), partial=True)
        if not form.is_valid():
            return _invalid(form)
        update_element(element, **provided_data(form))

    return JsonResponse(serialize_element(element))


@login_required
@require_POST
def delete_element_view(request: HttpRequest, element_id: int) -> HttpResponse:
    element = get_element_for_teacher(element_id, _teacher(request))
    delete_element(element)
    return HttpResponse(status=204)


@login_required
@require_POST
def duplicate_element_view(request: HttpRequest, element_id: int) -> JsonResponse:
    element = get_element_for_teacher(element_id, _teacher(request))
    copy = duplicate_element(element)
    return JsonResponse(serialize_element(copy), status=201)


@login_required
@require_POST
def move_element_view(request: HttpRequest, element_id: int) -> JsonResponse:
    """Step an element up or down. ``moved`` is false at either end."""
    element = get_element_for_teacher(element_id, _teacher(request))
    form = MoveForm(_read_json(request))
    if not form.is_valid():
        return _invalid(form)
    moved = move_element(element, form.cleaned_data["direction"])
    return JsonResponse({"moved": moved})


@login_required
@require_POST
def element_active_view(request: HttpRequest, element_id: int) -> JsonResponse:
    element = get_element_for_teacher(element_id, _teacher(request))
    form = ActiveForm(_read_json(request))
    if not form.is_valid():
        return _invalid(form)
    set_element_active(element, form.cleaned_data["is_active"])
    return JsonResponse(serialize_element(element))


@login_required
@require_POST
def element_conditional_logic_view(
    request: HttpRequest, element_id: int
) -> JsonResponse:
    """Set the element's visibility rule; a null ``conditionalLogic`` clears it."""
    element = get_element_for_teacher(element_id, _teacher(request))
    data = _read_json(request)
    rule = data.get("conditional_logic")
    if rule is None:
        set_conditional_logic(element, None)
        return JsonResponse(serialize_element(element))
    if not isinstance(rule, dict):
        raise BadRequest("conditionalLogic must be an object or null.")

    form = ConditionalLogicForm(element, from_camel(rule))
    if not form.is_valid():
        return _invalid(form)
    set_conditional_logic(element, form.to_rule())
    return JsonResponse(serialize_element(element))


# --- Teacher: responses ---


@login_required
@require_GET
def session_responses_view(request: HttpRequest, session_id: int) -> JsonResponse:
    session = get_session_for_teacher(session_id, _teacher(request))
    return JsonResponse(
        {"responses": [serialize_response(r) for r in get_session_responses(session)]}
    )


@login_required
@require_GET
def element_responses_view(request: HttpRequest, element_id: int) -> JsonResponse:
    element = get_element_for_teacher(element_id, _teacher(request))
    return JsonResponse(
        {"responses": [serialize_response(r) for r in get_element_responses(element)]}
    )


@login_required
@require_POST
def delete_response_view(request: HttpRequest, response_id: int) -> HttpResponse:
    response = get_response_for_teacher(response_id, _teacher(request))
    delete_response(response)
    return HttpResponse(status=204)


@login_required
@require_POST
def delete_participant_responses_view(
    request: HttpRequest, session_id: int, participant_id: str
) -> JsonResponse:
    session = get_session_for_teacher(session_id, _teacher(request))
    deleted = delete_participant_responses(session, participant_id)
    return JsonResponse({"deleted": deleted})


# --- Participants ---


def _participant(request: HttpRequest) -> str:
    participant_id = request.GET.get("participant", "")
    if not participant_id:
        raise BadRequest("The participant query parameter is required.")
    return participant_id


@require_GET
def join_session_view(request: HttpRequest, session_code: str) -> JsonResponse:
    session = get_session_by_code(session_code)
    return JsonResponse(serialize_session(session))


@require_GET
def participant_elements_view(request: HttpRequest, session_code: str) -> JsonResponse:
    """Elements this participant should currently see."""
    session = get_session_by_code(session_code)
    elements = get_visible_elements_for_participant(session, _participant(request))
    return JsonResponse({"elements": [serialize_element(e) for e in elements]})


@csrf_exempt
@require_http_methods(["GET", "POST"])
def participant_responses_view(request: HttpRequest, session_code: str) -> JsonResponse:
    """A participant's own responses, or submit one."""
    session = get_session_by_code(session_code)

    if request.method == "POST":
        form = SubmitResponseForm(_read_json(request))
        if not form.is_valid():
            return _invalid(form)
        element = get_element_for_session(session, form.cleaned_data["element_id"])
        try:
            response = submit_response(
                element,
                participant_id=form.cleaned_data["participant_id"],
                text_value=form.cleaned_data["text_value"],
                number_value=form.cleaned_data["number_value"],
                choice_ids=form.cleaned_data["choice_ids"],
                file_id=form.cleaned_data["file_id"],
            )
        except ChoiceTakenError as e:
            return JsonResponse(
                {"error": str(e), "choiceId": e.choice_id}, status=409
            )
        return JsonResponse(serialize_response(response))

    responses = get_participant_responses(session, _participant(request))
    return JsonResponse({"responses": [serialize_response(r) for r in responses]})


@require_GET
def taken_choices_view(
    request: HttpRequest, session_code: str, element_id: int
) -> JsonResponse:
    session = get_session_by_code(session_code)
    element = get_element_for_session(session, element_id)
    return JsonResponse(
        {"takenChoices": get_taken_choices(element, _participant(request))}
    )


@csrf_exempt
@require_POST
def results_view(request: HttpRequest, session_code: str) -> JsonResponse:
    """Aggregated results, guarded by the session's privacy setting."""
    form = ResultsAccessForm(_read_json(request))
    if not form.is_valid():
        return _invalid(form)
    success, error = verify_results_access(session_code, form.cleaned_data["pin_code"])
    if not success:
        status = 404 if error == "Session not found" else 403
        return JsonResponse({"success": False, "error": error}, status=status)
    session = get_session_by_code(session_code)
    return JsonResponse(
        {"success": True, **serialize_results(summarize_session_results(session))}
    )
