import re
from typing import Any

from django import forms
from django.contrib.auth import authenticate, get_user_model, password_validation
from django.http import HttpRequest

from classpoll.data.models import Element
from classpoll.logic.ordering import DIRECTIONS
from classpoll.logic.visibility import Condition

User = get_user_model()

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def from_camel(payload: dict[str, Any]) -> dict[str, Any]:
    """Map wire keys (``minValue``) to form field names (``min_value``)."""
    return {_CAMEL_BOUNDARY.sub("_", key).lower(): value for key, value in payload.items()}


def provided_data(form: forms.Form) -> dict[str, Any]:
    """Cleaned values for the fields the client actually sent."""
    return {
        name: value
        for name, value in form.cleaned_data.items()
        if name in form.data
    }


class RegistrationForm(forms.Form):
    email = forms.EmailField(max_length=150)
    password = forms.CharField(strip=False)
    display_name = forms.CharField(max_length=150, required=False)

    def clean_email(self) -> str:
        email: str = self.cleaned_data["email"]
        if User.objects.filter(email__iexact=email).exists():
            raise forms.ValidationError("An account with this email already exists.")
        return email

    def clean(self) -> dict[str, Any]:
        cleaned = super().clean() or {}
        password = cleaned.get("password")
        if password:
            try:
                password_validation.validate_password(
                    password, User(email=cleaned.get("email", ""))
                )
            except forms.ValidationError as e:
                self.add_error("password", e)
        return cleaned


class EmailAuthenticationForm(forms.Form):
    """Login form that authenticates by email instead of username."""

    email = forms.EmailField()
    password = forms.CharField(strip=False)

    def __init__(
        self,
        request: HttpRequest | None = None,
        *args: object,
        **kwargs: object,
    ) -> None:
        self.request = request
        self.user_cache: User | None = None  # type: ignore[assignment]
        super().__init__(*args, **kwargs)  # type: ignore[arg-type]

    def clean(self) -> dict[str, Any]:
        email = self.cleaned_data.get("email")
        password = self.cleaned_data.get("password")

        if email is not None and password is not None:
            self.user_cache = authenticate(
                self.request, username=email, password=password
            )
            if self.user_cache is None:
                raise forms.ValidationError(
                    "Please enter a correct email and password.",
                    code="invalid_login",
                )
        return self.cleaned_data

    def get_user(self) -> User | None:  # type: ignore[return]
        return self.user_cache  # type: ignore[return-value]


# --- Sessions ---


class SessionForm(forms.Form):
    """Session settings. With ``partial=True`` every field is optional."""

    title = forms.CharField(max_length=255)
    description = forms.CharField(required=False)
    results_public = forms.NullBooleanField(required=False)
    results_pin_code = forms.RegexField(
        regex=r"^(\d{4})?$", required=False, error_messages={"invalid": "PIN must be 4 digits."}
    )
    completion_title = forms.CharField(max_length=255, required=False)
    completion_subtitle = forms.CharField(max_length=255, required=False)
    completion_description = forms.CharField(required=False)
    completion_image_id = forms.CharField(max_length=255, required=False)
    bg_color = forms.RegexField(regex=r"^(#[0-9a-fA-F]{6})?$", required=False)
    accent_color = forms.RegexField(regex=r"^(#[0-9a-fA-F]{6})?$", required=False)

    def __init__(self, *args: object, partial: bool = False, **kwargs: object) -> None:
        super().__init__(*args, **kwargs)  # type: ignore[arg-type]
        if partial:
            for field in self.fields.values():
                field.required = False


class ActiveForm(forms.Form):
    is_active = forms.NullBooleanField()

    def clean_is_active(self) -> bool:
        value = self.cleaned_data.get("is_active")
        if value is None:
            raise forms.ValidationError("isActive must be true or false.")
        return value


class ResultsAccessForm(forms.Form):
    pin_code = forms.CharField(max_length=4, required=False)


# --- Elements ---


def _clean_choice_list(value: object) -> list[dict[str, Any]] | None:
    if value is None:
        return None
    if not isinstance(value, list):
        raise forms.ValidationError("choices must be a list.")
    cleaned: list[dict[str, Any]] = []
    for item in value:
        if not isinstance(item, dict) or not isinstance(item.get("id"), str) or not item["id"]:
            raise forms.ValidationError("Each choice needs a string id.")
        choice: dict[str, Any] = {"id": item["id"]}
        for key, kind in (("text", str), ("imageId", str), ("isCorrect", bool)):
            if item.get(key) is not None:
                if not isinstance(item[key], kind):
                    raise forms.ValidationError(f"Choice {key} has the wrong type.")
                choice[key] = item[key]
        cleaned.append(choice)
    ids = [choice["id"] for choice in cleaned]
    if len(set(ids)) != len(ids):
        raise forms.ValidationError("Choice ids must be unique within an element.")
    return cleaned


class ElementForm(forms.Form):
    """Element content. With ``partial=True`` the type is fixed and all else optional."""

    element_type = forms.ChoiceField(choices=Element.ElementType.choices)
    title = forms.CharField(max_length=255)
    subtitle = forms.CharField(max_length=255, required=False)
    description = forms.CharField(required=False)
    image_id = forms.CharField(max_length=255, required=False)
    choices = forms.JSONField(required=False)
    min_value = forms.FloatField(required=False)
    max_value = forms.FloatField(required=False)
    step = forms.FloatField(required=False)

    def __init__(self, *args: object, partial: bool = False, **kwargs: object) -> None:
        super().__init__(*args, **kwargs)  # type: ignore[arg-type]
        if partial:
            del self.fields["element_type"]
            for field in self.fields.values():
                field.required = False

    def clean_choices(self) -> list[dict[str, Any]] | None:
        return _clean_choice_list(self.cleaned_data.get("choices"))


class ImportElementsForm(forms.Form):
    elements = forms.JSONField()

    def clean_elements(self) -> list[dict[str, Any]]:
        raw = self.cleaned_data.get("elements")
        if not isinstance(raw, list):
            raise forms.ValidationError("elements must be a list.")
        specs: list[dict[str, Any]] = []
        for index, item in enumerate(raw):
            if not isinstance(item, dict):
                raise forms.ValidationError(f"Element {index} must be an object.")
            data = from_camel(item)
            if "type" in data:
                data["element_type"] = data.pop("type")
            form = ElementForm(data)
            if not form.is_valid():
                raise forms.ValidationError(f"Element {index}: {form.errors.as_text()}")
            specs.append(form.cleaned_data)
        return specs


class ReorderForm(forms.Form):
    element_orders = forms.JSONField()

    def clean_element_orders(self) -> list[tuple[int, int]]:
        raw = self.cleaned_data.get("element_orders")
        if not isinstance(raw, list):
            raise forms.ValidationError("elementOrders must be a list.")
        pairs: list[tuple[int, int]] = []
        for item in raw:
            try:
                pk = int(item["elementId"])
                order = int(item["order"])
            except (KeyError, TypeError, ValueError) as e:
                raise forms.ValidationError(
                    "Each entry needs an integer elementId and order."
                ) from e
            if order < 0:
                raise forms.ValidationError("Orders cannot be negative.")
            pairs.append((pk, order))
        return pairs


class MoveForm(forms.Form):
    direction = forms.ChoiceField(choices=[(d, d) for d in DIRECTIONS])


class ConditionalLogicForm(forms.Form):
    """A visibility rule for ``element``.

    The dependency must be another element of the same session placed
    before it.
    """

    enabled = forms.BooleanField(required=False)
    depends_on_element_id = forms.IntegerField()
    condition = forms.ChoiceField(choices=[(c.value, c.value) for c in Condition])
    value = forms.CharField(required=False, strip=False)

    def __init__(self, element: Element, *args: object, **kwargs: object) -> None:
        self.element = element
        super().__init__(*args, **kwargs)  # type: ignore[arg-type]

    def clean(self) -> dict[str, Any]:
        cleaned = super().clean() or {}
        depends_on = cleaned.get("depends_on_element_id")
        if depends_on is None:
            return cleaned
        dependency = Element.objects.filter(
            pk=depends_on, session_id=self.element.session_id  # pyright: ignore[reportAttributeAccessIssue]
        ).first()
        if dependency is None or dependency.pk == self.element.pk:
            self.add_error(
                "depends_on_element_id", "Dependency must be another element of this session."
            )
        elif dependency.order >= self.element.order:  # pyright: ignore[reportUnknownMemberType]
            self.add_error(
                "depends_on_element_id", "Dependency must come before this element."
            )
        return cleaned

    def to_rule(self) -> dict[str, Any]:
        rule: dict[str, Any] = {
            "enabled": self.cleaned_data["enabled"],
            "dependsOnElementId": self.cleaned_data["depends_on_element_id"],
            "condition": self.cleaned_data["condition"],
        }
        if self.cleaned_data.get("value"):
            rule["value"] = self.cleaned_data["value"]
        return rule


# --- Responses ---


class SubmitResponseForm(forms.Form):
    element_id = forms.IntegerField()
    participant_id = forms.CharField(max_length=128)
    text_value = forms.CharField(required=False, strip=False, empty_value=None)
    number_value = forms.FloatField(required=False)
    choice_ids = forms.JSONField(required=False)
    file_id = forms.CharField(max_length=255, required=False, empty_value=None)

    def clean_text_value(self) -> str | None:
        if self.data.get("text_value") == "":
            return ""
        return self.cleaned_data.get("text_value")

    def clean_choice_ids(self) -> list[str] | None:
        value = self.cleaned_data.get("choice_ids")
        if value is None:
            return None
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise forms.ValidationError("choiceIds must be a list of strings.")
        return value
