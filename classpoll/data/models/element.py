from django.db import models


class Element(models.Model):
    class ElementType(models.TextChoices):
        SINGLE_CHOICE = "single_choice", "Single choice"
        SINGLE_CHOICE_UNIQUE = "single_choice_unique", "Single choice (unique)"
        MULTIPLE_CHOICE = "multiple_choice", "Multiple choice"
        TEXT_INPUT = "text_input", "Text input"
        NUMBER_INPUT = "number_input", "Number input"
        FILE_UPLOAD = "file_upload", "File upload"

    session = models.ForeignKey(  # pyright: ignore[reportUnknownVariableType]
        "data.Session",
        on_delete=models.CASCADE,
        related_name="elements",
    )
    element_type = models.CharField(  # pyright: ignore[reportUnknownVariableType]
        max_length=32,
        choices=ElementType,
    )
    title = models.CharField(max_length=255)  # pyright: ignore[reportUnknownVariableType]
    subtitle = models.CharField(max_length=255, blank=True, default="")  # pyright: ignore[reportUnknownVariableType]
    description = models.TextField(blank=True, default="")  # pyright: ignore[reportUnknownVariableType]
    image_id = models.CharField(max_length=255, blank=True, default="")  # pyright: ignore[reportUnknownVariableType]
    # Dense 0..n-1 within a session; repaired by the ordering actions, not the schema.
    order = models.PositiveIntegerField(default=0)  # pyright: ignore[reportUnknownVariableType]
    is_active = models.BooleanField(default=True)  # pyright: ignore[reportUnknownVariableType]
    choices = models.JSONField(null=True, blank=True)  # pyright: ignore[reportUnknownVariableType]
    min_value = models.FloatField(null=True, blank=True)  # pyright: ignore[reportUnknownVariableType]
    max_value = models.FloatField(null=True, blank=True)  # pyright: ignore[reportUnknownVariableType]
    step = models.FloatField(null=True, blank=True)  # pyright: ignore[reportUnknownVariableType]
    conditional_logic = models.JSONField(null=True, blank=True)  # pyright: ignore[reportUnknownVariableType]
    created_at = models.DateTimeField(auto_now_add=True)  # pyright: ignore[reportUnknownVariableType]
    updated_at = models.DateTimeField(auto_now=True)  # pyright: ignore[reportUnknownVariableType]

    class Meta:
        db_table = "elements"
        ordering = ["order", "id"]
        indexes = [
            models.Index(fields=["session", "order"], name="element_session_order_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.order}: {self.title}"  # pyright: ignore[reportUnknownMemberType]
