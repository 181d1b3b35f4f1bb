from django.db import models


class Response(models.Model):
    """One participant's answer to one element.

    Only the value slot matching the element type is expected to be set;
    the row itself does not enforce that.
    """

    session = models.ForeignKey(  # pyright: ignore[reportUnknownVariableType]
        "data.Session",
        on_delete=models.CASCADE,
        related_name="responses",
    )
    element = models.ForeignKey(  # pyright: ignore[reportUnknownVariableType]
        "data.Element",
        on_delete=models.CASCADE,
        related_name="responses",
    )
    participant_id = models.CharField(max_length=128)  # pyright: ignore[reportUnknownVariableType]
    text_value = models.TextField(null=True, blank=True)  # pyright: ignore[reportUnknownVariableType]
    number_value = models.FloatField(null=True, blank=True)  # pyright: ignore[reportUnknownVariableType]
    choice_ids = models.JSONField(null=True, blank=True)  # pyright: ignore[reportUnknownVariableType]
    file_id = models.CharField(max_length=255, null=True, blank=True)  # pyright: ignore[reportUnknownVariableType]
    created_at = models.DateTimeField(auto_now_add=True)  # pyright: ignore[reportUnknownVariableType]
    updated_at = models.DateTimeField(auto_now=True)  # pyright: ignore[reportUnknownVariableType]

    class Meta:
        db_table = "responses"
        ordering = ["created_at", "id"]
        constraints = [
            models.UniqueConstraint(
                fields=["participant_id", "element"],
                name="unique_response_per_participant_element",
            ),
        ]

    def __str__(self) -> str:
        return f"Response({self.participant_id}, {self.element_id})"  # pyright: ignore[reportUnknownMemberType, reportAttributeAccessIssue]
