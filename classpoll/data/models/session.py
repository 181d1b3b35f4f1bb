from django.conf import settings
from django.db import models


class Session(models.Model):
    """A teacher-owned poll that participants join with a six-digit code."""

    title = models.CharField(max_length=255)  # pyright: ignore[reportUnknownVariableType]
    description = models.TextField(blank=True, default="")  # pyright: ignore[reportUnknownVariableType]
    teacher = models.ForeignKey(  # pyright: ignore[reportUnknownVariableType]
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="poll_sessions",
    )
    is_active = models.BooleanField(default=True)  # pyright: ignore[reportUnknownVariableType]
    session_code = models.CharField(max_length=6, unique=True)  # pyright: ignore[reportUnknownVariableType]
    results_public = models.BooleanField(default=True)  # pyright: ignore[reportUnknownVariableType]
    results_pin_code = models.CharField(max_length=4, blank=True, default="")  # pyright: ignore[reportUnknownVariableType]
    completion_title = models.CharField(max_length=255, blank=True, default="")  # pyright: ignore[reportUnknownVariableType]
    completion_subtitle = models.CharField(max_length=255, blank=True, default="")  # pyright: ignore[reportUnknownVariableType]
    completion_description = models.TextField(blank=True, default="")  # pyright: ignore[reportUnknownVariableType]
    completion_image_id = models.CharField(max_length=255, blank=True, default="")  # pyright: ignore[reportUnknownVariableType]
    bg_color = models.CharField(max_length=7, blank=True, default="")  # pyright: ignore[reportUnknownVariableType]
    accent_color = models.CharField(max_length=7, blank=True, default="")  # pyright: ignore[reportUnknownVariableType]
    created_at = models.DateTimeField(auto_now_add=True)  # pyright: ignore[reportUnknownVariableType]
    updated_at = models.DateTimeField(auto_now=True)  # pyright: ignore[reportUnknownVariableType]

    class Meta:
        db_table = "sessions"
        ordering = ["-created_at", "-id"]

    def __str__(self) -> str:
        return f"{self.title} ({self.session_code})"  # pyright: ignore[reportUnknownMemberType]
