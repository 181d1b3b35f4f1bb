from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """Teacher account. Logs in by email; participants never have one."""

    email = models.EmailField(unique=True)  # pyright: ignore[reportUnknownVariableType]
    display_name = models.CharField(max_length=150, blank=True, default="")  # pyright: ignore[reportUnknownVariableType]

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = ["username"]

    class Meta:
        db_table = "users"

    def __str__(self) -> str:
        return str(self.display_name or self.email)  # pyright: ignore[reportUnknownMemberType, reportUnknownArgumentType]
