from django.contrib.auth import get_user_model
from django.contrib.auth.backends import ModelBackend
from django.http import HttpRequest

User = get_user_model()


class EmailBackend(ModelBackend):
    """Teachers sign in with their email address; case is ignored."""

    def authenticate(
        self,
        request: HttpRequest | None,
        username: str | None = None,
        password: str | None = None,
        **kwargs: object,
    ) -> User | None:  # type: ignore[override]
        email = kwargs.get("email", username)
        if not isinstance(email, str) or password is None:
            return None
        user = User.objects.filter(email__iexact=email.strip()).first()
        if user is None:
            # Hash anyway so unknown emails take as long as wrong passwords
            User().set_password(password)
            return None
        if user.check_password(password) and self.user_can_authenticate(user):
            return user  # type: ignore[return-value]
        return None
