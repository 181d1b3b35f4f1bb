from classpoll.data.models import User


def create_teacher(email: str, password: str, display_name: str = "") -> User:
    """Create a teacher account. The email doubles as the internal username."""
    user = User.objects.create_user(
        username=email,
        email=email,
        password=password,
        display_name=display_name,
    )
    return user
