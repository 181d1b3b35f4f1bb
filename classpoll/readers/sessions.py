from django.db.models import QuerySet
from django.shortcuts import get_object_or_404

from classpoll.data.models import Session
from classpoll.data.models.user import User


def get_session_for_teacher(session_pk: int, teacher: User) -> Session:
    """Get a session by PK, verifying ownership. 404 if not found or not owned."""
    return get_object_or_404(
        Session.objects.select_related("teacher"),
        pk=session_pk,
        teacher=teacher,
    )


def get_teacher_sessions(teacher: User | None) -> QuerySet[Session]:
    """Sessions owned by a teacher, newest first. Empty for anonymous callers."""
    if teacher is None:
        return Session.objects.none()
    return Session.objects.filter(teacher=teacher).order_by("-created_at", "-id")


def get_session_by_code(session_code: str) -> Session:
    """Resolve a participant's join code. 404 if no session holds it."""
    return get_object_or_404(Session, session_code=session_code)


def verify_results_access(
    session_code: str, pin_code: str | None = None
) -> tuple[bool, str | None]:
    """Check whether results of a session may be shown.

    Returns ``(success, error)``; public results need no PIN.
    """
    session = Session.objects.filter(session_code=session_code).first()
    if session is None:
        return False, "Session not found"
    if session.results_public:  # pyright: ignore[reportUnknownMemberType]
        return True, None
    if not pin_code:
        return False, "Pin code required"
    if session.results_pin_code != pin_code:  # pyright: ignore[reportUnknownMemberType]
        return False, "Invalid pin code"
    return True, None
