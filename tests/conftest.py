import django
import pytest
from django.conf import settings
from django.test import Client

# Ensure Django is set up before tests run
if not settings.configured:
    django.setup()

AUTH_BACKEND = "classpoll.backends.EmailBackend"


@pytest.fixture
def teacher():  # type: ignore[no-untyped-def]
    from tests.factories import UserFactory

    return UserFactory()


@pytest.fixture
def teacher_client(teacher) -> Client:  # type: ignore[no-untyped-def]
    """A test client logged in as ``teacher``."""
    client = Client()
    client.force_login(teacher, backend=AUTH_BACKEND)
    return client
