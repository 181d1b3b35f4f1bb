import dj_database_url

from .base import *  # noqa: F403

DEBUG = False

DATABASES = {
    "default": dj_database_url.parse("sqlite://:memory:"),
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]
