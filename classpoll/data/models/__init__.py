from classpoll.data.models.element import Element
from classpoll.data.models.response import Response
from classpoll.data.models.session import Session
from classpoll.data.models.user import User

__all__ = [
    "Element",
    "Response",
    "Session",
    "User",
]
