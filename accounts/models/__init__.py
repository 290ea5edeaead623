from .user import User, GlobalRole
from .instructor_request import InstructorRequest

__all__ = [
    "User",
    "GlobalRole",
    "InstructorRequest",
]
