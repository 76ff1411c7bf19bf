from .maintenance import maintenance_router
from .problem import problem_router
from .topic import topic_router
from .user import user_router

__all__ = [
    "maintenance_router",
    "problem_router",
    "topic_router",
    "user_router",
]
