from .base import ApiModel, TimestampedModel, utc_now
from .enums import Difficulty, Language, MembershipFlag
from .problem import Problem, ProblemCreate, ProblemRead, ProblemUpdate
from .topic import Topic, TopicCreate, TopicEntry, TopicRead, TopicUpdate
from .user import (
    Membership,
    MembershipRequest,
    MessageResponse,
    ReconcileReport,
    User,
    UserRead,
    UserUpdate,
)

__all__ = [
    "ApiModel",
    "TimestampedModel",
    "utc_now",
    "Difficulty",
    "Language",
    "MembershipFlag",
    "Problem",
    "ProblemCreate",
    "ProblemRead",
    "ProblemUpdate",
    "Topic",
    "TopicCreate",
    "TopicEntry",
    "TopicRead",
    "TopicUpdate",
    "Membership",
    "MembershipRequest",
    "MessageResponse",
    "ReconcileReport",
    "User",
    "UserRead",
    "UserUpdate",
]
