from .auth_dependency import BearerToken, CurrentOwner, get_current_owner
from .auth_util import create_access_token, decode_token
from .membership import get_user, set_membership_flag, update_profile
from .problem import create_problem, delete_problem, get_problem, list_problems, update_problem
from .reconcile import reconcile_owner
from .topic import create_topic, delete_topic, get_topic, list_topics, update_topic

__all__ = [
    "BearerToken",
    "CurrentOwner",
    "get_current_owner",
    "create_access_token",
    "decode_token",
    "get_user",
    "set_membership_flag",
    "update_profile",
    "create_problem",
    "delete_problem",
    "get_problem",
    "list_problems",
    "update_problem",
    "reconcile_owner",
    "create_topic",
    "delete_topic",
    "get_topic",
    "list_topics",
    "update_topic",
]
