from .database import get_session, init_db
from .problem import (
    delete_problem,
    delete_problems_for_topic,
    find_problem,
    get_problem,
    insert_problem,
    list_problems,
    set_problem_flag,
    update_problem_fields,
)
from .redis import RedisClient, redis_client
from .topic import (
    count_entries,
    delete_topic,
    find_topic,
    get_topic,
    insert_topic,
    list_entries,
    list_topics,
    remove_entries_for_topic,
    remove_entry,
    update_topic_fields,
    upsert_entry,
)
from .user_repository import (
    add_membership,
    get_or_create_user,
    list_memberships,
    remove_membership,
    remove_memberships_for_problems,
    update_user_fields,
)

__all__ = [
    "get_session",
    "init_db",
    "RedisClient",
    "redis_client",
    "insert_problem",
    "find_problem",
    "get_problem",
    "list_problems",
    "update_problem_fields",
    "set_problem_flag",
    "delete_problem",
    "delete_problems_for_topic",
    "insert_topic",
    "find_topic",
    "get_topic",
    "list_topics",
    "update_topic_fields",
    "delete_topic",
    "upsert_entry",
    "remove_entry",
    "remove_entries_for_topic",
    "count_entries",
    "list_entries",
    "get_or_create_user",
    "update_user_fields",
    "add_membership",
    "remove_membership",
    "remove_memberships_for_problems",
    "list_memberships",
]
