"""
Session-scoped mirror of the caller's topics and problems.

Every write goes to the server first. Local state changes only after the call
succeeds, using the entity the server returned; on failure the error
propagates and the mirror is left as it was.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import Field as PydanticField
from pydantic import ValidationError

from codenotes.client.api import NotesApi
from codenotes.client.search import search_problems
from codenotes.data.schemas import (
    ApiModel,
    MembershipFlag,
    ProblemRead,
    TopicRead,
    UserRead,
)

logger = logging.getLogger(__name__)

STORAGE_KEY = "coding-notes-storage"
DEFAULT_STATEMENT = "No statement provided"


class MirrorState(ApiModel):
    """The persisted part of the mirror. Selections are stored by id."""

    user: Optional[UserRead] = None
    token: Optional[str] = None
    topics: List[TopicRead] = PydanticField(default_factory=list)
    selected_topic: Optional[str] = None
    selected_problem: Optional[str] = None
    is_dark_mode: bool = False
    is_sidebar_visible: bool = True


class MirrorCache:
    def __init__(self, api: NotesApi, storage_path: Optional[Union[str, Path]] = None):
        self.api = api
        self.storage_path = Path(storage_path) if storage_path else None
        self._reset()
        self.load()

    def _reset(self):
        self.user: Optional[UserRead] = None
        self.token: Optional[str] = None
        self.topics: Dict[str, TopicRead] = {}
        self.selected_topic_id: Optional[str] = None
        self.selected_problem: Optional[ProblemRead] = None
        self.is_dark_mode = False
        self.is_sidebar_visible = True
        self.search_results: List[ProblemRead] = []

    # Persistence

    def snapshot(self) -> MirrorState:
        return MirrorState(
            user=self.user,
            token=self.token,
            topics=list(self.topics.values()),
            selected_topic=self.selected_topic_id,
            selected_problem=self.selected_problem.problem_id if self.selected_problem else None,
            is_dark_mode=self.is_dark_mode,
            is_sidebar_visible=self.is_sidebar_visible,
        )

    def save(self):
        if self.storage_path is None:
            return
        self.storage_path.parent.mkdir(parents=True, exist_ok=True)
        self.storage_path.write_text(self.snapshot().model_dump_json(by_alias=True))

    def load(self):
        if self.storage_path is None or not self.storage_path.exists():
            return
        try:
            state = MirrorState.model_validate_json(self.storage_path.read_text())
        except (OSError, ValidationError) as e:
            logger.warning(f"Discarding unreadable {STORAGE_KEY} record: {str(e)}")
            self.storage_path.unlink(missing_ok=True)
            return

        self.user = state.user
        self.token = state.token
        self.api.token = state.token
        self.topics = {topic.topic_id: topic for topic in state.topics}
        self.selected_topic_id = state.selected_topic
        self.selected_problem = (
            self.find_problem(state.selected_problem) if state.selected_problem else None
        )
        self.is_dark_mode = state.is_dark_mode
        self.is_sidebar_visible = state.is_sidebar_visible

    # Session

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    def set_user(self, user: Optional[UserRead], token: Optional[str] = None):
        self.user = user
        self.token = token
        self.api.token = token
        self.save()

    def logout(self):
        self._reset()
        self.api.token = None
        if self.storage_path is not None:
            self.storage_path.unlink(missing_ok=True)

    # Lookups

    def find_problem(self, problem_id: str) -> Optional[ProblemRead]:
        topic = self._topic_holding(problem_id)
        return topic.problems[problem_id] if topic else None

    def _topic_holding(self, problem_id: str) -> Optional[TopicRead]:
        for topic in self.topics.values():
            if problem_id in topic.problems:
                return topic
        return None

    def _realias_selection(self):
        if self.selected_problem is not None:
            self.selected_problem = self.find_problem(self.selected_problem.problem_id)

    # Topics

    def fetch_topics(self) -> Dict[str, TopicRead]:
        topics = self.api.list_topics()
        self.topics = {topic.topic_id: topic for topic in topics}
        self._realias_selection()
        self.save()
        return self.topics

    def fetch_problems(self) -> Dict[str, TopicRead]:
        """Rebuild every topic's map from the canonical problem list."""
        problems = self.api.list_problems()
        topics = {
            topic_id: topic.model_copy(update={"problems": {}})
            for topic_id, topic in self.topics.items()
        }
        for problem in problems:
            topic = topics.get(problem.topic_id)
            if topic is None:
                topic = TopicRead(
                    topic_id=problem.topic_id,
                    title=problem.topic_id,
                    owner_id=problem.owner_id,
                )
                topics[problem.topic_id] = topic
            topic.problems[problem.problem_id] = problem
        self.topics = topics
        self._realias_selection()
        self.save()
        return self.topics

    def add_topic(self, title: str, topic_id: Optional[str] = None) -> TopicRead:
        topic = self.api.create_topic(title, topic_id=topic_id)
        self.topics[topic.topic_id] = topic
        self.save()
        return topic

    def rename_topic(self, topic_id: str, title: str) -> TopicRead:
        topic = self.api.update_topic(topic_id, title)
        self.topics[topic.topic_id] = topic
        self._realias_selection()
        self.save()
        return topic

    def delete_topic(self, topic_id: str):
        self.api.delete_topic(topic_id)
        topic = self.topics.pop(topic_id, None)
        if topic is not None:
            self._forget_memberships(topic.problems)
        if self.selected_topic_id == topic_id:
            self.selected_topic_id = None
        if self.selected_problem is not None and self.selected_problem.topic_id == topic_id:
            self.selected_problem = None
        self.save()

    # Problems

    def create_problem(self, data: Dict[str, Any]) -> ProblemRead:
        payload = dict(data)
        if not (payload.get("statement") or "").strip():
            payload["statement"] = DEFAULT_STATEMENT
        problem = self.api.create_problem(payload)
        self._merge_problem(problem, topic_title=payload.get("topicTitle"))
        self.save()
        return problem

    def add_problem(self, topic_id: str, data: Dict[str, Any]) -> ProblemRead:
        return self.create_problem({**data, "topicId": topic_id})

    def update_problem(self, problem_id: str, updates: Dict[str, Any]) -> ProblemRead:
        problem = self.api.update_problem(problem_id, updates)
        self._merge_problem(problem)
        self.save()
        return problem

    def delete_problem(self, problem_id: str):
        self.api.delete_problem(problem_id)
        topic = self._topic_holding(problem_id)
        if topic is not None:
            del topic.problems[problem_id]
            if not topic.problems:
                del self.topics[topic.topic_id]
        self._forget_memberships([problem_id])
        if self.selected_problem is not None and self.selected_problem.problem_id == problem_id:
            self.selected_problem = None
        self.save()

    def _forget_memberships(self, problem_ids):
        """The server drops deleted problems from every list; mirror that locally."""
        if self.user is None:
            return
        gone = set(problem_ids)
        self.user = self.user.model_copy(
            update={
                flag.list_name: [pid for pid in getattr(self.user, flag.list_name) if pid not in gone]
                for flag in MembershipFlag
            }
        )

    def _merge_problem(self, problem: ProblemRead, topic_title: Optional[str] = None):
        stale = self._topic_holding(problem.problem_id)
        if stale is not None and stale.topic_id != problem.topic_id:
            del stale.problems[problem.problem_id]

        topic = self.topics.get(problem.topic_id)
        if topic is None:
            topic = TopicRead(
                topic_id=problem.topic_id,
                title=topic_title or problem.topic_id,
                owner_id=problem.owner_id,
            )
            self.topics[problem.topic_id] = topic
        topic.problems[problem.problem_id] = problem

        if self.selected_problem is not None and self.selected_problem.problem_id == problem.problem_id:
            self.selected_problem = problem

    # Flags

    def set_flag(self, flag: MembershipFlag, problem_id: str, value: bool) -> Optional[UserRead]:
        """
        Set `flag` on a mirrored problem. Problems not in the mirror are
        ignored and None is returned.
        """
        topic = self._topic_holding(problem_id)
        if topic is None:
            logger.debug(f"Ignoring {flag.value} change for unknown problem {problem_id}")
            return None

        user = self.api.set_flag(flag, problem_id, value)
        self.user = user
        updated = topic.problems[problem_id].model_copy(update={flag.problem_field: value})
        topic.problems[problem_id] = updated
        if self.selected_problem is not None and self.selected_problem.problem_id == problem_id:
            self.selected_problem = updated
        self.save()
        return user

    def _toggle(self, flag: MembershipFlag, problem_id: str) -> Optional[UserRead]:
        problem = self.find_problem(problem_id)
        if problem is None:
            return None
        return self.set_flag(flag, problem_id, not getattr(problem, flag.problem_field))

    def toggle_favorite(self, problem_id: str) -> Optional[UserRead]:
        return self._toggle(MembershipFlag.FAVORITE, problem_id)

    def toggle_saved_for_later(self, problem_id: str) -> Optional[UserRead]:
        return self._toggle(MembershipFlag.SAVED, problem_id)

    def toggle_solved(self, problem_id: str) -> Optional[UserRead]:
        return self._toggle(MembershipFlag.SOLVED, problem_id)

    def unmark_solved(self, problem_id: str) -> Optional[UserRead]:
        return self.set_flag(MembershipFlag.SOLVED, problem_id, False)

    # UI state

    def search(self, query: str) -> List[ProblemRead]:
        self.search_results = search_problems(self.topics, query)
        return self.search_results

    def set_selected_topic(self, topic_id: Optional[str]):
        self.selected_topic_id = topic_id
        self.save()

    def set_selected_problem(self, problem_id: Optional[str]) -> Optional[ProblemRead]:
        self.selected_problem = self.find_problem(problem_id) if problem_id else None
        self.save()
        return self.selected_problem

    @property
    def selected_topic(self) -> Optional[TopicRead]:
        if self.selected_topic_id is None:
            return None
        return self.topics.get(self.selected_topic_id)

    def toggle_sidebar(self) -> bool:
        self.is_sidebar_visible = not self.is_sidebar_visible
        self.save()
        return self.is_sidebar_visible

    def toggle_dark_mode(self) -> bool:
        self.is_dark_mode = not self.is_dark_mode
        self.save()
        return self.is_dark_mode
