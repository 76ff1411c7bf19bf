import logging
from typing import Any, Dict, List, Optional, Type, TypeVar

import requests
from pydantic import BaseModel, ValidationError

from codenotes.client.errors import ApiError, ProtocolError, TransportError
from codenotes.data.schemas import (
    MembershipFlag,
    ProblemRead,
    ReconcileReport,
    TopicRead,
    UserRead,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

API_PREFIX = "/api/v1"


class NotesApi:
    """Blocking HTTP client for the CodeNotes API."""

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.session = session or requests.Session()

    def _request(self, method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        url = f"{self.base_url}{API_PREFIX}{path}"
        try:
            response = self.session.request(
                method, url, json=payload, headers=headers, timeout=self.timeout
            )
        except requests.RequestException as e:
            logger.error(f"{method} {path} failed: {str(e)}")
            raise TransportError(f"{method} {path} failed: {str(e)}", cause=e) from e

        if not response.ok:
            try:
                body = response.json()
                detail = body.get("detail") if isinstance(body, dict) else body
            except ValueError:
                detail = response.text
            logger.error(f"{method} {path} returned {response.status_code}: {detail}")
            raise ApiError(response.status_code, detail)

        try:
            return response.json()
        except ValueError as e:
            raise ProtocolError(f"{method} {path} returned a non-JSON body") from e

    @staticmethod
    def _parse(model: Type[ModelT], body: Any) -> ModelT:
        try:
            return model.model_validate(body)
        except ValidationError as e:
            raise ProtocolError(f"Malformed {model.__name__}: {e}") from e

    def _parse_list(self, model: Type[ModelT], body: Any) -> List[ModelT]:
        if not isinstance(body, list):
            raise ProtocolError(f"Expected a list of {model.__name__}")
        return [self._parse(model, item) for item in body]

    @staticmethod
    def _message(body: Any) -> str:
        return body.get("message", "") if isinstance(body, dict) else ""

    # Topics

    def list_topics(self) -> List[TopicRead]:
        return self._parse_list(TopicRead, self._request("GET", "/topics"))

    def get_topic(self, topic_id: str) -> TopicRead:
        return self._parse(TopicRead, self._request("GET", f"/topics/{topic_id}"))

    def create_topic(self, title: str, topic_id: Optional[str] = None) -> TopicRead:
        payload = {"title": title}
        if topic_id:
            payload["topicId"] = topic_id
        return self._parse(TopicRead, self._request("POST", "/topics", payload))

    def update_topic(self, topic_id: str, title: str) -> TopicRead:
        return self._parse(
            TopicRead, self._request("PUT", f"/topics/{topic_id}", {"title": title})
        )

    def delete_topic(self, topic_id: str) -> str:
        return self._message(self._request("DELETE", f"/topics/{topic_id}"))

    # Problems

    def list_problems(self) -> List[ProblemRead]:
        return self._parse_list(ProblemRead, self._request("GET", "/problems"))

    def get_problem(self, problem_id: str) -> ProblemRead:
        return self._parse(ProblemRead, self._request("GET", f"/problems/{problem_id}"))

    def create_problem(self, payload: Dict[str, Any]) -> ProblemRead:
        body = self._request("POST", "/problems", payload)
        if not isinstance(body, dict) or not body.get("problemId"):
            # A created problem always carries its identity
            raise ProtocolError("Created problem has no problemId")
        return self._parse(ProblemRead, body)

    def update_problem(self, problem_id: str, updates: Dict[str, Any]) -> ProblemRead:
        return self._parse(
            ProblemRead, self._request("PUT", f"/problems/{problem_id}", updates)
        )

    def delete_problem(self, problem_id: str) -> str:
        return self._message(self._request("DELETE", f"/problems/{problem_id}"))

    # Users

    def get_profile(self) -> UserRead:
        return self._parse(UserRead, self._request("GET", "/users/profile"))

    def set_flag(self, flag: MembershipFlag, problem_id: str, value: bool) -> UserRead:
        method = "POST" if value else "DELETE"
        body = self._request(method, f"/users/{flag.value}", {"problemId": problem_id})
        return self._parse(UserRead, body)

    def reconcile(self) -> ReconcileReport:
        return self._parse(ReconcileReport, self._request("POST", "/maintenance/reconcile"))
