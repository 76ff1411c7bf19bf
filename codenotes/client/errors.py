from typing import Any, Optional


class ClientError(Exception):
    """Base class for errors raised by the notes client."""

    user_message = "Something went wrong."


class ApiError(ClientError):
    """The server answered with a non-2xx status."""

    def __init__(self, status_code: int, detail: Any = None):
        super().__init__(f"{status_code}: {detail}")
        self.status_code = status_code
        self.detail = detail

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404

    @property
    def user_message(self) -> str:
        if isinstance(self.detail, str):
            return self.detail
        if isinstance(self.detail, list) and self.detail:
            return "; ".join(str(error.get("msg", error)) for error in self.detail if error)
        return f"Request failed with status {self.status_code}"


class TransportError(ClientError):
    """The request never got an answer."""

    user_message = "Could not reach the server. Please try again."

    def __init__(self, message: str, cause: Optional[Exception] = None):
        super().__init__(message)
        self.cause = cause


class ProtocolError(ClientError):
    """A successful response whose body is not what the endpoint promises."""

    user_message = "The server sent an unexpected response."
