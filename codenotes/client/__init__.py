from .api import NotesApi
from .errors import ApiError, ClientError, ProtocolError, TransportError
from .mirror import DEFAULT_STATEMENT, STORAGE_KEY, MirrorCache, MirrorState

__all__ = [
    "NotesApi",
    "ApiError",
    "ClientError",
    "ProtocolError",
    "TransportError",
    "DEFAULT_STATEMENT",
    "STORAGE_KEY",
    "MirrorCache",
    "MirrorState",
]
