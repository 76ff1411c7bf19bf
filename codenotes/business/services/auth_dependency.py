from typing import Optional

from fastapi import Depends, Request
from pydantic import BaseModel

from codenotes.business.services.auth_util import decode_token
from codenotes.errors import AuthenticationException


class CurrentOwner(BaseModel):
    """The authenticated principal; every read and write is scoped by `id`."""

    id: str
    username: Optional[str] = None


class BearerToken:
    def __init__(self, header_name: str = "Authorization"):
        self.header_name = header_name

    async def __call__(self, request: Request) -> dict:
        header = request.headers.get(self.header_name)
        if not header:
            raise AuthenticationException(detail=f"{self.header_name} header missing")

        scheme, _, token = header.partition(" ")
        if scheme.lower() != "bearer" or not token:
            raise AuthenticationException(detail="Bearer token required")

        token_data = decode_token(token.strip())
        if not token_data:
            raise AuthenticationException(detail="Invalid or expired token")

        return token_data


def get_current_owner(token_data: dict = Depends(BearerToken())) -> CurrentOwner:
    user = token_data.get("user") or {}
    owner_id = user.get("id") or token_data.get("id")
    if not owner_id:
        raise AuthenticationException(detail="Could not validate user")
    return CurrentOwner(id=str(owner_id), username=user.get("username"))
