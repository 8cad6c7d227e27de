# app/auth.py
from typing import Optional

from fastapi import Depends, Header
from pydantic import BaseModel

from .core import MAX_ID
from .errors import AuthenticationRequired

# Login is handled elsewhere; the acting user arrives in the X-User-Id header
# and is turned into a request-scoped Principal here.


class Principal(BaseModel):
    user_id: int


def get_principal(x_user_id: Optional[str] = Header(None)) -> Optional[Principal]:
    if x_user_id is None or not x_user_id.strip():
        return None
    raw = x_user_id.strip()
    if not (raw.isascii() and raw.isdigit()) or not 0 < int(raw) <= MAX_ID:
        raise AuthenticationRequired("X-User-Id must be a positive integer")
    return Principal(user_id=int(raw))


def require_principal(principal: Optional[Principal] = Depends(get_principal)) -> Principal:
    if principal is None:
        raise AuthenticationRequired()
    return principal
