from __future__ import annotations
from typing import Any, Optional

from pydantic import BaseModel, Field


class Credentials(BaseModel):
    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=6)


class AuthUser(BaseModel):
    id: str
    email: Optional[str] = None
    app_metadata: dict[str, Any] = Field(default_factory=dict)
    is_admin: bool = False


class AuthSession(BaseModel):
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None
    user: Optional[AuthUser] = None
