from __future__ import annotations
from typing import Any, Optional

from pydantic import BaseModel


class CategorySelect(BaseModel):
    slug: Optional[str] = None


class SearchInput(BaseModel):
    value: str = ""


class PageOut(BaseModel):
    session_id: str
    applied: bool = True
    page: dict[str, Any]
