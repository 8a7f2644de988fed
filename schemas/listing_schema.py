from __future__ import annotations
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, Field

from models.blog import Category, Post, Tag

T = TypeVar("T")


class ListingOut(BaseModel, Generic[T]):
    items: list[T] = Field(default_factory=list)
    error: Optional[str] = None


PostListOut = ListingOut[Post]
CategoryListOut = ListingOut[Category]
TagListOut = ListingOut[Tag]
