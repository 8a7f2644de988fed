from __future__ import annotations
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field


class Category(BaseModel):
    id: str
    name: str
    slug: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None


class Tag(BaseModel):
    id: str
    name: str
    slug: str
    created_at: Optional[datetime] = None


class PostTag(BaseModel):
    blog_post_id: str
    tag_id: str


class Post(BaseModel):
    id: str
    title: str
    slug: str
    excerpt: str
    medium_url: str
    featured_image: str
    category_id: Optional[str] = None
    published_at: datetime
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    # join 확장 필드
    category: Optional[Category] = None
    tags: list[Tag] = Field(default_factory=list)


def normalize_post_row(row: dict[str, Any]) -> Post:
    """
    store 응답 row → Post 변환.
    - tags: [{"tag": {...}}, ...] 형태의 중간 테이블 row를 Tag 리스트로 평탄화
    - category 필터용 inner-join 보조 alias(tag_filter 등)는 버림
    """
    data = {k: v for k, v in row.items() if k not in ("tags", "tag_filter")}
    tags: list[Tag] = []
    for rel in row.get("tags") or []:
        tag = rel.get("tag") if isinstance(rel, dict) and "tag" in rel else rel
        if tag:
            tags.append(Tag.model_validate(tag))
    data["tags"] = tags
    return Post.model_validate(data)
