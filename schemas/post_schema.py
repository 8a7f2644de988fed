from __future__ import annotations
from typing import Optional

from pydantic import BaseModel, Field, HttpUrl, field_validator, model_validator

from models.blog import Post, Tag
from utils.slug import dedupe_names, slugify


class PostCreate(BaseModel):
    title: str = Field(..., min_length=1)
    slug: Optional[str] = Field(None, description="생략하면 title에서 자동 생성")
    excerpt: str = Field(..., min_length=1)
    medium_url: HttpUrl
    featured_image: HttpUrl
    category_id: Optional[str] = None
    tags: list[str] = Field(default_factory=list)

    @field_validator("title", "excerpt")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    @field_validator("category_id")
    @classmethod
    def _empty_category_to_none(cls, v: Optional[str]) -> Optional[str]:
        return (v or "").strip() or None

    @field_validator("tags")
    @classmethod
    def _dedupe_tags(cls, v: list[str]) -> list[str]:
        return dedupe_names(v)

    @model_validator(mode="after")
    def _fill_slug(self) -> "PostCreate":
        slug = (self.slug or "").strip() or slugify(self.title)
        if not slug:
            raise ValueError("slug is required")
        self.slug = slug
        return self

    def to_row(self) -> dict:
        return {
            "title": self.title,
            "slug": self.slug,
            "excerpt": self.excerpt,
            "medium_url": str(self.medium_url),
            "featured_image": str(self.featured_image),
            "category_id": self.category_id,
        }


class PostCreateResp(BaseModel):
    post: Post
    tags: list[Tag] = Field(default_factory=list)
