from __future__ import annotations
from dataclasses import dataclass, field
from typing import Generic, Optional, TypeVar

from loguru import logger
from pydantic import ValidationError

from common.errors import StoreError
from models.blog import Category, Post, Tag, normalize_post_row
from store.client import StoreClient
from store.query import Embed, IMatch, Query

T = TypeVar("T")

POSTS_TABLE = "blog_posts"
CATEGORIES_TABLE = "categories"
TAGS_TABLE = "tags"
POST_TAGS_TABLE = "blog_post_tags"


@dataclass
class Listing(Generic[T]):
    """조회 결과. 실패 시 items=[] + error 메시지"""
    items: list[T] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def build_posts_query(
    category_slug: Optional[str] = None,
    tag_slug: Optional[str] = None,
    search_term: Optional[str] = None,
) -> Query:
    term = (search_term or "").strip()
    if term:
        # 검색과 카테고리 필터는 동시에 걸지 않는다
        category_slug = None

    q = Query(POSTS_TABLE)
    q.embed(Embed("category", CATEGORIES_TABLE, inner=bool(category_slug)))
    q.embed(Embed("tags", POST_TAGS_TABLE, columns="", children=(Embed("tag", TAGS_TABLE),)))

    if category_slug:
        q.eq("category.slug", category_slug)
    if tag_slug:
        # tags 확장은 그대로 두고 필터 전용 inner-join alias를 따로 붙인다
        q.embed(Embed(
            "tag_filter", POST_TAGS_TABLE, columns="", inner=True,
            children=(Embed("tag", TAGS_TABLE, columns="slug", inner=True),),
        ))
        q.eq("tag_filter.tag.slug", tag_slug)
    if term:
        q.or_(IMatch("title", term), IMatch("excerpt", term))

    return q.order("published_at", ascending=False)


def build_name_ordered_query(table: str) -> Query:
    return Query(table).order("name")


class PostQueryService:

    def __init__(self, store: StoreClient):
        self.store = store

    async def _fetch(self, query: Query, convert, what: str) -> Listing:
        try:
            rows = await self.store.select(query)
            return Listing(items=[convert(r) for r in rows])
        except StoreError as e:
            logger.error("[PostQueryService] {} failed: {}", what, e.message)
            return Listing(error=f"Failed to load {what}")
        except ValidationError as e:
            logger.error("[PostQueryService] {} returned malformed rows: {}", what, e)
            return Listing(error=f"Failed to load {what}")

    # 글 목록 조회 (카테고리 / 태그 / 검색어)
    async def list_posts(
        self,
        category_slug: Optional[str] = None,
        tag_slug: Optional[str] = None,
        search_term: Optional[str] = None,
    ) -> Listing[Post]:
        logger.info(
            "[PostQueryService] Method : list_posts category={} tag={} q={!r}",
            category_slug, tag_slug, search_term,
        )
        query = build_posts_query(category_slug, tag_slug, search_term)
        return await self._fetch(query, normalize_post_row, "posts")

    # 글 검색 (title OR excerpt, 대소문자 무시)
    async def search_posts(self, term: str) -> Listing[Post]:
        logger.info("[PostQueryService] Method : search_posts q={!r}", term)
        return await self.list_posts(search_term=term)

    # 카테고리 조회
    async def list_categories(self) -> Listing[Category]:
        logger.info("[PostQueryService] Method : list_categories")
        return await self._fetch(build_name_ordered_query(CATEGORIES_TABLE), Category.model_validate, "categories")

    # 태그 조회
    async def list_tags(self) -> Listing[Tag]:
        logger.info("[PostQueryService] Method : list_tags")
        return await self._fetch(build_name_ordered_query(TAGS_TABLE), Tag.model_validate, "tags")
