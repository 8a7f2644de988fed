from __future__ import annotations
from typing import Optional, Sequence

from loguru import logger

from common.errors import PostCreateError, StoreError
from models.blog import Post, Tag, normalize_post_row
from schemas.post_schema import PostCreate
from services.post_query_service import POSTS_TABLE
from services.tag_service import TagService
from store.client import StoreClient


class PostService:

    def __init__(self, store: StoreClient, tag_service: Optional[TagService] = None):
        self.store = store
        self.tag_service = tag_service or TagService(store)

    # 글 등록 + 태그 연결
    async def create_post(
        self,
        payload: PostCreate,
        *,
        loaded_tags: Optional[Sequence[Tag]] = None,
        access_token: Optional[str] = None,
    ) -> tuple[Post, list[Tag]]:
        logger.info("[PostService] Method : create_post slug={}", payload.slug)
        try:
            rows = await self.store.insert(POSTS_TABLE, [payload.to_row()], access_token=access_token)
        except StoreError as e:
            logger.error("[PostService] post insert failed: {}", e.message)
            raise PostCreateError(e.message or "Failed to create article") from e
        if not rows:
            raise PostCreateError("store returned no row for the created post")

        post = normalize_post_row(rows[0])
        tags: list[Tag] = []
        if payload.tags:
            # TagReconciliationError는 그대로 올린다 (post는 이미 생성됨)
            tags = await self.tag_service.reconcile(
                post.id, payload.tags, loaded_tags, access_token=access_token
            )
        post.tags = tags
        logger.info("[PostService] created post id={} tags={}", post.id, [t.name for t in tags])
        return post, tags
