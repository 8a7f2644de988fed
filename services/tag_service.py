from __future__ import annotations
from typing import Optional, Sequence

from loguru import logger

from common.errors import StoreError, TagReconciliationError
from models.blog import PostTag, Tag
from services.post_query_service import POST_TAGS_TABLE, TAGS_TABLE
from store.client import StoreClient
from store.query import Query
from utils.slug import slugify


class TagService:
    """
    새 글에 태그를 연결한다.
      1) 이미 있는 태그인지 이름으로 확인 (대소문자 무시)
      2) 없는 태그는 slug를 만들어 생성
      3) 이름 목록으로 태그를 다시 조회 (새로 만든 태그의 id 확보)
      4) blog_post_tags 연결 생성
    한 단계라도 실패하면 모아서 TagReconciliationError 하나로 보고한다.
    """

    def __init__(self, store: StoreClient):
        self.store = store

    async def reconcile(
        self,
        post_id: str,
        names: Sequence[str],
        loaded_tags: Optional[Sequence[Tag]] = None,
        *,
        access_token: Optional[str] = None,
    ) -> list[Tag]:
        logger.info("[TagService] Method : reconcile post={} tags={}", post_id, list(names))
        if not names:
            return []

        if loaded_tags is None:
            try:
                rows = await self.store.select(Query(TAGS_TABLE), access_token=access_token)
            except StoreError as e:
                logger.error("[TagService] loading tags failed: {}", e.message)
                raise TagReconciliationError(post_id, list(names), [e.message]) from e
            loaded_tags = [Tag.model_validate(r) for r in rows]

        by_lower = {t.name.lower(): t for t in loaded_tags}
        failed: dict[str, str] = {}
        # 저장된 표기 → 입력된 표기
        canonical: dict[str, str] = {}

        for name in names:
            existing = by_lower.get(name.lower())
            if existing is not None:
                canonical[existing.name] = name
                continue
            try:
                await self.store.insert(
                    TAGS_TABLE,
                    [{"name": name, "slug": slugify(name)}],
                    returning=False,
                    access_token=access_token,
                )
                canonical[name] = name
            except StoreError as e:
                logger.error("[TagService] tag create failed '{}': {}", name, e.message)
                failed[name] = e.message

        linked: list[Tag] = []
        if canonical:
            try:
                rows = await self.store.select(
                    Query(TAGS_TABLE).in_("name", list(canonical)),
                    access_token=access_token,
                )
                fetched = [Tag.model_validate(r) for r in rows]
            except StoreError as e:
                logger.error("[TagService] tag re-fetch failed: {}", e.message)
                fetched = []
                for submitted in canonical.values():
                    failed[submitted] = e.message

            seen_ids: set[str] = set()
            for tag in fetched:
                if tag.name in canonical and tag.id not in seen_ids:
                    seen_ids.add(tag.id)
                    linked.append(tag)

            found = {t.name for t in linked}
            for stored, submitted in canonical.items():
                if stored not in found and submitted not in failed:
                    logger.warning("[TagService] tag '{}' missing after re-fetch", stored)
                    failed[submitted] = "not found after create"

            if linked:
                try:
                    await self.store.insert(
                        POST_TAGS_TABLE,
                        [PostTag(blog_post_id=post_id, tag_id=t.id).model_dump() for t in linked],
                        returning=False,
                        access_token=access_token,
                    )
                except StoreError as e:
                    logger.error("[TagService] linking tags to post {} failed: {}", post_id, e.message)
                    for tag in linked:
                        failed[canonical[tag.name]] = e.message
                    linked = []

        if failed:
            raise TagReconciliationError(
                post_id,
                [n for n in names if n in failed],
                sorted(set(failed.values())),
            )
        return linked
