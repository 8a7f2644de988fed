from __future__ import annotations
import asyncio
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Literal, Optional

from loguru import logger

from models.blog import Category, Post
from services.post_query_service import Listing, PostQueryService

Status = Literal["idle", "loading", "error"]

POSTS_SLICE = "posts"
CATEGORIES_SLICE = "categories"


@dataclass
class ViewState:
    posts: list[Post] = field(default_factory=list)
    categories: list[Category] = field(default_factory=list)
    selected_category: Optional[str] = None
    # 입력창에 보이는 값 (제출 전까지 목록에 영향 없음)
    search_term: str = ""
    # 현재 목록을 만든 검색어
    active_search: Optional[str] = None
    status: Status = "idle"
    error: Optional[str] = None
    # 카테고리 목록은 별도 slice라 실패도 따로 기록
    categories_error: Optional[str] = None

    @property
    def loading(self) -> bool:
        return self.status == "loading"


class ViewController:
    """
    방문자 한 명의 화면 상태 소유자.
    상태 변경은 load / select_category / change_search / submit_search 로만 한다.

    목록을 다시 불러오는 동작은 slice별 순번을 붙인 task로 실행하고,
    새 요청이 들어오면 같은 slice의 이전 task는 취소한다. 완료 시점에 순번이
    최신이 아니면 결과를 버린다. status / error 는 posts slice만 바꾼다.
    """

    def __init__(self, queries: PostQueryService):
        self.queries = queries
        self.state = ViewState()
        self._seq: Dict[str, int] = {}
        self._tasks: Dict[str, asyncio.Task] = {}

    def latest_seq(self, slice_: str = POSTS_SLICE) -> int:
        return self._seq.get(slice_, 0)

    def _next_seq(self, slice_: str) -> int:
        seq = self._seq.get(slice_, 0) + 1
        self._seq[slice_] = seq
        return seq

    def _fail(self, slice_: str, message: str) -> None:
        if slice_ == POSTS_SLICE:
            self.state.status = "error"
            self.state.error = message
        else:
            self.state.categories_error = message

    async def _run(
        self,
        slice_: str,
        fetch: Callable[[], Awaitable[Any]],
        apply: Callable[[Any], None],
        error_message: str,
    ) -> bool:
        seq = self._next_seq(slice_)

        prev = self._tasks.get(slice_)
        if prev is not None and not prev.done():
            prev.cancel()

        if slice_ == POSTS_SLICE:
            self.state.status = "loading"
            self.state.error = None

        task = asyncio.ensure_future(fetch())
        self._tasks[slice_] = task
        try:
            result = await task
        except asyncio.CancelledError:
            if seq != self._seq.get(slice_):
                logger.debug("[ViewController] {} #{} superseded", slice_, seq)
                return False
            # 호출한 쪽이 취소됨: loading 상태로 남기지 않는다
            task.cancel()
            if slice_ == POSTS_SLICE and self.state.loading:
                self.state.status = "idle"
            raise
        except Exception:
            if seq != self._seq.get(slice_):
                logger.debug("[ViewController] {} #{} failed after being superseded", slice_, seq)
                return False
            logger.exception("[ViewController] {} #{} failed", slice_, seq)
            self._fail(slice_, error_message)
            return False
        finally:
            if self._tasks.get(slice_) is task:
                del self._tasks[slice_]

        if seq != self._seq.get(slice_):
            logger.debug("[ViewController] {} #{} stale response discarded", slice_, seq)
            return False
        apply(result)
        return True

    def _apply_posts(self, listing: Listing[Post], error_message: str, active_search: Optional[str] = None) -> None:
        self.state.posts = listing.items
        self.state.active_search = active_search
        if listing.ok:
            self.state.status = "idle"
            self.state.error = None
        else:
            self._fail(POSTS_SLICE, error_message)

    def _apply_categories(self, listing: Listing[Category]) -> None:
        if listing.ok:
            self.state.categories = listing.items
            self.state.categories_error = None
        else:
            # 이전에 받아 둔 카테고리는 유지
            self._fail(CATEGORIES_SLICE, "Failed to load categories")

    # 최초 진입 / admin 화면에서 돌아왔을 때
    async def load(self) -> bool:
        self.state.selected_category = None
        self.state.search_term = ""

        posts_applied, _ = await asyncio.gather(
            self._run(
                POSTS_SLICE,
                self.queries.list_posts,
                lambda listing: self._apply_posts(listing, "Failed to load blog data"),
                "Failed to load blog data",
            ),
            self._run(
                CATEGORIES_SLICE,
                self.queries.list_categories,
                self._apply_categories,
                "Failed to load categories",
            ),
        )
        return posts_applied

    async def select_category(self, category_slug: Optional[str]) -> bool:
        self.state.selected_category = category_slug
        self.state.search_term = ""
        return await self._run(
            POSTS_SLICE,
            lambda: self.queries.list_posts(category_slug=category_slug),
            lambda listing: self._apply_posts(listing, "Failed to filter posts"),
            "Failed to filter posts",
        )

    async def change_search(self, value: str) -> bool:
        self.state.search_term = value
        if value == "":
            return await self.load()
        return False

    async def submit_search(self) -> bool:
        term = self.state.search_term
        if not term.strip():
            return await self.select_category(None)

        self.state.selected_category = None
        return await self._run(
            POSTS_SLICE,
            lambda: self.queries.search_posts(term),
            lambda listing: self._apply_posts(listing, "Failed to search posts", active_search=term),
            "Failed to search posts",
        )

    def cancel(self) -> None:
        # 순번을 올려 두면 대기 중인 호출은 superseded로 끝난다
        for slice_, task in list(self._tasks.items()):
            self._next_seq(slice_)
            task.cancel()
        self._tasks.clear()
        if self.state.loading:
            self.state.status = "idle"
