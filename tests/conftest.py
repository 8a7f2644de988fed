"""
tests/conftest.py
"""
from __future__ import annotations

import asyncio
import copy
import itertools
import os
import re
from collections import defaultdict
from typing import Any, Awaitable, Callable, Optional

# settings는 import 시점에 생성되므로 먼저 환경을 채운다
os.environ.setdefault("SUPABASE_URL", "https://store.test")
os.environ.setdefault("SUPABASE_ANON_KEY", "anon-key")
os.environ.setdefault("ADMIN_EMAILS", "admin@example.com")

import pytest  # noqa: E402

from common.errors import StoreError  # noqa: E402
from store.query import Embed, Eq, IMatch, In, Or, Query  # noqa: E402

# (상위 테이블, 확장 테이블) → (상위 컬럼, 하위 컬럼, 다건 여부)
RELATIONS = {
    ("blog_posts", "categories"): ("category_id", "id", False),
    ("blog_posts", "blog_post_tags"): ("id", "blog_post_id", True),
    ("blog_post_tags", "tags"): ("tag_id", "id", False),
}

UNIQUE = {
    "blog_posts": [("slug",)],
    "categories": [("slug",)],
    "tags": [("slug",)],
    "blog_post_tags": [("blog_post_id", "tag_id")],
}


def run(coro):
    return asyncio.run(coro)


def _project(row: dict, columns: str) -> dict:
    if columns == "*":
        return dict(row)
    if not columns:
        return {}
    keep = [c.strip() for c in columns.split(",")]
    return {k: v for k, v in row.items() if k in keep}


def _match(f, row: dict) -> bool:
    if isinstance(f, Eq):
        return str(row.get(f.column)) == str(f.value)
    if isinstance(f, In):
        return row.get(f.column) in f.values
    if isinstance(f, IMatch):
        # wire로 나가는 escape된 패턴을 그대로 해석
        return re.search(f.pattern(), str(row.get(f.column) or ""), re.IGNORECASE) is not None
    if isinstance(f, Or):
        return any(_match(sub, row) for sub in f.filters)
    raise AssertionError(f"unsupported filter {f!r}")


class MemoryStore:
    """
    StoreClient와 같은 select/insert 인터페이스를 가진 메모리 테이블.
    embed / eq / in / imatch / or / order 를 PostgREST와 같은 의미로 해석한다.
    """

    def __init__(self):
        self.tables: dict[str, list[dict]] = defaultdict(list)
        self.calls: list[tuple[str, str]] = []
        self.failures: dict[tuple[str, str], StoreError] = {}
        self.before_select: Optional[Callable[[Query], Awaitable[None]]] = None
        self.after_select: Optional[Callable[[Query, list], list]] = None
        self._ids = itertools.count(1)
        self._clock = itertools.count()

    # ---- 테스트 보조 ----
    def fail_on(self, op: str, table: str, message: str = "boom") -> None:
        self.failures[(op, table)] = StoreError(message, status_code=500)

    def seed(self, table: str, **row: Any) -> dict:
        row.setdefault("id", f"{table[:3]}-{next(self._ids)}")
        row.setdefault("created_at", "2024-01-01T00:00:00+00:00")
        self.tables[table].append(row)
        return row

    def rows(self, table: str) -> list[dict]:
        return self.tables[table]

    # ---- select ----
    def _expand(self, table: str, row: dict, embed: Embed):
        parent_col, child_col, many = RELATIONS[(table, embed.table)]
        children = [r for r in self.tables[embed.table] if r.get(child_col) == row.get(parent_col)]
        out = []
        for child in children:
            item = _project(child, embed.columns)
            for sub in embed.children:
                item[sub.alias] = self._expand(embed.table, child, sub)
            if any(sub.inner and not item[sub.alias] for sub in embed.children):
                continue
            out.append(item)
        if many:
            return out
        return out[0] if out else None

    def _filter_path(self, obj, parts: list[str], f) -> Any:
        if obj is None:
            return None
        if isinstance(obj, list):
            kept = [x for x in (self._filter_path(o, parts, f) for o in obj) if x]
            return kept or None
        if len(parts) == 1:
            return obj if _match(type(f)(parts[0], *_args(f)), obj) else None
        child = self._filter_path(obj.get(parts[0]), parts[1:], f)
        if child is None:
            return None
        obj[parts[0]] = child
        return obj

    async def select(self, query: Query, *, access_token: Optional[str] = None) -> list[dict]:
        self.calls.append(("select", query.table))
        if self.before_select is not None:
            await self.before_select(query)
        if ("select", query.table) in self.failures:
            raise self.failures[("select", query.table)]

        result = []
        for raw in self.tables[query.table]:
            row = _project(raw, query.columns)
            for e in query.embeds:
                row[e.alias] = self._expand(query.table, raw, e)
            if any(e.inner and not row[e.alias] for e in query.embeds):
                continue
            keep = True
            for f in query.filters:
                col = getattr(f, "column", None)
                if col and "." in col:
                    if self._filter_path(row, col.split("."), f) is None:
                        keep = False
                elif not _match(f, row):
                    keep = False
            if keep:
                result.append(row)

        for o in reversed(query.orders):
            result.sort(key=lambda r: (r.get(o.column) is None, r.get(o.column) or ""), reverse=not o.ascending)

        if self.after_select is not None:
            result = self.after_select(query, result)
        return copy.deepcopy(result)

    # ---- insert ----
    async def insert(self, table: str, rows, *, returning: bool = True, access_token: Optional[str] = None) -> list[dict]:
        self.calls.append(("insert", table))
        if ("insert", table) in self.failures:
            raise self.failures[("insert", table)]
        created = []
        for r in rows:
            for cols in UNIQUE.get(table, []):
                if any(all(x.get(c) == r.get(c) for c in cols) for x in self.tables[table]):
                    raise StoreError(
                        f'duplicate key value violates unique constraint "{table}_{"_".join(cols)}_key"',
                        status_code=409, code="23505",
                    )
            row = dict(r)
            row.setdefault("id", f"{table[:3]}-{next(self._ids)}")
            stamp = f"2024-06-01T00:00:{next(self._clock):02d}+00:00"
            row.setdefault("created_at", stamp)
            if table == "blog_posts":
                row.setdefault("published_at", stamp)
                row.setdefault("updated_at", stamp)
            self.tables[table].append(row)
            created.append(copy.deepcopy(row))
        return created if returning else []


def _args(f) -> tuple:
    if isinstance(f, Eq):
        return (f.value,)
    if isinstance(f, In):
        return (f.values,)
    if isinstance(f, IMatch):
        return (f.term,)
    raise AssertionError(f"unsupported embedded filter {f!r}")


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def seeded_store(store: MemoryStore) -> MemoryStore:
    """
    categories: Design, Engineering
    tags: React, Python
    posts (오래된 순): p1(engineering, React) → p2(design) → p3(무분류, Python) → p4(engineering, React+Python)
    """
    eng = store.seed("categories", id="cat-eng", name="Engineering", slug="engineering")
    des = store.seed("categories", id="cat-des", name="Design", slug="design")
    react = store.seed("tags", id="tag-react", name="React", slug="react")
    py = store.seed("tags", id="tag-py", name="Python", slug="python")

    def post(pid, title, excerpt, published, category=None):
        return store.seed(
            "blog_posts",
            id=pid,
            title=title,
            slug=pid,
            excerpt=excerpt,
            medium_url=f"https://medium.com/@me/{pid}",
            featured_image=f"https://img.example.com/{pid}.jpg",
            category_id=category["id"] if category else None,
            published_at=published,
            updated_at=published,
        )

    post("p1", "Hooks in React", "State without classes", "2024-01-10T00:00:00+00:00", eng)
    post("p2", "Color Theory", "Palettes for engineers", "2024-02-10T00:00:00+00:00", des)
    post("p3", "Async Python", "Event loops explained", "2024-03-10T00:00:00+00:00")
    post("p4", "Typed React with Python backends", "A full stack tour", "2024-04-10T00:00:00+00:00", eng)

    store.seed("blog_post_tags", id="pt-1", blog_post_id="p1", tag_id=react["id"])
    store.seed("blog_post_tags", id="pt-2", blog_post_id="p3", tag_id=py["id"])
    store.seed("blog_post_tags", id="pt-3", blog_post_id="p4", tag_id=react["id"])
    store.seed("blog_post_tags", id="pt-4", blog_post_id="p4", tag_id=py["id"])
    return store
