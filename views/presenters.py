"""
화면 상태 → 렌더링용 dict.
모두 순수 함수이고, 입력 상태를 바꾸지 않는다.
"""
from __future__ import annotations
from datetime import datetime
from typing import Any, Optional, Sequence

from models.blog import Category, Post
from services.view_controller import ViewState

CARD_TAG_LIMIT = 3
FEATURED_TAG_LIMIT = 4


def format_date(dt: datetime) -> str:
    # "Jan 5, 2024"
    return f"{dt:%b} {dt.day}, {dt.year}"


def _tag_badges(post: Post, limit: int) -> dict[str, Any]:
    extra = len(post.tags) - limit
    return {
        "tags": [t.name for t in post.tags[:limit]],
        "more_tags": f"+{extra} more" if extra > 0 else None,
    }


def post_card(post: Post, tag_limit: int = CARD_TAG_LIMIT) -> dict[str, Any]:
    return {
        "id": post.id,
        "title": post.title,
        "slug": post.slug,
        "excerpt": post.excerpt,
        "image": post.featured_image,
        "link": post.medium_url,
        "category": post.category.name if post.category else None,
        "date": format_date(post.published_at),
        **_tag_badges(post, tag_limit),
    }


def featured_post(post: Post) -> dict[str, Any]:
    return {**post_card(post, FEATURED_TAG_LIMIT), "featured": True}


def split_featured(posts: Sequence[Post]) -> tuple[Optional[Post], list[Post]]:
    # 현재 보이는 목록의 첫 글이 featured
    if not posts:
        return None, []
    return posts[0], list(posts[1:])


def blog_grid(posts: Sequence[Post], loading: bool, error: Optional[str]) -> dict[str, Any]:
    if loading:
        return {"kind": "loading"}
    if error:
        return {"kind": "error", "message": error}
    if not posts:
        return {"kind": "empty", "message": "No articles found"}
    return {"kind": "cards", "cards": [post_card(p) for p in posts]}


def category_filter(categories: Sequence[Category], selected: Optional[str]) -> list[dict[str, Any]]:
    items = [{"slug": None, "label": "All Articles", "active": selected is None}]
    items.extend(
        {"slug": c.slug, "label": c.name, "active": selected == c.slug}
        for c in categories
    )
    return items


def listing_heading(state: ViewState) -> str:
    if state.selected_category:
        name = next(
            (c.name for c in state.categories if c.slug == state.selected_category),
            state.selected_category,
        )
        return f"{name} Articles"
    if state.active_search:
        return f'Search results for "{state.active_search}"'
    return "Latest Articles"


def article_count(n: int, loading: bool) -> str:
    if loading:
        return ""
    return f"{n} article{'' if n == 1 else 's'}"


def render_page(state: ViewState) -> dict[str, Any]:
    featured, regular = split_featured(state.posts)
    return {
        "search_term": state.search_term,
        "status": state.status,
        "categories": category_filter(state.categories, state.selected_category),
        "categories_error": state.categories_error,
        "heading": listing_heading(state),
        "count": article_count(len(state.posts), state.loading),
        "featured": featured_post(featured) if featured and not (state.loading or state.error) else None,
        "grid": blog_grid(regular, state.loading, state.error),
    }
