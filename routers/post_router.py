from __future__ import annotations
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from common.errors import PostCreateError, TagReconciliationError
from deps import bearer_token, get_post_service, get_query_service, require_admin
from schemas.auth_schema import AuthUser
from schemas.listing_schema import PostListOut
from schemas.post_schema import PostCreate, PostCreateResp
from services.post_query_service import PostQueryService
from services.post_service import PostService

router = APIRouter()


# 글 목록 조회 (category / tag / 검색어)
@router.get("/", response_model=PostListOut)
async def list_posts(
    category: Optional[str] = Query(None),
    tag: Optional[str] = Query(None),
    q: Optional[str] = Query(None),
    queries: PostQueryService = Depends(get_query_service),
):
    listing = await queries.list_posts(category_slug=category, tag_slug=tag, search_term=q)
    return PostListOut(items=listing.items, error=listing.error)


# 글 등록 (admin)
@router.post("/", response_model=PostCreateResp, status_code=201)
async def create_post(
    payload: PostCreate,
    _admin: AuthUser = Depends(require_admin),
    token: str = Depends(bearer_token),
    posts: PostService = Depends(get_post_service),
):
    try:
        post, tags = await posts.create_post(payload, access_token=token)
    except PostCreateError as e:
        raise HTTPException(status_code=400, detail=f"Failed to create article: {e}")
    except TagReconciliationError as e:
        raise HTTPException(
            status_code=400,
            detail={
                "message": "Article created but tags were not fully linked",
                "post_id": e.post_id,
                "unlinked_tags": e.unlinked,
            },
        )
    return PostCreateResp(post=post, tags=tags)
