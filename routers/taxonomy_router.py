from __future__ import annotations
from fastapi import APIRouter, Depends

from deps import get_query_service
from schemas.listing_schema import CategoryListOut, TagListOut
from services.post_query_service import PostQueryService

router = APIRouter()


# 카테고리 조회
@router.get("/categories", response_model=CategoryListOut)
async def list_categories(queries: PostQueryService = Depends(get_query_service)):
    listing = await queries.list_categories()
    return CategoryListOut(items=listing.items, error=listing.error)


# 태그 조회
@router.get("/tags", response_model=TagListOut)
async def list_tags(queries: PostQueryService = Depends(get_query_service)):
    listing = await queries.list_tags()
    return TagListOut(items=listing.items, error=listing.error)
