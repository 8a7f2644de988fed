from __future__ import annotations
from typing import Optional

from fastapi import Depends, Header, HTTPException

from common.errors import AuthError
from schemas.auth_schema import AuthUser
from services.auth_service import AuthClient
from services.post_query_service import PostQueryService
from services.post_service import PostService
from services.view_controller import ViewController
from services.view_store import ViewStore
from store.client import StoreClient

# ----- 전역 인스턴스 (최초 사용 시 생성) -----
_store: Optional[StoreClient] = None
_auth: Optional[AuthClient] = None
_view_store: Optional[ViewStore] = None


def get_store() -> StoreClient:
    global _store
    if _store is None:
        _store = StoreClient()
    return _store


def get_query_service() -> PostQueryService:
    return PostQueryService(get_store())


def get_post_service() -> PostService:
    return PostService(get_store())


def get_auth_client() -> AuthClient:
    global _auth
    if _auth is None:
        _auth = AuthClient()
    return _auth


def get_view_store() -> ViewStore:
    global _view_store
    if _view_store is None:
        _view_store = ViewStore(lambda: ViewController(get_query_service()))
    return _view_store


async def shutdown_clients() -> None:
    global _store, _auth
    if _store is not None:
        await _store.aclose()
        _store = None
    if _auth is not None:
        await _auth.aclose()
        _auth = None


# ----- 인증 -----
def bearer_token(authorization: Optional[str] = Header(None)) -> str:
    if not authorization or not authorization.lower().startswith("bearer "):
        raise HTTPException(status_code=401, detail="Missing bearer token")
    token = authorization.split(" ", 1)[1].strip()
    if not token:
        raise HTTPException(status_code=401, detail="Missing bearer token")
    return token


async def get_current_user(
    token: str = Depends(bearer_token),
    auth: AuthClient = Depends(get_auth_client),
) -> AuthUser:
    try:
        return await auth.get_user(token)
    except AuthError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


async def require_admin(user: AuthUser = Depends(get_current_user)) -> AuthUser:
    if not user.is_admin:
        raise HTTPException(status_code=403, detail="Admin access required")
    return user
