from __future__ import annotations
from fastapi import APIRouter, Depends, HTTPException

from deps import get_view_store
from schemas.view_schema import CategorySelect, PageOut, SearchInput
from services.view_controller import ViewController
from services.view_store import ViewStore
from views.presenters import render_page

router = APIRouter()


def _controller(session_id: str, store: ViewStore) -> ViewController:
    ctl = store.get(session_id)
    if ctl is None:
        raise HTTPException(status_code=404, detail="view session not found")
    return ctl


def _page(session_id: str, ctl: ViewController, applied: bool = True) -> PageOut:
    return PageOut(session_id=session_id, applied=applied, page=render_page(ctl.state))


# 세션 생성 + 최초 로드
@router.post("/sessions", response_model=PageOut, status_code=201)
async def create_session(store: ViewStore = Depends(get_view_store)):
    sid, ctl = store.new_session()
    applied = await ctl.load()
    return _page(sid, ctl, applied)


@router.get("/sessions/{session_id}", response_model=PageOut)
async def get_page(session_id: str, store: ViewStore = Depends(get_view_store)):
    return _page(session_id, _controller(session_id, store))


@router.post("/sessions/{session_id}/category", response_model=PageOut)
async def select_category(session_id: str, body: CategorySelect, store: ViewStore = Depends(get_view_store)):
    ctl = _controller(session_id, store)
    applied = await ctl.select_category(body.slug)
    return _page(session_id, ctl, applied)


@router.post("/sessions/{session_id}/search-input", response_model=PageOut)
async def search_input(session_id: str, body: SearchInput, store: ViewStore = Depends(get_view_store)):
    ctl = _controller(session_id, store)
    applied = await ctl.change_search(body.value)
    return _page(session_id, ctl, applied)


@router.post("/sessions/{session_id}/search", response_model=PageOut)
async def submit_search(session_id: str, store: ViewStore = Depends(get_view_store)):
    ctl = _controller(session_id, store)
    applied = await ctl.submit_search()
    return _page(session_id, ctl, applied)


# admin 화면에서 돌아왔을 때 다시 로드
@router.post("/sessions/{session_id}/refresh", response_model=PageOut)
async def refresh(session_id: str, store: ViewStore = Depends(get_view_store)):
    ctl = _controller(session_id, store)
    applied = await ctl.load()
    return _page(session_id, ctl, applied)


@router.delete("/sessions/{session_id}", status_code=204)
async def drop_session(session_id: str, store: ViewStore = Depends(get_view_store)):
    if not store.drop(session_id):
        raise HTTPException(status_code=404, detail="view session not found")
