from __future__ import annotations
from fastapi import APIRouter, Depends, HTTPException

from common.errors import AuthError
from deps import bearer_token, get_auth_client, get_current_user
from schemas.auth_schema import AuthSession, AuthUser, Credentials
from services.auth_service import AuthClient

router = APIRouter()


@router.post("/sign-in", response_model=AuthSession)
async def sign_in(body: Credentials, auth: AuthClient = Depends(get_auth_client)):
    try:
        return await auth.sign_in(body.email, body.password)
    except AuthError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post("/sign-up", response_model=AuthSession)
async def sign_up(body: Credentials, auth: AuthClient = Depends(get_auth_client)):
    try:
        return await auth.sign_up(body.email, body.password)
    except AuthError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post("/sign-out", status_code=204)
async def sign_out(token: str = Depends(bearer_token), auth: AuthClient = Depends(get_auth_client)):
    try:
        await auth.sign_out(token)
    except AuthError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/me", response_model=AuthUser)
async def me(user: AuthUser = Depends(get_current_user)):
    return user
