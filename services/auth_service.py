from __future__ import annotations
from typing import Any, Optional

import httpx
from loguru import logger

from common.errors import AuthError
from common.http import debug_response, json_or_text, new_async_client
from config import settings
from schemas.auth_schema import AuthSession, AuthUser


def _error_message(payload: Any, default: str) -> str:
    if isinstance(payload, dict):
        return payload.get("error_description") or payload.get("msg") or payload.get("message") or default
    return default


class AuthClient:
    """
    인증 제공자(GoTrue /auth/v1) 클라이언트.
    로그인/가입/현재 사용자 조회/로그아웃만 다루고, admin 여부를 계산해서 돌려준다.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        *,
        admin_role: Optional[str] = None,
        admin_emails: Optional[set[str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.auth_base).rstrip("/")
        self.api_key = api_key or settings.SUPABASE_ANON_KEY
        self.admin_role = admin_role if admin_role is not None else settings.ADMIN_ROLE
        self.admin_emails = admin_emails if admin_emails is not None else settings.admin_email_set
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = new_async_client(
                self.base_url,
                headers={"apikey": self.api_key},
                transport=self._transport,
            )
        return self._client

    def is_admin(self, user: dict[str, Any]) -> bool:
        role = (user.get("app_metadata") or {}).get("role")
        if role and role == self.admin_role:
            return True
        email = (user.get("email") or "").lower()
        return bool(email) and email in self.admin_emails

    def to_user(self, user: dict[str, Any]) -> AuthUser:
        return AuthUser(
            id=str(user["id"]),
            email=user.get("email"),
            app_metadata=user.get("app_metadata") or {},
            is_admin=self.is_admin(user),
        )

    async def _call(self, method: str, path: str, default_error: str, **kw) -> Any:
        try:
            r = await self.client.request(method, path, **kw)
        except httpx.HTTPError as e:
            logger.error("[AuthClient] {} {} transport error: {}", method, path, e)
            raise AuthError("auth provider unreachable", status_code=503) from e
        payload = json_or_text(r)
        if r.is_error:
            debug_response(r)
            status = 401 if r.status_code in (400, 401, 403, 422) else 502
            raise AuthError(_error_message(payload, default_error), status_code=status)
        return payload

    def _to_session(self, payload: dict[str, Any]) -> AuthSession:
        # signup은 이메일 확인 설정에 따라 session 없이 user만 올 수 있다
        raw_user = payload.get("user") or (payload if "id" in payload else None)
        return AuthSession(
            access_token=payload.get("access_token"),
            refresh_token=payload.get("refresh_token"),
            expires_in=payload.get("expires_in"),
            user=self.to_user(raw_user) if raw_user else None,
        )

    async def sign_in(self, email: str, password: str) -> AuthSession:
        logger.info("[AuthClient] Method : sign_in")
        payload = await self._call(
            "POST", "/token", "Invalid login credentials",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        return self._to_session(payload)

    async def sign_up(self, email: str, password: str) -> AuthSession:
        logger.info("[AuthClient] Method : sign_up")
        payload = await self._call(
            "POST", "/signup", "Sign up failed",
            json={"email": email, "password": password},
        )
        return self._to_session(payload)

    async def get_user(self, access_token: str) -> AuthUser:
        payload = await self._call(
            "GET", "/user", "Invalid or expired session",
            headers={"Authorization": f"Bearer {access_token}"},
        )
        return self.to_user(payload)

    async def sign_out(self, access_token: str) -> None:
        logger.info("[AuthClient] Method : sign_out")
        await self._call(
            "POST", "/logout", "Sign out failed",
            headers={"Authorization": f"Bearer {access_token}"},
        )

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
