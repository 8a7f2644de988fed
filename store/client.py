from __future__ import annotations
from typing import Any, Optional, Sequence

import httpx
from loguru import logger

from common.errors import StoreError
from common.http import debug_response, json_or_text, new_async_client
from config import settings
from store.query import Query


class StoreClient:
    """
    collection store(PostgREST) 접근 계층.
    - select: Query → GET /{table}?select=...&filters&order=...
    - insert: POST /{table} (Prefer: return=representation)
    실패는 모두 StoreError로 변환해서 올린다. 재시도 없음.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.rest_base).rstrip("/")
        self.api_key = api_key or settings.SUPABASE_ANON_KEY
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

    def _auth_headers(self, access_token: Optional[str]) -> dict[str, str]:
        return {"Authorization": f"Bearer {access_token or self.api_key}"}

    async def _send(self, method: str, path: str, **kw) -> Any:
        try:
            r = await self.client.request(method, path, **kw)
        except httpx.HTTPError as e:
            logger.error("[StoreClient] {} {} transport error: {}", method, path, e)
            raise StoreError(f"store unreachable: {e}") from e
        if r.is_error:
            debug_response(r)
            raise StoreError.from_payload(r.status_code, json_or_text(r))
        return json_or_text(r)

    async def select(self, query: Query, *, access_token: Optional[str] = None) -> list[dict[str, Any]]:
        logger.debug("[StoreClient] select {} {}", query.table, query.to_params())
        data = await self._send(
            "GET",
            f"/{query.table}",
            params=query.to_params(),
            headers=self._auth_headers(access_token),
        )
        return list(data or [])

    async def insert(
        self,
        table: str,
        rows: Sequence[dict[str, Any]],
        *,
        returning: bool = True,
        access_token: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        headers = self._auth_headers(access_token)
        headers["Prefer"] = "return=representation" if returning else "return=minimal"
        logger.debug("[StoreClient] insert {} rows={}", table, len(rows))
        data = await self._send("POST", f"/{table}", json=list(rows), headers=headers)
        return list(data or []) if returning else []

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
