from __future__ import annotations
from json import JSONDecodeError
from typing import Any, Optional

import httpx
from loguru import logger

from config import settings


def new_async_client(
    base_url: str,
    *,
    headers: Optional[dict[str, str]] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        base_url=base_url,
        headers={
            "Accept": "application/json",
            "User-Agent": "blog-web/1.0",
            **(headers or {}),
        },
        timeout=httpx.Timeout(settings.HTTP_TIMEOUT_SEC),
        transport=transport,
    )


def debug_response(r: httpx.Response) -> None:
    logger.error(
        "HTTP {} {} {} | Content-Type: {} | Preview: {!r}",
        r.status_code, r.request.method, r.url,
        r.headers.get("Content-Type"), r.text[:300],
    )


def json_or_text(r: httpx.Response) -> Any:
    if not r.content:
        return None
    try:
        return r.json()
    except (JSONDecodeError, ValueError):
        return r.text
