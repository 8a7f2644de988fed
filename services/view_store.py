from __future__ import annotations
import time
import uuid
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from loguru import logger

from config import settings
from services.view_controller import ViewController


@dataclass
class ViewSession:
    controller: ViewController
    created_at: float
    touched_at: float


class ViewStore:
    """
    세션 id → ViewController (메모리 보관)
    마지막 접근(touched_at) 이후 ttl_sec 가 지난 세션은 새 세션 생성 / 조회 시 정리된다.
    """

    def __init__(
        self,
        factory: Callable[[], ViewController],
        ttl_sec: Optional[float] = None,
        clock: Callable[[], float] = time.time,
    ):
        self._factory = factory
        self._ttl = settings.VIEW_SESSION_TTL_SEC if ttl_sec is None else ttl_sec
        self._clock = clock
        self._mem: Dict[str, ViewSession] = {}

    def _evict_expired(self, now: float) -> None:
        expired = [sid for sid, s in self._mem.items() if now - s.touched_at > self._ttl]
        for sid in expired:
            self._mem.pop(sid).controller.cancel()
        if expired:
            logger.info("[ViewStore] evicted {} idle session(s)", len(expired))

    def new_session(self) -> tuple[str, ViewController]:
        now = self._clock()
        self._evict_expired(now)
        sid = uuid.uuid4().hex
        ctl = self._factory()
        self._mem[sid] = ViewSession(controller=ctl, created_at=now, touched_at=now)
        return sid, ctl

    def get(self, sid: str) -> Optional[ViewController]:
        now = self._clock()
        self._evict_expired(now)
        sess = self._mem.get(sid)
        if not sess:
            return None
        sess.touched_at = now
        return sess.controller

    def drop(self, sid: str) -> bool:
        sess = self._mem.pop(sid, None)
        if not sess:
            return False
        sess.controller.cancel()
        return True

    def __len__(self) -> int:
        return len(self._mem)
