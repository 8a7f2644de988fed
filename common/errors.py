from __future__ import annotations
from typing import Any, Optional


class StoreError(Exception):
    """collection store 요청 실패 (네트워크 오류 / 비정상 응답)"""

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
        details: Optional[str] = None,
        hint: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code
        self.details = details
        self.hint = hint

    @classmethod
    def from_payload(cls, status_code: int, payload: Any) -> "StoreError":
        if isinstance(payload, dict):
            return cls(
                payload.get("message") or f"store request failed ({status_code})",
                status_code=status_code,
                code=payload.get("code"),
                details=payload.get("details"),
                hint=payload.get("hint"),
            )
        return cls(f"store request failed ({status_code}): {payload}", status_code=status_code)


class PostCreateError(Exception):
    """글 등록 실패 (post insert 단계)"""


class TagReconciliationError(Exception):
    """
    태그 생성/재조회/연결 중 하나라도 실패하면 한 번에 보고.
    post 자체는 이미 생성된 상태로 남는다 (rollback 없음).
    """

    def __init__(self, post_id: str, unlinked: list[str], causes: Optional[list[str]] = None):
        self.post_id = post_id
        self.unlinked = list(unlinked)
        self.causes = list(causes or [])
        super().__init__(
            f"post {post_id} created but tags not linked: {', '.join(self.unlinked) or '-'}"
        )


class AuthError(Exception):
    def __init__(self, message: str, status_code: int = 401):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
