from __future__ import annotations
import re

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(text: str) -> str:
    """
    "Hello, World! 2024" -> "hello-world-2024"
    소문자화 후 영숫자가 아닌 구간은 '-' 하나로, 앞뒤 '-' 제거
    """
    return _NON_ALNUM.sub("-", (text or "").lower()).strip("-")


def dedupe_names(names: list[str]) -> list[str]:
    # 대소문자 무시 중복 제거, 처음 입력된 표기 유지
    seen: set[str] = set()
    out: list[str] = []
    for n in names:
        n = (n or "").strip()
        if not n or n.lower() in seen:
            continue
        seen.add(n.lower())
        out.append(n)
    return out
