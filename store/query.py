"""
collection store 조회 요청을 값 객체로 표현.

Query Composer는 여기 정의된 Query만 만들고, 실제 wire 형식(PostgREST
query string)으로의 변환은 Query.to_params()가 담당한다.
"""
from __future__ import annotations
import re
from dataclasses import dataclass, field
from typing import Any, Sequence, Union


def _quote(value: Any) -> str:
    # PostgREST reserved 문자(, . : ( ) ")를 포함할 수 있으므로 항상 큰따옴표로 감싼다
    s = str(value).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{s}"'


_REGEX_META = re.compile(r"([\\.^$*+?()\[\]{}|])")


def _regex_escape(term: str) -> str:
    return _REGEX_META.sub(r"\\\1", term)


@dataclass(frozen=True)
class Embed:
    """관계 테이블 확장. inner=True면 매칭 row가 없는 상위 row는 제외된다."""
    alias: str
    table: str
    columns: str = "*"
    inner: bool = False
    children: tuple["Embed", ...] = ()

    def render(self) -> str:
        parts = [self.columns] if self.columns else []
        parts.extend(c.render() for c in self.children)
        hint = "!inner" if self.inner else ""
        return f"{self.alias}:{self.table}{hint}({','.join(parts)})"


@dataclass(frozen=True)
class Eq:
    column: str
    value: Any

    def param(self) -> tuple[str, str]:
        return self.column, f"eq.{self.value}"

    def expr(self) -> str:
        return f"{self.column}.eq.{_quote(self.value)}"


@dataclass(frozen=True)
class In:
    column: str
    values: tuple[Any, ...]

    def param(self) -> tuple[str, str]:
        return self.column, f"in.({','.join(_quote(v) for v in self.values)})"

    def expr(self) -> str:
        return f"{self.column}.in.({','.join(_quote(v) for v in self.values)})"


@dataclass(frozen=True)
class IMatch:
    """대소문자 무시 부분 문자열 매칭. term은 literal로 취급된다."""
    column: str
    term: str

    def pattern(self) -> str:
        # ilike는 *를 %로 바꾸므로 imatch + 정규식 메타문자 escape
        return _regex_escape(self.term)

    def param(self) -> tuple[str, str]:
        return self.column, f"imatch.{_quote(self.pattern())}"

    def expr(self) -> str:
        return f"{self.column}.imatch.{_quote(self.pattern())}"


@dataclass(frozen=True)
class Or:
    filters: tuple[Union[Eq, In, IMatch], ...]

    def param(self) -> tuple[str, str]:
        return "or", f"({','.join(f.expr() for f in self.filters)})"


Filter = Union[Eq, In, IMatch, Or]


@dataclass(frozen=True)
class Order:
    column: str
    ascending: bool = True

    def render(self) -> str:
        return f"{self.column}.{'asc' if self.ascending else 'desc'}"


@dataclass
class Query:
    table: str
    columns: str = "*"
    embeds: list[Embed] = field(default_factory=list)
    filters: list[Filter] = field(default_factory=list)
    orders: list[Order] = field(default_factory=list)

    # ---- builder ----
    def embed(self, embed: Embed) -> "Query":
        self.embeds.append(embed)
        return self

    def eq(self, column: str, value: Any) -> "Query":
        self.filters.append(Eq(column, value))
        return self

    def in_(self, column: str, values: Sequence[Any]) -> "Query":
        self.filters.append(In(column, tuple(values)))
        return self

    def or_(self, *filters: Union[Eq, In, IMatch]) -> "Query":
        self.filters.append(Or(tuple(filters)))
        return self

    def order(self, column: str, *, ascending: bool = True) -> "Query":
        self.orders.append(Order(column, ascending))
        return self

    # ---- wire ----
    def select_clause(self) -> str:
        parts = [self.columns] if self.columns else []
        parts.extend(e.render() for e in self.embeds)
        return ",".join(parts)

    def to_params(self) -> list[tuple[str, str]]:
        params: list[tuple[str, str]] = [("select", self.select_clause())]
        params.extend(f.param() for f in self.filters)
        if self.orders:
            params.append(("order", ",".join(o.render() for o in self.orders)))
        return params
