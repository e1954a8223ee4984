"""
query_builder.py
Listing filters as small condition records, compiled to parameterized SQL.

Conditions name columns by their listing field (e.g. "wycNumber"); the compiler
maps those to SQL through a per-listing column table, so no caller-supplied text
ever reaches the statement except as a bound parameter.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal, Union

from models import FilterSpec, SortSpec

# field name -> SQL column, member listing (table alias m)
MEMBER_COLUMNS = {
    "wycNumber": "m.wyc_number",
    "first": "m.first",
    "last": "m.last",
    "category": "m.category",
    "expireQtr": "m.expire_qtr",
    "joinDate": "m.join_date",
}

# Sortable fields per listing. Anything else falls back to the default order.
MEMBER_SORTS = {
    "expireQtr": "m.expire_qtr",
    "joinDate": "m.join_date",
}
MEMBER_DEFAULT_ORDER = ("m.join_date", True)
MEMBER_TIEBREAK = "m.wyc_number"

LESSON_SORTS = {
    "calendarDate": "l.calendar_date",
}
LESSON_DEFAULT_ORDER = ("l._index", True)
LESSON_TIEBREAK = "l._index"


@dataclass(frozen=True)
class ExactMatch:
    field: str
    value: object


@dataclass(frozen=True)
class Contains:
    field: str
    value: str


@dataclass(frozen=True)
class StartsWith:
    field: str
    value: str


@dataclass(frozen=True)
class Comparison:
    field: str
    op: Literal["eq", "gte"]
    value: object


@dataclass(frozen=True)
class AnyOf:
    conditions: tuple


@dataclass(frozen=True)
class AllOf:
    conditions: tuple


Condition = Union[ExactMatch, Contains, StartsWith, Comparison, AnyOf, AllOf]

_OPERATORS = {"eq": "=", "gte": ">="}

# ASCII digits with an optional sign; no underscores or other scripts
_INTEGER = re.compile(r"[+-]?[0-9]+")


def escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _parse_int(value) -> int | None:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if value is None:
        return None
    text = str(value).strip()
    if not _INTEGER.fullmatch(text):
        return None
    return int(text)


def name_condition(name: str | None) -> Condition | None:
    """
    One token matches either name field as a substring.
    Two or more: first token is a substring of the first name and the rest,
    joined by single spaces, is a prefix of the last name ("John Mc" -> McAllister).
    """
    if not name:
        return None
    parts = name.split()
    if not parts:
        return None
    if len(parts) == 1:
        return AnyOf((Contains("first", parts[0]), Contains("last", parts[0])))
    return AllOf((Contains("first", parts[0]), StartsWith("last", " ".join(parts[1:]))))


def member_conditions(spec: FilterSpec) -> list[Condition]:
    """All supplied filters, in a fixed order; the caller ANDs them together."""
    conditions: list[Condition] = []

    if spec.wyc_id:
        wyc_number = _parse_int(spec.wyc_id)
        # Non-numeric IDs are ignored rather than rejected
        if wyc_number is not None:
            conditions.append(ExactMatch("wycNumber", wyc_number))

    by_name = name_condition(spec.name)
    if by_name is not None:
        conditions.append(by_name)

    if spec.category is not None:
        conditions.append(ExactMatch("category", spec.category))

    if spec.expire_qtr is not None:
        op = "gte" if spec.expire_qtr_mode == "atLeast" else "eq"
        conditions.append(Comparison("expireQtr", op, spec.expire_qtr))

    return conditions


def compile_condition(cond: Condition, columns: dict[str, str]) -> tuple[str, list]:
    if isinstance(cond, ExactMatch):
        return f"{columns[cond.field]} = ?", [cond.value]
    if isinstance(cond, Contains):
        return f"{columns[cond.field]} LIKE ? ESCAPE '\\'", [f"%{escape_like(cond.value)}%"]
    if isinstance(cond, StartsWith):
        return f"{columns[cond.field]} LIKE ? ESCAPE '\\'", [f"{escape_like(cond.value)}%"]
    if isinstance(cond, Comparison):
        return f"{columns[cond.field]} {_OPERATORS[cond.op]} ?", [cond.value]
    if isinstance(cond, (AnyOf, AllOf)):
        joiner = " OR " if isinstance(cond, AnyOf) else " AND "
        parts, params = [], []
        for sub in cond.conditions:
            sql, sub_params = compile_condition(sub, columns)
            parts.append(sql)
            params.extend(sub_params)
        return "(" + joiner.join(parts) + ")", params
    raise TypeError(f"Unsupported condition: {cond!r}")


def compile_where(conditions: list[Condition], columns: dict[str, str]) -> tuple[str, list]:
    if not conditions:
        return "", []
    sql, params = compile_condition(AllOf(tuple(conditions)), columns)
    return f" WHERE {sql}", params


def order_by(
    sort: SortSpec | None,
    allowed: dict[str, str],
    default: tuple[str, bool],
    tiebreak: str | None = None,
) -> str:
    column, descending = default
    if sort is not None and sort.field in allowed:
        column, descending = allowed[sort.field], sort.descending
    clause = f" ORDER BY {column} {'DESC' if descending else 'ASC'}"
    if tiebreak and tiebreak != column:
        clause += f", {tiebreak} {'DESC' if descending else 'ASC'}"
    return clause


def clamp_page(page_index, page_size, max_page_size: int, default_page_size: int = 10) -> tuple[int, int]:
    """Page index floors at 0; page size is kept within 1..max_page_size."""
    index = _parse_int(page_index)
    size = _parse_int(page_size)
    index = max(0, index if index is not None else 0)
    size = min(max(1, size if size is not None else default_page_size), max_page_size)
    return index, size


def limit_offset(page_index: int, page_size: int) -> tuple[str, list]:
    return " LIMIT ? OFFSET ?", [page_size, page_index * page_size]
