"""
models.py
Lightweight domain records (members, lessons, listing requests).
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Literal

# Filter modes for the expiration-quarter filter
EXPIRE_QTR_MODES = ("exactly", "atLeast")

MIN_PASSWORD_LENGTH = 6


@dataclass(frozen=True)
class Member:
    """A row of the member listing, with lookup text resolved."""

    wyc_number: int
    first: str
    last: str
    category: int | None
    category_name: str  # 'Unknown' when unset
    expire_qtr: int
    expire_qtr_name: str  # 'N/A' when the quarter is not in the lookup
    join_date: str


@dataclass
class NewMember:
    wyc_number: int | None
    first: str | None = None
    last: str | None = None
    street_address: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    phone1: str | None = None
    phone2: str | None = None
    email: str | None = None
    category: int | None = None
    expire_qtr: int = 0
    student_id: int | None = None
    password: str | None = None  # raw; hashed before insert
    out_to_sea: int = 0
    join_date: str | None = None
    image_name: str | None = None


@dataclass(frozen=True)
class Lesson:
    index: int
    type: str | None  # class type text
    subtype: str | None
    day: str | None
    time: str | None
    dates: str | None
    calendar_date: str
    instructor1: int | None
    instructor2: int | None
    instructor1_name: str | None
    instructor2_name: str | None
    comments: str | None
    size: int | None
    expire: int | None
    display: int


@dataclass
class LessonInput:
    type_id: int | None
    calendar_date: str | None
    subtype: str | None = None
    day: str | None = None
    time: str | None = None
    dates: str | None = None
    instructor1: int | None = None
    instructor2: int | None = None
    description: str | None = None
    size: int | None = None
    expire: int | None = None
    display: int = 0


@dataclass(frozen=True)
class SortSpec:
    field: str
    descending: bool = False


@dataclass(frozen=True)
class FilterSpec:
    """Which members to match, how to order them, and which page to return."""

    wyc_id: str | None = None
    name: str | None = None
    category: int | None = None
    expire_qtr: int | None = None
    expire_qtr_mode: Literal["exactly", "atLeast"] | None = None
    sort: SortSpec | None = None
    page_index: int = 0
    page_size: int = 10


@dataclass(frozen=True)
class AuthUser:
    wyc_number: int
    first: str | None
    last: str | None
    email: str | None


@dataclass(frozen=True)
class Page:
    rows: list = field(default_factory=list)
    total_count: int = 0
    page_index: int = 0
    page_size: int = 10

    @property
    def page_count(self) -> int:
        if self.page_size <= 0:
            return 0
        return math.ceil(self.total_count / self.page_size)
