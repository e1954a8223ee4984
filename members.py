"""
members.py
Member roster: filtered/sorted/paginated listing, lookups, add-member.
"""

from __future__ import annotations

from dataclasses import asdict

from loguru import logger

import db
import session
import utils
from auth import hash_password
from config import get_settings
from errors import DuplicateKey, QueryFailure, ValidationFailure
from models import FilterSpec, Member, NewMember, Page
from query_builder import (
    MEMBER_COLUMNS,
    MEMBER_DEFAULT_ORDER,
    MEMBER_SORTS,
    MEMBER_TIEBREAK,
    clamp_page,
    compile_where,
    limit_offset,
    member_conditions,
    order_by,
)

MEMBER_SELECT = """
    SELECT m.wyc_number,
           COALESCE(m.first, '') AS first,
           COALESCE(m.last, '') AS last,
           m.category,
           COALESCE(c.text, 'Unknown') AS category_name,
           m.expire_qtr,
           COALESCE(q.school, 'N/A') AS expire_qtr_name,
           m.join_date
    FROM members m
    LEFT JOIN memcat c ON c._index = m.category
    LEFT JOIN quarters q ON q._index = m.expire_qtr
"""

MEMBER_COUNT = "SELECT COUNT(*) FROM members m"


def _to_member(row) -> Member:
    return Member(
        wyc_number=row["wyc_number"],
        first=row["first"],
        last=row["last"],
        category=row["category"],
        category_name=row["category_name"],
        expire_qtr=row["expire_qtr"],
        expire_qtr_name=row["expire_qtr_name"],
        join_date=row["join_date"],
    )


def build_member_query(spec: FilterSpec) -> Page:
    """
    One page of members matching every filter in ``spec``, plus the total number
    of matches (same filters, no ordering or paging).
    """
    settings = get_settings()
    page_index, page_size = clamp_page(
        spec.page_index, spec.page_size, settings.max_page_size, settings.default_page_size
    )
    where, params = compile_where(member_conditions(spec), MEMBER_COLUMNS)
    order = order_by(spec.sort, MEMBER_SORTS, MEMBER_DEFAULT_ORDER, MEMBER_TIEBREAK)
    paging, paging_params = limit_offset(page_index, page_size)

    try:
        rows = db.fetch_all(MEMBER_SELECT + where + order + paging, tuple(params + paging_params))
        total = db.fetch_count(MEMBER_COUNT + where, tuple(params))
    except QueryFailure as e:
        logger.error(f"Failed to fetch members (Code: {e.code})")
        raise QueryFailure("Failed to fetch members", code=e.code, original=e.original) from e

    return Page(rows=[_to_member(r) for r in rows], total_count=total, page_index=page_index, page_size=page_size)


def get_most_recent_wyc_number() -> int:
    row = db.fetch_one("SELECT wyc_number FROM members ORDER BY join_date DESC, rowid DESC LIMIT 1")
    return int(row["wyc_number"]) if row else 0


def get_categories() -> list[dict]:
    return [dict(r) for r in db.fetch_all("SELECT _index, text FROM memcat ORDER BY _index")]


def get_quarters() -> list[dict]:
    return [dict(r) for r in db.fetch_all("SELECT _index, text, school, end_date FROM quarters ORDER BY _index DESC")]


def add_member(member: NewMember) -> int:
    """
    Insert one member; returns the WYC number.
    Raises ValidationFailure before touching the database, DuplicateKey if the
    number is taken.
    """
    session.require_auth()

    errors = utils.validate_member_inputs(member)
    if errors:
        raise ValidationFailure(errors)

    values = asdict(member)
    values["wyc_number"] = int(member.wyc_number)
    values["password"] = hash_password(member.password) if member.password else None
    if not values["join_date"]:
        # column default (CURRENT_TIMESTAMP)
        del values["join_date"]

    columns = ", ".join(values)
    placeholders = ", ".join("?" for _ in values)
    try:
        db.execute(f"INSERT INTO members({columns}) VALUES({placeholders})", tuple(values.values()))
    except QueryFailure as e:
        if e.code == "ER_DUP_ENTRY":
            logger.warning(f"Duplicate WYC number {member.wyc_number}")
            raise DuplicateKey(member.wyc_number, original=e.original) from e
        if e.code == "ER_BAD_NULL_ERROR":
            raise QueryFailure("Required field is null", code=e.code, original=e.original) from e
        raise QueryFailure("Failed to add member", code=e.code, original=e.original) from e

    logger.info(f"Added member {values['wyc_number']}")
    return values["wyc_number"]
