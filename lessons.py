"""
lessons.py
Lesson schedule: paginated listing, current-quarter view, create/update.
"""

from __future__ import annotations

from loguru import logger

import db
import session
import utils
from config import get_settings
from errors import QueryFailure, ValidationFailure
from models import Lesson, LessonInput, Page, SortSpec
from query_builder import LESSON_DEFAULT_ORDER, LESSON_SORTS, LESSON_TIEBREAK, clamp_page, limit_offset, order_by

LESSON_SELECT = """
    SELECT l._index,
           ct.text AS type,
           l.subtype, l.day, l.time, l.dates, l.calendar_date,
           l.instructor1, l.instructor2,
           TRIM(COALESCE(i1.first, '') || ' ' || COALESCE(i1.last, '')) AS instructor1_name,
           TRIM(COALESCE(i2.first, '') || ' ' || COALESCE(i2.last, '')) AS instructor2_name,
           l.description AS comments,
           l.size, l.expire, l.display
    FROM lessons l
    LEFT JOIN class_type ct ON ct._index = l.type
    LEFT JOIN members i1 ON i1.wyc_number = l.instructor1
    LEFT JOIN members i2 ON i2.wyc_number = l.instructor2
"""

LESSON_COLUMNS = (
    "type", "subtype", "day", "time", "dates", "calendar_date",
    "instructor1", "instructor2", "description", "size", "expire", "display",
)


def _to_lesson(row) -> Lesson:
    return Lesson(
        index=row["_index"],
        type=row["type"],
        subtype=row["subtype"],
        day=row["day"],
        time=row["time"],
        dates=row["dates"],
        calendar_date=row["calendar_date"],
        instructor1=row["instructor1"],
        instructor2=row["instructor2"],
        instructor1_name=row["instructor1_name"],
        instructor2_name=row["instructor2_name"],
        comments=row["comments"],
        size=row["size"],
        expire=row["expire"],
        display=row["display"],
    )


def build_lesson_query(page_index: int, page_size: int, sort: SortSpec | None = None) -> Page:
    settings = get_settings()
    page_index, page_size = clamp_page(page_index, page_size, settings.max_page_size, settings.default_page_size)
    order = order_by(sort, LESSON_SORTS, LESSON_DEFAULT_ORDER, LESSON_TIEBREAK)
    paging, paging_params = limit_offset(page_index, page_size)

    try:
        rows = db.fetch_all(LESSON_SELECT + order + paging, tuple(paging_params))
        total = db.fetch_count("SELECT COUNT(*) FROM lessons")
    except QueryFailure as e:
        logger.error(f"Failed to fetch lessons (Code: {e.code})")
        raise QueryFailure("Failed to fetch lessons", code=e.code, original=e.original) from e

    return Page(rows=[_to_lesson(r) for r in rows], total_count=total, page_index=page_index, page_size=page_size)


def get_quarter_lessons() -> tuple[list[Lesson], int]:
    """Lessons still running in the current quarter, earliest first, and that quarter."""
    current_quarter = db.get_current_quarter()
    rows = db.fetch_all(
        LESSON_SELECT + " WHERE l.expire >= ? ORDER BY l.calendar_date ASC, l.time ASC",
        (current_quarter,),
    )
    return [_to_lesson(r) for r in rows], current_quarter


def get_class_types() -> list[dict]:
    return [dict(r) for r in db.fetch_all("SELECT _index, text FROM class_type ORDER BY _index")]


def _values(lesson: LessonInput) -> tuple:
    return (
        int(lesson.type_id),
        lesson.subtype or None,
        lesson.day or None,
        lesson.time or None,
        lesson.dates or None,
        lesson.calendar_date,
        int(lesson.instructor1) if lesson.instructor1 is not None else None,
        int(lesson.instructor2) if lesson.instructor2 is not None else None,
        lesson.description or "",
        int(lesson.size),
        int(lesson.expire),
        1 if lesson.display else 0,
    )


def create_lesson(lesson: LessonInput) -> int:
    session.require_auth()
    errors = utils.validate_lesson_inputs(lesson)
    if errors:
        raise ValidationFailure(errors)

    columns = ", ".join(LESSON_COLUMNS)
    placeholders = ", ".join("?" for _ in LESSON_COLUMNS)
    try:
        index = db.execute(f"INSERT INTO lessons({columns}) VALUES({placeholders})", _values(lesson))
    except QueryFailure as e:
        raise QueryFailure("Failed to create lesson", code=e.code, original=e.original) from e
    logger.info(f"Created lesson {index}")
    return index


def update_lesson(index: int, lesson: LessonInput) -> None:
    session.require_auth()
    errors = utils.validate_lesson_inputs(lesson)
    if errors:
        raise ValidationFailure(errors)

    assignments = ", ".join(f"{c}=?" for c in LESSON_COLUMNS)
    try:
        updated = db.execute_rowcount(
            f"UPDATE lessons SET {assignments} WHERE _index=?",
            _values(lesson) + (int(index),),
        )
    except QueryFailure as e:
        raise QueryFailure("Failed to update lesson", code=e.code, original=e.original) from e
    if updated == 0:
        raise QueryFailure(f"Lesson {index} not found", code="NOT_FOUND")
    logger.info(f"Updated lesson {index}")
