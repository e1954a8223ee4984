"""
utils.py
Validation, dates, exports, sample data.
"""

from __future__ import annotations

from dataclasses import asdict
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

import pandas as pd

import db
from auth import hash_password
from config import get_settings
from models import LessonInput, NewMember


def today_pacific() -> str:
    """Today's date in the club's timezone, YYYY-MM-DD."""
    return datetime.now(ZoneInfo(get_settings().timezone)).date().isoformat()


def is_lesson_upcoming(calendar_date: str | None) -> bool:
    if not calendar_date:
        return False
    # ISO dates compare correctly as strings
    return calendar_date >= today_pacific()


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def validate_member_inputs(member: NewMember) -> list[str]:
    errors: list[str] = []
    if _is_blank(member.wyc_number):
        errors.append("WYC Number is required.")
    else:
        try:
            if int(member.wyc_number) <= 0:
                errors.append("WYC Number must be a positive number.")
        except (TypeError, ValueError):
            errors.append("WYC Number must be a positive number.")
    try:
        int(member.expire_qtr)
    except (TypeError, ValueError):
        errors.append("Expire quarter must be a number.")
    if member.email and "@" not in member.email:
        errors.append("Email address is not valid.")
    return errors


def _is_int(value) -> bool:
    try:
        int(value)
    except (TypeError, ValueError):
        return False
    return True


def validate_lesson_inputs(lesson: LessonInput) -> list[str]:
    """Required and well-formed lesson fields, checked in form order; every problem is reported."""
    errors: list[str] = []
    if lesson.type_id is None:
        errors.append("Type is required")
    elif not _is_int(lesson.type_id):
        errors.append("Type must be a number")
    if _is_blank(lesson.calendar_date):
        errors.append("Calendar Date is required")
    elif not isinstance(lesson.calendar_date, str):
        errors.append("Calendar Date must be a valid ISO date (YYYY-MM-DD)")
    else:
        try:
            date.fromisoformat(lesson.calendar_date)
        except ValueError:
            errors.append("Calendar Date must be a valid ISO date (YYYY-MM-DD)")
    if _is_blank(lesson.subtype):
        errors.append("Title is required")
    if _is_blank(lesson.day):
        errors.append("Day of week is required")
    if _is_blank(lesson.time):
        errors.append("Time is required")
    if _is_blank(lesson.dates):
        errors.append("Dates (display text) is required")
    if _is_blank(lesson.size):
        errors.append("Size is required")
    elif not _is_int(lesson.size):
        errors.append("Size must be a number")
    if lesson.expire is None:
        errors.append("Expire is required")
    elif not _is_int(lesson.expire):
        errors.append("Expire must be a number")
    for label, instructor in (("Instructor 1", lesson.instructor1), ("Instructor 2", lesson.instructor2)):
        if instructor is not None and not _is_int(instructor):
            errors.append(f"{label} must be a WYC number")
    return errors


def members_to_csv_bytes(rows) -> bytes:
    df = pd.DataFrame([asdict(r) for r in rows])
    return df.to_csv(index=False).encode("utf-8")


def lessons_to_csv_bytes(rows) -> bytes:
    df = pd.DataFrame([asdict(r) for r in rows])
    return df.to_csv(index=False).encode("utf-8")


def records_frame(rows, columns: list[str]) -> pd.DataFrame:
    if not rows:
        return pd.DataFrame(columns=columns)
    return pd.DataFrame([asdict(r) for r in rows])[columns]


def insert_sample_data() -> None:
    """
    Insert lookups, 3 members and 2 lessons (members use fixed WYC numbers, so run once).
    """
    today = date.today()

    db.executemany("INSERT INTO memcat(text) VALUES(?)", [("Student",), ("Faculty",), ("Community",)])
    db.executemany(
        "INSERT INTO quarters(text, school, end_date) VALUES(?,?,?)",
        [
            ("Fall", f"Fall {today.year}", date(today.year, 12, 15).isoformat()),
            ("Winter", f"Winter {today.year + 1}", date(today.year + 1, 3, 20).isoformat()),
        ],
    )
    db.executemany("INSERT INTO class_type(text) VALUES(?)", [("Dinghy",), ("Keelboat",)])
    db.set_current_quarter(1)

    members = [
        (1001, "John", "McAllister", 1, 2, hash_password("sailing1"), (today - timedelta(days=30)).isoformat()),
        (1002, "Sarah", "Johnson", 2, 1, hash_password("sailing2"), (today - timedelta(days=10)).isoformat()),
        (1003, "Omar", "Samy", 3, 2, None, today.isoformat()),
    ]
    db.executemany(
        """
        INSERT INTO members(wyc_number, first, last, category, expire_qtr, password, join_date)
        VALUES(?,?,?,?,?,?,?)
        """,
        members,
    )

    lessons = [
        (1, "Intro to Dinghy", "Sat", "10:00", "Oct 4-25", (today + timedelta(days=7)).isoformat(), 1001, None, "", 8, 1, 1),
        (2, "Keelboat Basics", "Sun", "13:00", "Oct 5-26", (today + timedelta(days=8)).isoformat(), 1001, 1002, "", 6, 2, 1),
    ]
    db.executemany(
        """
        INSERT INTO lessons(type, subtype, day, time, dates, calendar_date, instructor1, instructor2,
                            description, size, expire, display)
        VALUES(?,?,?,?,?,?,?,?,?,?,?,?)
        """,
        lessons,
    )
