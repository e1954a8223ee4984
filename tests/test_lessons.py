"""
Lesson listing, quarter view and create/update tests
"""

import pytest

import db
import lessons
from errors import QueryFailure, Unauthorized, ValidationFailure
from models import LessonInput, SortSpec


def lesson_input(**overrides):
    values = dict(
        type_id=1,
        calendar_date="2025-01-11",
        subtype="Intro to Dinghy",
        day="Sat",
        time="10:00",
        dates="Jan 11 - Feb 1",
        instructor1=42,
        instructor2=None,
        description="Bring a jacket",
        size=8,
        expire=5,
        display=1,
    )
    values.update(overrides)
    return LessonInput(**values)


@pytest.fixture()
def schedule(logged_in, insert_member):
    insert_member(42, "Johnny", "McAllister")
    insert_member(43, None, "Solo")
    db.executemany("INSERT INTO class_type(_index, text) VALUES(?,?)", [(1, "Dinghy"), (2, "Keelboat")])
    ids = [
        lessons.create_lesson(lesson_input(calendar_date="2025-03-01", time="09:00", expire=4)),
        lessons.create_lesson(lesson_input(calendar_date="2025-01-11", time="13:00", expire=5)),
        lessons.create_lesson(lesson_input(type_id=2, calendar_date="2025-01-11", time="09:00", expire=6,
                                           instructor1=None, instructor2=43)),
    ]
    return ids


class TestBuildLessonQuery:
    def test_default_order_newest_first(self, schedule):
        page = lessons.build_lesson_query(0, 10)
        assert [lesson.index for lesson in page.rows] == list(reversed(schedule))
        assert page.total_count == 3

    def test_sort_by_calendar_date(self, schedule):
        asc = lessons.build_lesson_query(0, 10, SortSpec("calendarDate", False))
        assert [lesson.calendar_date for lesson in asc.rows] == ["2025-01-11", "2025-01-11", "2025-03-01"]
        desc = lessons.build_lesson_query(0, 10, SortSpec("calendarDate", True))
        assert desc.rows[0].calendar_date == "2025-03-01"

    def test_unsupported_sort_falls_back(self, schedule):
        page = lessons.build_lesson_query(0, 10, SortSpec("expireQtr", False))
        assert [lesson.index for lesson in page.rows] == list(reversed(schedule))

    def test_paging(self, schedule):
        page = lessons.build_lesson_query(1, 2)
        assert len(page.rows) == 1
        assert page.total_count == 3
        assert page.page_count == 2

    def test_joined_names(self, schedule):
        by_index = {lesson.index: lesson for lesson in lessons.build_lesson_query(0, 10).rows}
        first = by_index[schedule[0]]
        assert first.type == "Dinghy"
        assert first.instructor1_name == "Johnny McAllister"
        assert first.instructor2_name == ""
        assert first.comments == "Bring a jacket"
        third = by_index[schedule[2]]
        assert third.type == "Keelboat"
        assert third.instructor2_name == "Solo"


class TestQuarterLessons:
    def test_filters_by_current_quarter(self, schedule):
        db.set_current_quarter(5)
        rows, quarter = lessons.get_quarter_lessons()
        assert quarter == 5
        assert [lesson.expire for lesson in rows] == [6, 5]
        # same date, ordered by time
        assert [lesson.time for lesson in rows] == ["09:00", "13:00"]

    def test_default_quarter_is_zero(self, schedule):
        rows, quarter = lessons.get_quarter_lessons()
        assert quarter == 0
        assert len(rows) == 3


class TestCreateUpdate:
    def test_requires_session(self, db_file):
        with pytest.raises(Unauthorized):
            lessons.create_lesson(lesson_input())

    @pytest.mark.parametrize(
        "field,value,message",
        [
            ("type_id", None, "Type is required"),
            ("calendar_date", "", "Calendar Date is required"),
            ("subtype", "", "Title is required"),
            ("day", None, "Day of week is required"),
            ("time", "  ", "Time is required"),
            ("dates", "", "Dates (display text) is required"),
            ("size", None, "Size is required"),
            ("expire", None, "Expire is required"),
        ],
    )
    def test_required_fields(self, logged_in, field, value, message):
        with pytest.raises(ValidationFailure) as exc:
            lessons.create_lesson(lesson_input(**{field: value}))
        assert exc.value.errors == [message]
        assert db.fetch_count("SELECT COUNT(*) FROM lessons") == 0

    def test_errors_reported_in_form_order(self, logged_in):
        with pytest.raises(ValidationFailure) as exc:
            lessons.create_lesson(lesson_input(type_id=None, calendar_date=None, expire=None))
        assert exc.value.errors == ["Type is required", "Calendar Date is required", "Expire is required"]

    def test_bad_calendar_date(self, logged_in):
        with pytest.raises(ValidationFailure):
            lessons.create_lesson(lesson_input(calendar_date="next week"))

    @pytest.mark.parametrize(
        "field,value,message",
        [
            ("type_id", "dinghy", "Type must be a number"),
            ("calendar_date", 20250111, "Calendar Date must be a valid ISO date (YYYY-MM-DD)"),
            ("size", "eight", "Size must be a number"),
            ("expire", "spring", "Expire must be a number"),
            ("instructor1", "Johnny", "Instructor 1 must be a WYC number"),
            ("instructor2", "x", "Instructor 2 must be a WYC number"),
        ],
    )
    def test_malformed_fields(self, logged_in, field, value, message):
        with pytest.raises(ValidationFailure) as exc:
            lessons.create_lesson(lesson_input(**{field: value}))
        assert exc.value.errors == [message]
        assert db.fetch_count("SELECT COUNT(*) FROM lessons") == 0

    def test_malformed_update_leaves_row(self, schedule):
        with pytest.raises(ValidationFailure):
            lessons.update_lesson(schedule[0], lesson_input(size="eight", subtype="Changed"))
        row = db.fetch_one("SELECT subtype, size FROM lessons WHERE _index = ?", (schedule[0],))
        assert row["subtype"] == "Intro to Dinghy"
        assert row["size"] == 8

    def test_numeric_strings_accepted(self, logged_in):
        index = lessons.create_lesson(lesson_input(type_id="1", size="8", expire="5", instructor1="42"))
        row = db.fetch_one("SELECT type, size, expire, instructor1 FROM lessons WHERE _index = ?", (index,))
        assert (row["type"], row["size"], row["expire"], row["instructor1"]) == (1, 8, 5, 42)

    def test_update(self, schedule):
        lessons.update_lesson(schedule[0], lesson_input(subtype="Advanced Dinghy", display=0))
        row = db.fetch_one("SELECT subtype, display FROM lessons WHERE _index = ?", (schedule[0],))
        assert row["subtype"] == "Advanced Dinghy"
        assert row["display"] == 0

    def test_update_invalid_leaves_row(self, schedule):
        with pytest.raises(ValidationFailure):
            lessons.update_lesson(schedule[0], lesson_input(subtype=""))
        row = db.fetch_one("SELECT subtype FROM lessons WHERE _index = ?", (schedule[0],))
        assert row["subtype"] == "Intro to Dinghy"

    def test_update_missing(self, schedule):
        with pytest.raises(QueryFailure) as exc:
            lessons.update_lesson(9999, lesson_input())
        assert exc.value.code == "NOT_FOUND"

    def test_class_types(self, schedule):
        assert [c["text"] for c in lessons.get_class_types()] == ["Dinghy", "Keelboat"]
