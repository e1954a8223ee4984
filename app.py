"""
app.py
Streamlit club admin (member roster + lesson schedule), members log in with WYC number.
Run: streamlit run app.py
"""

from __future__ import annotations

from datetime import date

import streamlit as st
from loguru import logger

import auth
import db
import lessons
import members
import session
import utils
from config import get_settings
from errors import WycError
from log import setup_logging
from models import EXPIRE_QTR_MODES, FilterSpec, LessonInput, NewMember, SortSpec

st.set_page_config(page_title="WYC Club Admin", layout="wide")

MEMBER_COLUMNS = ["wyc_number", "first", "last", "category_name", "expire_qtr_name", "join_date"]
LESSON_COLUMNS = [
    "index", "type", "subtype", "day", "time", "dates", "calendar_date",
    "instructor1_name", "instructor2_name", "size", "expire", "display",
]
MEMBER_SORT_OPTIONS = {"Join date": "joinDate", "Expire quarter": "expireQtr"}


@st.cache_resource
def init_once():
    # One-time process setup; reruns reuse it
    setup_logging()
    db.init_db()
    return True


def login_screen():
    st.title("🔐 WYC Login")

    col1, _ = st.columns([1, 1])
    with col1:
        wyc_number = st.text_input("WYC Number")
        password = st.text_input("Password", type="password")
        if st.button("Login", type="primary"):
            try:
                auth.login(wyc_number.strip(), password)
                st.rerun()
            except WycError as e:
                st.error(str(e))


# ---------- Members ----------

def member_filters() -> FilterSpec:
    settings = get_settings()
    reset = {"on_change": session.reset_page, "args": ("member_page",)}
    with st.sidebar:
        st.subheader("Search & Filters")
        wyc_id = st.text_input("WYC ID", **reset)
        name = st.text_input("Name (first, or first + start of last)", **reset)

        categories = members.get_categories()
        cat_labels = {"All": None} | {c["text"] or f"#{c['_index']}": c["_index"] for c in categories}
        category = cat_labels[st.selectbox("Category", list(cat_labels.keys()), **reset)]

        quarters = members.get_quarters()
        qtr_labels = {"Any": None} | {q["school"] or f"#{q['_index']}": q["_index"] for q in quarters}
        expire_qtr = qtr_labels[st.selectbox("Expire quarter", list(qtr_labels.keys()), **reset)]
        expire_mode = st.radio("Quarter match", EXPIRE_QTR_MODES, horizontal=True, **reset)

        sort_label = st.selectbox("Sort by", list(MEMBER_SORT_OPTIONS.keys()), **reset)
        descending = st.checkbox("Descending", value=True, **reset)
        page_size = st.number_input("Rows per page", 1, settings.max_page_size, settings.default_page_size, **reset)

    page_index = st.session_state.get("member_page", 0)
    return FilterSpec(
        wyc_id=wyc_id or None,
        name=name or None,
        category=category,
        expire_qtr=expire_qtr,
        expire_qtr_mode=expire_mode,
        sort=SortSpec(MEMBER_SORT_OPTIONS[sort_label], descending),
        page_index=page_index,
        page_size=int(page_size),
    )


def pagination_controls(key: str, page):
    c1, c2, c3 = st.columns([1, 2, 1])
    with c1:
        if st.button("◀ Prev", key=f"{key}_prev", disabled=page.page_index <= 0):
            st.session_state[key] = page.page_index - 1
            st.rerun()
    with c2:
        st.caption(f"Page {page.page_index + 1} of {max(page.page_count, 1)} ({page.total_count} total)")
    with c3:
        if st.button("Next ▶", key=f"{key}_next", disabled=page.page_index + 1 >= page.page_count):
            st.session_state[key] = page.page_index + 1
            st.rerun()


def add_member_form():
    st.subheader("➕ Add Member")

    categories = members.get_categories()
    quarters = members.get_quarters()

    col1, col2, col3 = st.columns(3)
    with col1:
        wyc_number = st.number_input("WYC Number", min_value=1, value=members.get_most_recent_wyc_number() + 1)
        first = st.text_input("First name")
        last = st.text_input("Last name")
        email = st.text_input("Email")
    with col2:
        phone1 = st.text_input("Phone")
        street = st.text_input("Street address")
        city = st.text_input("City")
        state = st.text_input("State")
        zip_code = st.text_input("Zip code")
    with col3:
        category = st.selectbox(
            "Category",
            options=[None] + [c["_index"] for c in categories],
            format_func=lambda i: "Unknown" if i is None else next(c["text"] for c in categories if c["_index"] == i),
        )
        expire_qtr = st.selectbox(
            "Expire quarter",
            options=[0] + [q["_index"] for q in quarters],
            format_func=lambda i: "N/A" if i == 0 else next(q["school"] for q in quarters if q["_index"] == i),
        )
        password = st.text_input("Initial password (optional)", type="password")

    if st.button("Save member", type="primary"):
        try:
            number = members.add_member(
                NewMember(
                    wyc_number=int(wyc_number),
                    first=first.strip() or None,
                    last=last.strip() or None,
                    email=email.strip() or None,
                    phone1=phone1.strip() or None,
                    street_address=street.strip() or None,
                    city=city.strip() or None,
                    state=state.strip() or None,
                    zip_code=zip_code.strip() or None,
                    category=category,
                    expire_qtr=expire_qtr,
                    password=password or None,
                )
            )
            st.success(f"Member {number} added.")
            st.rerun()
        except WycError as e:
            st.error(str(e))


def members_page():
    st.header("👥 Members")

    spec = member_filters()
    try:
        page = members.build_member_query(spec)
    except WycError as e:
        st.error(str(e))
        return

    st.dataframe(utils.records_frame(page.rows, MEMBER_COLUMNS), use_container_width=True, hide_index=True)
    pagination_controls("member_page", page)
    if page.rows:
        st.download_button(
            "Download this page as CSV",
            data=utils.members_to_csv_bytes(page.rows),
            file_name="members.csv",
            mime="text/csv",
        )

    st.divider()
    add_member_form()


# ---------- Lessons ----------

def lesson_form(existing=None):
    st.subheader(f"✏️ Edit Lesson ({existing.index})" if existing else "➕ New Lesson")

    class_types = lessons.get_class_types()
    type_ids = [c["_index"] for c in class_types]
    current_type = next((c["_index"] for c in class_types if existing and c["text"] == existing.type), None)

    col1, col2 = st.columns(2)
    with col1:
        type_id = st.selectbox(
            "Type",
            options=[None] + type_ids,
            index=([None] + type_ids).index(current_type),
            format_func=lambda i: "(choose)" if i is None else next(c["text"] for c in class_types if c["_index"] == i),
        )
        subtype = st.text_input("Title", value=(existing.subtype or "") if existing else "")
        day = st.text_input("Day of week", value=(existing.day or "") if existing else "")
        time = st.text_input("Time", value=(existing.time or "") if existing else "")
        dates = st.text_input("Dates (display text)", value=(existing.dates or "") if existing else "")
    with col2:
        calendar_date = st.date_input(
            "Calendar date",
            value=date.fromisoformat(existing.calendar_date) if existing else date.today(),
        ).isoformat()
        instructor1 = st.number_input("Instructor 1 (WYC #)", min_value=0, value=(existing.instructor1 or 0) if existing else 0)
        instructor2 = st.number_input("Instructor 2 (WYC #)", min_value=0, value=(existing.instructor2 or 0) if existing else 0)
        size = st.number_input("Size", min_value=1, value=(existing.size or 1) if existing else 1)
        expire = st.number_input("Expire quarter", min_value=0, value=(existing.expire or 0) if existing else 0)
        display = st.checkbox("Display", value=bool(existing.display) if existing else False)
    description = st.text_area("Comments", value=(existing.comments or "") if existing else "")

    if st.button("Save lesson", type="primary"):
        payload = LessonInput(
            type_id=type_id,
            calendar_date=calendar_date,
            subtype=subtype.strip(),
            day=day.strip(),
            time=time.strip(),
            dates=dates.strip(),
            instructor1=int(instructor1) or None,
            instructor2=int(instructor2) or None,
            description=description.strip(),
            size=int(size),
            expire=int(expire),
            display=1 if display else 0,
        )
        try:
            if existing:
                lessons.update_lesson(existing.index, payload)
                st.session_state.edit_lesson = None
                st.success("Lesson updated.")
            else:
                lessons.create_lesson(payload)
                st.success("Lesson created.")
            st.rerun()
        except WycError as e:
            st.error(str(e))


def lessons_page():
    st.header("⛵ Lessons")

    try:
        quarter_lessons, current_quarter = lessons.get_quarter_lessons()
    except WycError as e:
        st.error(str(e))
        return

    st.subheader(f"This quarter (#{current_quarter})")
    if quarter_lessons:
        df = utils.records_frame(quarter_lessons, LESSON_COLUMNS)
        df["upcoming"] = [utils.is_lesson_upcoming(lesson.calendar_date) for lesson in quarter_lessons]
        st.dataframe(df, use_container_width=True, hide_index=True)
    else:
        st.caption("No lessons for the current quarter.")

    st.divider()

    st.subheader("All lessons")
    sort_desc = st.radio(
        "Calendar date", ["Newest first", "Oldest first"], horizontal=True,
        on_change=session.reset_page, args=("lesson_page",),
    )
    sort_by_date = st.checkbox("Sort by calendar date", value=False, on_change=session.reset_page, args=("lesson_page",))
    sort = SortSpec("calendarDate", sort_desc == "Newest first") if sort_by_date else None
    try:
        page = lessons.build_lesson_query(st.session_state.get("lesson_page", 0), get_settings().default_page_size, sort)
    except WycError as e:
        st.error(str(e))
        return

    st.dataframe(utils.records_frame(page.rows, LESSON_COLUMNS), use_container_width=True, hide_index=True)
    pagination_controls("lesson_page", page)
    if page.rows:
        st.download_button(
            "Download this page as CSV",
            data=utils.lessons_to_csv_bytes(page.rows),
            file_name="lessons.csv",
            mime="text/csv",
            key="lessons_csv",
        )

    by_index = {lesson.index: lesson for lesson in page.rows}
    selected = st.selectbox("Edit lesson", options=["(none)"] + [str(i) for i in by_index])
    if selected != "(none)" and st.button("Edit"):
        st.session_state.edit_lesson = int(selected)
        st.rerun()

    st.divider()

    editing = st.session_state.get("edit_lesson")
    if editing and editing in by_index:
        lesson_form(existing=by_index[editing])
        if st.button("Cancel edit"):
            st.session_state.edit_lesson = None
            st.rerun()
    else:
        lesson_form()


def settings_page():
    st.header("⚙️ Settings")

    st.subheader("Change password")
    p1 = st.text_input("New password", type="password")
    p2 = st.text_input("Confirm new password", type="password")
    if st.button("Update password", type="primary"):
        try:
            auth.change_password(session.require_auth(), p1, p2)
            st.success("Password updated.")
        except WycError as e:
            st.error(str(e))

    st.divider()

    st.subheader("Current quarter")
    quarter = st.number_input("Quarter marker", min_value=0, value=db.get_current_quarter())
    if st.button("Set quarter"):
        db.set_current_quarter(int(quarter))
        st.success("Current quarter updated.")

    st.divider()

    st.subheader("Sample data")
    st.caption("Insert lookups, 3 sample members and 2 lessons (run once on an empty database).")
    if st.button("Insert sample data"):
        try:
            utils.insert_sample_data()
            st.success("Sample data inserted.")
            st.rerun()
        except WycError as e:
            st.error(str(e))


def main_app(user):
    st.sidebar.title("⛵ WYC Admin")
    name = " ".join(p for p in (user.first, user.last) if p) or f"#{user.wyc_number}"
    st.sidebar.caption(f"Logged in as: {name}")

    pages = ["Members", "Lessons", "Settings"]
    if "page" not in st.session_state:
        st.session_state.page = "Members"
    st.session_state.page = st.sidebar.radio("Navigate", pages, index=pages.index(st.session_state.page))

    if st.sidebar.button("Logout"):
        auth.logout()
        logger.info(f"Member {user.wyc_number} logged out")
        st.rerun()

    if st.session_state.page == "Members":
        members_page()
    elif st.session_state.page == "Lessons":
        lessons_page()
    elif st.session_state.page == "Settings":
        settings_page()


# --------- App entry ---------

def run():
    init_once()

    user = auth.get_current_user()
    if user is None:
        login_screen()
        return

    main_app(user)


if __name__ == "__main__":
    run()
