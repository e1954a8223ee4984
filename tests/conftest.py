"""
Pytest configuration and fixtures for the club admin tests
"""

import sys
from pathlib import Path

import pytest
import streamlit as st

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import db  # noqa: E402
import session  # noqa: E402
from config import get_settings  # noqa: E402
from models import AuthUser  # noqa: E402


@pytest.fixture()
def session_state(monkeypatch):
    """Plain dict standing in for st.session_state"""
    state = {}
    monkeypatch.setattr(st, "session_state", state)
    return state


@pytest.fixture()
def db_file(tmp_path, monkeypatch, session_state):
    """Fresh SQLite database per test"""
    path = tmp_path / "wyc-test.db"
    monkeypatch.setenv("WYC_DB_FILE", str(path))
    monkeypatch.setenv("WYC_PASSWORD_SCHEME", "legacy")
    monkeypatch.setenv("WYC_BCRYPT_ROUNDS", "4")
    get_settings.cache_clear()
    db.init_db()
    yield path
    get_settings.cache_clear()


@pytest.fixture()
def logged_in(db_file):
    """Session for an admin member (WYC #1)"""
    session.set_user(1, AuthUser(wyc_number=1, first="Admin", last="User", email=None))
    return 1


@pytest.fixture()
def insert_member(db_file):
    """Insert a member row directly; returns its WYC number"""

    def _insert(wyc_number, first=None, last=None, category=None, expire_qtr=0,
                join_date="2024-01-01 00:00:00", password=None, email=None):
        db.execute(
            """
            INSERT INTO members(wyc_number, first, last, category, expire_qtr, join_date, password, email)
            VALUES(?,?,?,?,?,?,?,?)
            """,
            (wyc_number, first, last, category, expire_qtr, join_date, password, email),
        )
        return wyc_number

    return _insert
