"""
db.py
SQLite helpers + initialization (creates DB/tables, seeds the lesson quarter pointer).

Every sqlite3 error leaving this module is wrapped in errors.QueryFailure.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager

from loguru import logger

from config import get_settings
from errors import QueryFailure


def _error_code(exc: sqlite3.Error) -> str | None:
    msg = str(exc)
    if isinstance(exc, sqlite3.IntegrityError):
        if "UNIQUE constraint" in msg or "PRIMARY KEY" in msg:
            return "ER_DUP_ENTRY"
        if "NOT NULL constraint" in msg:
            return "ER_BAD_NULL_ERROR"
    return getattr(exc, "sqlite_errorname", None)


@contextmanager
def get_conn():
    try:
        conn = sqlite3.connect(get_settings().db_file, check_same_thread=False)
    except sqlite3.Error as e:
        logger.error(f"Database connection failed: {e}")
        raise QueryFailure("Database connection failed", code=_error_code(e), original=e) from e
    conn.row_factory = sqlite3.Row
    try:
        yield conn
        conn.commit()
    except sqlite3.Error as e:
        conn.rollback()
        code = _error_code(e)
        logger.error(f"Database query error: {e} (Code: {code or 'NO_CODE'})")
        raise QueryFailure("Database query failed", code=code, original=e) from e
    finally:
        conn.close()


def execute(sql: str, params: tuple = ()) -> int:
    """Run a write statement; returns lastrowid."""
    with get_conn() as conn:
        cur = conn.execute(sql, params)
        return cur.lastrowid


def execute_rowcount(sql: str, params: tuple = ()) -> int:
    with get_conn() as conn:
        cur = conn.execute(sql, params)
        return cur.rowcount


def executemany(sql: str, seq_of_params: list[tuple]) -> None:
    with get_conn() as conn:
        conn.executemany(sql, seq_of_params)


def fetch_one(sql: str, params: tuple = ()):
    with get_conn() as conn:
        cur = conn.execute(sql, params)
        return cur.fetchone()


def fetch_all(sql: str, params: tuple = ()) -> list[sqlite3.Row]:
    with get_conn() as conn:
        cur = conn.execute(sql, params)
        return cur.fetchall()


def fetch_count(sql: str, params: tuple = ()) -> int:
    row = fetch_one(sql, params)
    return int(row[0]) if row else 0


def _create_tables() -> None:
    execute(
        """
        CREATE TABLE IF NOT EXISTS members (
            wyc_number INTEGER PRIMARY KEY,
            last TEXT,
            first TEXT,
            street_address TEXT,
            city TEXT,
            state TEXT,
            zip_code TEXT,
            phone1 TEXT,
            phone2 TEXT,
            email TEXT,
            category INTEGER,
            expire_qtr INTEGER NOT NULL DEFAULT 0,
            student_id INTEGER,
            password TEXT,
            out_to_sea INTEGER DEFAULT 0,
            join_date TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
            image_name TEXT
        )
        """
    )

    # Lookups
    execute(
        """
        CREATE TABLE IF NOT EXISTS memcat (
            _index INTEGER PRIMARY KEY AUTOINCREMENT,
            text TEXT
        )
        """
    )
    execute(
        """
        CREATE TABLE IF NOT EXISTS quarters (
            _index INTEGER PRIMARY KEY AUTOINCREMENT,
            text TEXT,
            school TEXT,
            end_date TEXT
        )
        """
    )
    execute(
        """
        CREATE TABLE IF NOT EXISTS class_type (
            _index INTEGER PRIMARY KEY AUTOINCREMENT,
            text TEXT
        )
        """
    )

    execute(
        """
        CREATE TABLE IF NOT EXISTS lessons (
            _index INTEGER PRIMARY KEY AUTOINCREMENT,
            type INTEGER,
            subtype TEXT,
            day TEXT,
            time TEXT,
            dates TEXT,
            calendar_date TEXT NOT NULL,
            instructor1 INTEGER,
            instructor2 INTEGER,
            description TEXT NOT NULL DEFAULT '',
            size INTEGER,
            expire INTEGER,
            display INTEGER NOT NULL DEFAULT 0
        )
        """
    )

    # Row _index=1 is the current quarter pointer
    execute(
        """
        CREATE TABLE IF NOT EXISTS lesson_quarter (
            _index INTEGER PRIMARY KEY AUTOINCREMENT,
            quarter INTEGER NOT NULL DEFAULT 0
        )
        """
    )


def init_db() -> None:
    """
    Initialize the database.
    - Create tables
    - Seed the current-quarter pointer row if missing
    """
    _create_tables()
    execute("INSERT OR IGNORE INTO lesson_quarter(_index, quarter) VALUES(1, 0)")
    logger.info(f"Database ready at {get_settings().db_file}")


def get_current_quarter() -> int:
    row = fetch_one("SELECT quarter FROM lesson_quarter WHERE _index = 1 LIMIT 1")
    return int(row["quarter"]) if row else 0


def set_current_quarter(quarter: int) -> None:
    execute(
        """
        INSERT INTO lesson_quarter(_index, quarter) VALUES(1, ?)
        ON CONFLICT(_index) DO UPDATE SET quarter=excluded.quarter
        """,
        (int(quarter),),
    )
