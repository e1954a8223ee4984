"""
session.py
Login session kept in Streamlit's per-browser session state.
"""

from __future__ import annotations

import time

import streamlit as st

from config import get_settings
from errors import Unauthorized
from models import AuthUser

_USER_ID = "user_id"
_USER = "user"
_LAST_SEEN = "last_seen"


def _expired(state) -> bool:
    last_seen = state.get(_LAST_SEEN)
    if last_seen is None:
        return True
    return time.time() - last_seen > get_settings().session_max_age


def get_user_id() -> int | None:
    state = st.session_state
    if state.get(_USER_ID) is None:
        return None
    if _expired(state):
        clear()
        return None
    state[_LAST_SEEN] = time.time()
    return state[_USER_ID]


def get_user() -> AuthUser | None:
    if get_user_id() is None:
        return None
    return st.session_state.get(_USER)


def set_user(user_id: int, profile: AuthUser) -> None:
    state = st.session_state
    state[_USER_ID] = int(user_id)
    state[_USER] = profile
    state[_LAST_SEEN] = time.time()


def clear() -> None:
    state = st.session_state
    for key in (_USER_ID, _USER, _LAST_SEEN):
        if key in state:
            del state[key]


def require_auth() -> int:
    """Return the logged-in WYC number or raise Unauthorized."""
    user_id = get_user_id()
    if user_id is None:
        raise Unauthorized()
    return user_id


def reset_page(key: str) -> None:
    """Back to the first page of a listing; used when its filters or ordering change."""
    st.session_state[key] = 0
