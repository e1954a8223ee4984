"""
errors.py
Exceptions raised by the data layer and caught by the Streamlit pages.
"""

from __future__ import annotations


class WycError(Exception):
    """Base class; ``message`` is safe to show to the user."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class InvalidCredentials(WycError):
    # Same text for unknown ID and wrong password.
    MESSAGE = "Invalid WYC Number or password"

    def __init__(self):
        super().__init__(self.MESSAGE)


class Unauthorized(WycError):
    def __init__(self, message: str = "Unauthorized: No session found"):
        super().__init__(message)


class QueryFailure(WycError):
    """Datastore error wrapped with a readable message and the driver's error code."""

    def __init__(self, message: str, code: str | None = None, original: BaseException | None = None):
        super().__init__(message)
        self.code = code or "NO_CODE"
        self.original = original

    def __str__(self) -> str:
        if self.original is None:
            return f"{self.message} (Code: {self.code})"
        detail = str(self.original) or type(self.original).__name__
        return f"{self.message}: {detail} (Code: {self.code})"


class DuplicateKey(QueryFailure):
    def __init__(self, wyc_number, original: BaseException | None = None):
        super().__init__(
            f"A member with WYC ID {wyc_number} already exists. Please use a different number.",
            code="ER_DUP_ENTRY",
            original=original,
        )
        self.wyc_number = wyc_number

    def __str__(self) -> str:
        return self.message


class ValidationFailure(WycError):
    """One or more input errors; nothing has been written."""

    def __init__(self, errors: list[str]):
        super().__init__("; ".join(errors))
        self.errors = list(errors)
