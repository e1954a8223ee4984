"""
auth.py
Authentication utilities (legacy password hashes, bcrypt, login, change password).

Stored member passwords use the old club system's format:
'*' + uppercase hex of SHA1(UNHEX(SHA1(password))), i.e. MySQL's PASSWORD().
They must keep verifying, so that scheme is the default for new hashes too.
bcrypt hashes are accepted wherever they are found and can be selected for new
hashes with WYC_PASSWORD_SCHEME=bcrypt.
"""

from __future__ import annotations

import hashlib
import hmac

import bcrypt
from loguru import logger

import db
import session
from config import get_settings
from errors import InvalidCredentials, ValidationFailure
from models import MIN_PASSWORD_LENGTH, AuthUser


def to_utf8(text: str) -> bytes:
    """UTF-8 bytes, with lone surrogates replaced by U+FFFD instead of raising."""
    return text.encode("utf-16", "surrogatepass").decode("utf-16", "replace").encode("utf-8")


class PasswordCredential:
    """Legacy unsalted double SHA-1 hashes."""

    prefix = "*"

    def hash(self, password: str) -> str:
        first = hashlib.sha1(to_utf8(password)).hexdigest()
        # second round runs over the 20 raw bytes, not the hex text
        second = hashlib.sha1(bytes.fromhex(first)).hexdigest()
        return self.prefix + second.upper()

    def verify(self, password: str, stored_hash: str) -> bool:
        if not stored_hash:
            return False
        expected = stored_hash[1:] if stored_hash.startswith(self.prefix) else stored_hash
        actual = self.hash(password)[len(self.prefix):]
        return hmac.compare_digest(to_utf8(actual.upper()), to_utf8(expected.upper()))


class BcryptCredential:
    def __init__(self, rounds: int = 12):
        self.rounds = rounds

    @staticmethod
    def _to_bcrypt_secret(password: str) -> bytes:
        """
        bcrypt only uses the first 72 BYTES of the password.
        We truncate to 72 bytes to avoid ValueError and to make behavior explicit.
        """
        pw = to_utf8(password)
        if len(pw) > 72:
            pw = pw[:72]
        return pw

    def hash(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(self._to_bcrypt_secret(password), salt).decode("utf-8")

    def identify(self, stored_hash: str) -> bool:
        return stored_hash.startswith(("$2a$", "$2b$", "$2y$"))

    def verify(self, password: str, stored_hash: str) -> bool:
        try:
            return bcrypt.checkpw(self._to_bcrypt_secret(password), to_utf8(stored_hash))
        except ValueError:
            # malformed salt
            return False


legacy = PasswordCredential()


def _scheme(name: str | None = None):
    settings = get_settings()
    if (name or settings.password_scheme) == "bcrypt":
        return BcryptCredential(rounds=settings.bcrypt_rounds)
    return legacy


def hash_password(password: str, scheme: str | None = None) -> str:
    return _scheme(scheme).hash(password)


def verify_password(password: str, stored_hash: str | None) -> bool:
    """
    Verify password against a stored hash of either format.
    Never raises; a missing or malformed hash simply fails.
    """
    if not isinstance(password, str) or not isinstance(stored_hash, str) or not stored_hash:
        return False
    bcrypt_scheme = BcryptCredential()
    if bcrypt_scheme.identify(stored_hash):
        return bcrypt_scheme.verify(password, stored_hash)
    return legacy.verify(password, stored_hash)


def get_member_credentials(wyc_number: int):
    return db.fetch_one(
        "SELECT wyc_number, first, last, email, password FROM members WHERE wyc_number = ? LIMIT 1",
        (wyc_number,),
    )


def login(wyc_number, password: str) -> AuthUser:
    """
    Check credentials and start a session.
    Unknown ID, unset password and wrong password all raise the same InvalidCredentials.
    """
    if not wyc_number or not password:
        raise ValidationFailure(["WYC Number and password are required"])
    try:
        number = int(wyc_number)
    except (TypeError, ValueError):
        raise InvalidCredentials()

    row = get_member_credentials(number)
    if not row or not verify_password(password, row["password"]):
        logger.warning("Failed login attempt")
        raise InvalidCredentials()

    user = AuthUser(wyc_number=row["wyc_number"], first=row["first"], last=row["last"], email=row["email"])
    session.set_user(user.wyc_number, user)
    logger.info(f"Member {user.wyc_number} logged in")
    return user


def logout() -> None:
    session.clear()


def get_current_user() -> AuthUser | None:
    return session.get_user()


def change_password(wyc_number: int, new_password: str, confirm: str | None = None) -> None:
    session.require_auth()
    errors: list[str] = []
    if len(new_password or "") < MIN_PASSWORD_LENGTH:
        errors.append(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")
    if confirm is not None and new_password != confirm:
        errors.append("Passwords do not match.")
    if errors:
        raise ValidationFailure(errors)

    db.execute(
        "UPDATE members SET password = ? WHERE wyc_number = ?",
        (hash_password(new_password), int(wyc_number)),
    )
    logger.info(f"Password changed for member {wyc_number}")
