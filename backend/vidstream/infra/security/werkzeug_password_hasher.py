# vidstream/infra/security/werkzeug_password_hasher.py
from __future__ import annotations

import logging

from werkzeug.security import check_password_hash, generate_password_hash

from vidstream.services._shared.errors import InternalError
from vidstream.services._shared.ports import PasswordHasher

logger = logging.getLogger(__name__)


class WerkzeugPasswordHasher(PasswordHasher):
    """
    Password hasher backed by :mod:`werkzeug.security`.

    Werkzeug prepends the method and salt to the digest (``scrypt:...$salt$hash``),
    so verification needs nothing but the stored string. Digest comparison is
    done with :func:`hmac.compare_digest`.

    :param method: Werkzeug method string (``"scrypt"``, ``"pbkdf2:sha256:600000"``).
    :type method: str
    :param salt_length: Salt length in characters.
    :type salt_length: int
    """

    def __init__(self, method: str = "scrypt", salt_length: int = 16) -> None:
        self.method = method
        self.salt_length = salt_length

    def hash(self, plaintext: str) -> str:
        if not isinstance(plaintext, str) or not plaintext:
            raise ValueError("Password must be a non-empty string.")
        try:
            return generate_password_hash(
                plaintext, method=self.method, salt_length=self.salt_length
            )
        except (ValueError, TypeError) as exc:
            logger.error("Password hashing failed", exc_info=exc)
            raise InternalError("Unable to hash password.") from exc

    def verify(self, plaintext: str, hashed: str) -> bool:
        if not plaintext or not hashed:
            return False
        try:
            return check_password_hash(hashed, plaintext)
        except (ValueError, TypeError):
            # Unknown method or corrupted stored hash.
            logger.warning("Stored password hash could not be parsed")
            return False
