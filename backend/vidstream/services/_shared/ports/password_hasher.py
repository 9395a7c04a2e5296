from __future__ import annotations

from typing import Protocol


class PasswordHasher(Protocol):
    """
    Port for one-way password hashing.

    Implementations must salt every call (same input, different output) and
    compare digests in constant time.
    """

    def hash(self, plaintext: str) -> str: ...

    def verify(self, plaintext: str, hashed: str) -> bool: ...
