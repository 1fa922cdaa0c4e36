from __future__ import annotations

from typing import Protocol


class PasswordHasher(Protocol):
    """Port for one-way password hashing."""

    def hash(self, plaintext: str) -> str:
        """Return a salted hash of ``plaintext``."""

    def verify(self, plaintext: str, hashed: str) -> bool:
        """Return ``True`` when ``plaintext`` matches ``hashed``."""


class PlaintextPasswordHasher(PasswordHasher):
    """Reversible hasher for unit tests. Never wire it into the app."""

    PREFIX = "plain$"

    def hash(self, plaintext: str) -> str:
        return f"{self.PREFIX}{plaintext}"

    def verify(self, plaintext: str, hashed: str) -> bool:
        return hashed == f"{self.PREFIX}{plaintext}"
