"""
enclave.services._shared.ports
==============================

Hexagonal ports the services depend on. Concrete adapters live under
:mod:`enclave.infra`; the in-memory or stub doubles here back unit tests.

- :mod:`password_hasher`: :class:`~.PasswordHasher`
- :mod:`token_issuer`: :class:`~.TokenIssuer`, :class:`~.StubTokenIssuer`
- :mod:`session_ledger`: :class:`~.SessionLedger`, :class:`~.SessionRecord`,
  :class:`~.RotationResult`, :class:`~.InMemorySessionLedger`
"""

from __future__ import annotations

from .password_hasher import PasswordHasher, PlaintextPasswordHasher
from .session_ledger import InMemorySessionLedger, RotationResult, SessionLedger, SessionRecord
from .token_issuer import StubTokenIssuer, TokenIssuer, TokenSubject

__all__ = [
    "PasswordHasher",
    "PlaintextPasswordHasher",
    "SessionLedger",
    "SessionRecord",
    "RotationResult",
    "InMemorySessionLedger",
    "TokenIssuer",
    "TokenSubject",
    "StubTokenIssuer",
]
