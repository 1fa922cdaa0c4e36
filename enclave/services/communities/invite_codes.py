from __future__ import annotations

import base64
import secrets

INVITE_CODE_BYTES = 8


def generate_invite_code(nbytes: int = INVITE_CODE_BYTES) -> str:
    """
    Return an upper-case invite code drawn from ``nbytes`` random bytes.

    The bytes are base64 encoded with ``+``, ``/`` and ``=`` stripped, which
    leaves about 11 alphanumeric characters for the default size.
    """
    raw = base64.b64encode(secrets.token_bytes(nbytes)).decode("ascii")
    return raw.replace("+", "").replace("/", "").replace("=", "").upper()


def normalize_invite_code(code: str) -> str:
    return code.strip().upper()
