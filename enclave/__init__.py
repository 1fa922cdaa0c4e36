"""Expose the application factory at package level.

Callers can ``from enclave import create_app`` without knowing where the
factory lives.
"""

from __future__ import annotations

from .factory import create_app

__all__ = ["create_app"]
