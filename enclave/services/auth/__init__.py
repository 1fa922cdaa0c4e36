from __future__ import annotations

from .dto import LoginIn, LogoutIn, RefreshIn, SessionOut
from .service import AuthService

__all__ = ["AuthService", "LoginIn", "RefreshIn", "LogoutIn", "SessionOut"]
