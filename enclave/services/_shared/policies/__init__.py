from __future__ import annotations

from .roles import MANAGER_ROLES, ROLE_CHANGE_RULES, RoleChange, check_role_change, ensure_manager

__all__ = ["MANAGER_ROLES", "ROLE_CHANGE_RULES", "RoleChange", "check_role_change", "ensure_manager"]
