"""RBAC module/action registry and per-role defaults."""
from __future__ import annotations

from typing import Literal

PermissionAction = Literal["view", "add", "edit", "delete"]

ACTION_BY_METHOD: dict[str, PermissionAction] = {
    "GET": "view",
    "HEAD": "view",
    "OPTIONS": "view",
    "POST": "add",
    "PUT": "edit",
    "PATCH": "edit",
    "DELETE": "delete",
}

SYSTEM_MODULES: list[dict[str, str]] = [
    {"key": "dashboard", "name": "Dashboard"},
    {"key": "students", "name": "Students"},
    {"key": "attendance", "name": "Attendance"},
    {"key": "subjects", "name": "Subjects"},
    {"key": "classes", "name": "Class Configuration"},
    {"key": "users", "name": "Staff Users"},
]


def _full_permissions() -> dict[str, bool]:
    return {"view": True, "add": True, "edit": True, "delete": True}


def _view_only() -> dict[str, bool]:
    return {"view": True, "add": False, "edit": False, "delete": False}


def _module_defaults(fill: dict[str, bool]) -> dict[str, dict[str, bool]]:
    return {module["key"]: dict(fill) for module in SYSTEM_MODULES}


DEFAULT_ROLE_PERMISSIONS: dict[str, dict[str, dict[str, bool]]] = {
    "admin": _module_defaults(_full_permissions()),
    "hod": {
        **_module_defaults({"view": False, "add": False, "edit": False, "delete": False}),
        "dashboard": _view_only(),
        "students": {"view": True, "add": False, "edit": True, "delete": False},
        "attendance": _view_only(),
        "subjects": _view_only(),
        "classes": {"view": True, "add": True, "edit": True, "delete": False},
    },
    "tutor": {
        **_module_defaults({"view": False, "add": False, "edit": False, "delete": False}),
        "dashboard": _view_only(),
        "students": _view_only(),
        "attendance": _view_only(),
        "subjects": _view_only(),
        "classes": {"view": True, "add": True, "edit": True, "delete": False},
    },
}


def has_permission(role: str, module: str, action: str) -> bool:
    permissions = DEFAULT_ROLE_PERMISSIONS.get(role)
    if not permissions:
        return False
    return bool(permissions.get(module, {}).get(action, False))
