"""Role definitions, role-gated navigation and permission checks."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from utils.errors import PermissionDeniedError

ROLES = ("admin", "chairman", "secretary", "member", "registrar", "coordination")

MINUTES_UPLOAD_ROLES = ("admin", "secretary", "chairman", "coordination")
DRAFT_MINUTES_ROLES = ("secretary", "admin", "coordination")
REPORT_ROLES = ("admin", "chairman", "coordination", "registrar")
CHAIRMAN_DASHBOARD_ROLES = ("chairman", "admin")
EXTENSION_CREATE_ROLES = ("secretary", "admin", "coordination")
EXTENSION_RECOMMEND_ROLES = ("admin", "coordination")
EXTENSION_APPROVE_ROLES = ("chairman", "registrar")


@dataclass
class NavItem:
    title: str
    path: str
    roles: Optional[Sequence[str]] = None
    children: List["NavItem"] = field(default_factory=list)

    def to_view(self) -> Dict[str, Any]:
        view: Dict[str, Any] = {"title": self.title, "path": self.path}
        if self.children:
            view["children"] = [child.to_view() for child in self.children]
        return view


NAVIGATION: List[NavItem] = [
    NavItem("Dashboard", "/dashboard", ("admin", "coordination", "registrar", "member")),
    NavItem("Chairman Dashboard", "/chairman-dashboard", CHAIRMAN_DASHBOARD_ROLES),
    NavItem("Workbodies", "/workbodies"),
    NavItem("Calendar", "/calendar"),
    NavItem(
        "Meeting Minutes",
        "/minutes",
        children=[
            NavItem("View Minutes", "/minutes"),
            NavItem("Upload Minutes", "/upload-minutes", MINUTES_UPLOAD_ROLES),
            NavItem("Draft Minutes", "/minutes/draft", DRAFT_MINUTES_ROLES),
        ],
    ),
    NavItem("Documents", "/documents"),
    NavItem("Reports", "/reports", REPORT_ROLES),
    NavItem("Settings", "/settings"),
]


def has_access(role: Optional[str], roles: Optional[Sequence[str]]) -> bool:
    """An item without a role list is visible to everyone."""
    if not roles:
        return True
    return role in roles


def _filter(items: Sequence[NavItem], role: Optional[str]) -> List[NavItem]:
    visible = []
    for item in items:
        if not has_access(role, item.roles):
            continue
        children = _filter(item.children, role)
        if item.children and not children:
            continue
        visible.append(NavItem(item.title, item.path, item.roles, children))
    return visible


def navigation_for(role: Optional[str]) -> List[NavItem]:
    return _filter(NAVIGATION, role)


def home_path(role: Optional[str]) -> str:
    return "/chairman-dashboard" if role == "chairman" else "/dashboard"


def require_role(role: Optional[str], allowed: Sequence[str], action: str) -> None:
    """Raise PermissionDeniedError unless ``role`` is one of ``allowed``."""
    if role not in allowed:
        raise PermissionDeniedError(f"Role '{role or 'anonymous'}' may not {action}")


def check_minutes_upload(
    role: Optional[str], user_workbody_id: Optional[str], workbody_id: str
) -> None:
    """Upload gate: role must be allowed and a secretary is bound to their own workbody."""
    require_role(role, MINUTES_UPLOAD_ROLES, "upload minutes")
    if role == "secretary" and user_workbody_id != workbody_id:
        raise PermissionDeniedError("Secretaries may only upload minutes for their own workbody")
