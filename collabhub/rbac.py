"""
collabhub/rbac.py

Access guard for project-scoped operations.

Every guarded operation maps to the set of permission names allowed to perform
it. The table below is the single source of truth for thresholds; endpoints
never compare permission ids themselves.

Decision rule: allowed when a membership exists and its permissionId is the
identity of a permission whose name is in the allowed set. ANY_MEMBERSHIP
means membership existence alone suffices.

Pure Python logic - no FastAPI imports, no database access.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, FrozenSet, Mapping, Optional

try:
    from collabhub.errors import PermissionDeniedError
    from collabhub.permissions import PermissionCatalog, PermissionName, catalog as default_catalog
except ModuleNotFoundError:
    from errors import PermissionDeniedError
    from permissions import PermissionCatalog, PermissionName, catalog as default_catalog


# ============================================================================
# Operation Definitions
# ============================================================================

class Operation(str, Enum):
    """Guarded operations on a project and its sub-resources."""

    PROJECT_VIEW = "project:view"
    PROJECT_EDIT = "project:edit"
    PROJECT_ARCHIVE = "project:archive"
    PROJECT_DELETE = "project:delete"

    CATEGORY_VIEW = "category:view"
    CATEGORY_EDIT = "category:edit"
    CATEGORY_DELETE = "category:delete"
    ENTRY_CREATE = "entry:create"

    COLLABORATOR_VIEW = "collaborator:view"
    COLLABORATOR_MANAGE = "collaborator:manage"


# Sentinel: any membership, regardless of permission level
ANY_MEMBERSHIP: Optional[FrozenSet[str]] = None

EDITORS = frozenset({PermissionName.OWNER, PermissionName.CAN_EDITED})
OWNERS = frozenset({PermissionName.OWNER})


# ============================================================================
# Operation to Permission Mapping
# ============================================================================

OPERATION_PERMISSIONS: Dict[Operation, Optional[FrozenSet[str]]] = {
    Operation.PROJECT_VIEW: ANY_MEMBERSHIP,
    Operation.PROJECT_EDIT: EDITORS,
    Operation.PROJECT_ARCHIVE: EDITORS,
    Operation.PROJECT_DELETE: OWNERS,

    Operation.CATEGORY_VIEW: ANY_MEMBERSHIP,
    Operation.CATEGORY_EDIT: EDITORS,
    Operation.CATEGORY_DELETE: OWNERS,
    Operation.ENTRY_CREATE: EDITORS,

    Operation.COLLABORATOR_VIEW: ANY_MEMBERSHIP,
    Operation.COLLABORATOR_MANAGE: OWNERS,
}

DENIAL_MESSAGES: Dict[Operation, str] = {
    Operation.PROJECT_EDIT: "You do not have permission to edit project",
    Operation.PROJECT_ARCHIVE: "You do not have permission to archive project",
    Operation.PROJECT_DELETE: "You do not have permission to delete project",
    Operation.CATEGORY_EDIT: "You do not have permission to edit category",
    Operation.CATEGORY_DELETE: "You do not have permission to delete category",
    Operation.ENTRY_CREATE: "You do not have permission to create entry",
    Operation.COLLABORATOR_MANAGE: "You do not have permission to manage collaborators",
}

NO_ACCESS_MESSAGE = "You do not have permission to access this project"


# ============================================================================
# Decision
# ============================================================================

def authorize(
    membership: Optional[Mapping[str, Any]],
    allowed_names: Optional[FrozenSet[str]],
    permissions: PermissionCatalog = default_catalog,
) -> bool:
    """
    Decide whether a membership satisfies an allowed-permission set.

    Args:
        membership: Collaborator document, or None when the caller has none
        allowed_names: Acceptable permission names, or ANY_MEMBERSHIP
        permissions: Catalog used to resolve names to permission ids

    Returns:
        True if allowed, False otherwise.
    """
    if membership is None:
        return False
    if allowed_names is ANY_MEMBERSHIP:
        return True
    return membership.get("permissionId") in permissions.ids_for(allowed_names)


def require_permission(
    membership: Optional[Mapping[str, Any]],
    operation: Operation,
    permissions: PermissionCatalog = default_catalog,
) -> Mapping[str, Any]:
    """
    Enforce the table entry for operation.

    Returns:
        The membership, for chaining into the mutation gate

    Raises:
        PermissionDeniedError: If there is no membership or its level is not allowed
    """
    if membership is None:
        raise PermissionDeniedError(NO_ACCESS_MESSAGE)

    if not authorize(membership, OPERATION_PERMISSIONS[operation], permissions):
        raise PermissionDeniedError(DENIAL_MESSAGES.get(operation, NO_ACCESS_MESSAGE))

    return membership


def allowed_operations(
    membership: Optional[Mapping[str, Any]],
    permissions: PermissionCatalog = default_catalog,
) -> FrozenSet[Operation]:
    """Every operation the membership may perform (used by tests and UIs)."""
    return frozenset(
        op for op, names in OPERATION_PERMISSIONS.items()
        if authorize(membership, names, permissions)
    )
