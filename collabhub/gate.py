"""
collabhub/gate.py

Mutation gate for project-scoped writes.

Sequence:
1. validate the project identity
2. resolve the caller's membership
3. enforce the operation's entry in the access table
4. confirm the project is live (not soft-deleted)
5. open a transaction, re-read the membership keyed on the permission id seen
   in step 3 and the project liveness, then hand the session to the caller's write

Step 5 means a membership revoked or downgraded after authorization denies the
write instead of letting a stale decision through. On deployments without
transactions the re-check still runs immediately before the write.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, Generator, Mapping, Optional

from pymongo.client_session import ClientSession
from pymongo.database import Database

try:
    from collabhub.config import IS_DEV
    from collabhub.db import COLLABORATORS, PROJECTS, now_utc, parse_object_id, transaction
    from collabhub.errors import NotFoundError, PermissionDeniedError
    from collabhub.membership import resolve_membership
    from collabhub.rbac import NO_ACCESS_MESSAGE, Operation, require_permission
except ModuleNotFoundError:
    from config import IS_DEV
    from db import COLLABORATORS, PROJECTS, now_utc, parse_object_id, transaction
    from errors import NotFoundError, PermissionDeniedError
    from membership import resolve_membership
    from rbac import NO_ACCESS_MESSAGE, Operation, require_permission


def authorize_project(
    db: Database,
    user_id: Any,
    project_id: Any,
    operation: Operation,
) -> Dict[str, Any]:
    """
    Resolve the caller's membership on a project and enforce operation.

    Returns:
        The membership document

    Raises:
        ValidationError: Malformed user or project id
        PermissionDeniedError: No membership, or level not allowed
        NotFoundError: Project is deleted or missing
    """
    membership = resolve_membership(db, user_id, project_id)
    require_permission(membership, operation)
    _require_live_project(db, membership["projectId"])

    if IS_DEV:
        print(f"[GATE] Granted {operation.value}: user_id={user_id}, project_id={project_id}")

    return membership  # type: ignore[return-value]


def _require_live_project(db: Database, project_oid: Any, session: Optional[ClientSession] = None) -> None:
    if not db[PROJECTS].find_one({"_id": project_oid, "isDeleted": False}, {"_id": 1}, session=session):
        raise NotFoundError("Project not found")


@contextmanager
def guarded_write(
    db: Database,
    membership: Mapping[str, Any],
) -> Generator[Optional[ClientSession], None, None]:
    """
    Open the write unit for an authorized membership.

    Yields the transaction session (or None) to pass as session= on writes.

    Raises:
        PermissionDeniedError: If the membership changed since authorization
        NotFoundError: If the project was deleted since authorization
    """
    with transaction(db) as session:
        current = db[COLLABORATORS].find_one(
            {"_id": membership["_id"], "permissionId": membership["permissionId"]},
            session=session,
        )
        if current is None:
            print(f"[GATE] Membership changed before write: membership_id={membership['_id']}")
            raise PermissionDeniedError(NO_ACCESS_MESSAGE)
        _require_live_project(db, membership["projectId"], session)
        yield session


def audit_stamp(user_id: Any) -> Dict[str, Any]:
    """Audit fields applied on every edit; callers merge these last."""
    return {"editedAt": now_utc(), "editedBy": parse_object_id(user_id, "userId")}
