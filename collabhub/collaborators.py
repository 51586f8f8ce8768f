"""
collabhub/collaborators.py

Collaborator (membership) management for a project.

Only the owner manages memberships. The owner membership itself is created
with the project and cannot be granted, changed or revoked here, so every
live project keeps exactly one owner.
"""

from __future__ import annotations

from typing import Any, List

from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

try:
    from collabhub.auth_context import AuthContext
    from collabhub.config import IS_DEV
    from collabhub.db import COLLABORATORS, USERS, now_utc, parse_object_id, stringify_id
    from collabhub.errors import ConflictError, NotFoundError, ValidationError
    from collabhub.gate import audit_stamp, authorize_project, guarded_write
    from collabhub.permissions import PermissionName, catalog
    from collabhub.rbac import Operation
    from collabhub.schemas import CollaboratorView
except ModuleNotFoundError:
    from auth_context import AuthContext
    from config import IS_DEV
    from db import COLLABORATORS, USERS, now_utc, parse_object_id, stringify_id
    from errors import ConflictError, NotFoundError, ValidationError
    from gate import audit_stamp, authorize_project, guarded_write
    from permissions import PermissionName, catalog
    from rbac import Operation
    from schemas import CollaboratorView


def _grantable_permission_id(permission: str):
    if permission == PermissionName.OWNER:
        raise ValidationError("Owner permission cannot be granted")
    if permission not in catalog.names():
        raise ValidationError(f"Unknown permission: {permission}")
    return catalog.id_for(permission)


def add_collaborator(db: Database, ctx: AuthContext, project_id: Any, user_id: Any, permission: str) -> None:
    """
    Add a user to a project with a non-owner permission level.

    Raises:
        ValidationError: Malformed ids, unknown or owner permission
        PermissionDeniedError: Caller is not the owner
        NotFoundError: Project or user does not exist
        ConflictError: The user already collaborates on the project
    """
    project_oid = parse_object_id(project_id, "projectId")
    target_oid = parse_object_id(user_id, "userId")
    permission_id = _grantable_permission_id(permission)

    membership = authorize_project(db, ctx.user_id, project_oid, Operation.COLLABORATOR_MANAGE)

    if not db[USERS].find_one({"_id": target_oid}, {"_id": 1}):
        raise NotFoundError("User not found")

    actor_oid = parse_object_id(ctx.user_id, "userId")
    now = now_utc()
    try:
        with guarded_write(db, membership) as session:
            db[COLLABORATORS].insert_one(
                {
                    "userId": target_oid,
                    "projectId": project_oid,
                    "permissionId": permission_id,
                    "createdAt": now,
                    "createdBy": actor_oid,
                    "editedAt": now,
                    "editedBy": actor_oid,
                },
                session=session,
            )
    except DuplicateKeyError:
        raise ConflictError("User is already a collaborator on this project")

    if IS_DEV:
        print(f"[COLLAB] Added user_id={target_oid} as {permission} on project_id={project_oid}")


def list_collaborators(db: Database, ctx: AuthContext, project_id: Any) -> List[CollaboratorView]:
    """Members of a project with their permission names (any member may read)."""
    project_oid = parse_object_id(project_id, "projectId")
    authorize_project(db, ctx.user_id, project_oid, Operation.COLLABORATOR_VIEW)

    rows = db[COLLABORATORS].aggregate([
        {"$match": {"projectId": project_oid}},
        {"$lookup": {"from": USERS, "localField": "userId", "foreignField": "_id", "as": "user"}},
        {"$unwind": "$user"},
        {"$sort": {"createdAt": 1}},
        {"$project": {"_id": 0, "userId": 1, "permissionId": 1, "name": "$user.name"}},
    ])
    return [
        CollaboratorView(
            userId=stringify_id(row["userId"]),
            name=row.get("name"),
            permission=catalog.name_for(row.get("permissionId")),
        )
        for row in rows
    ]


def _target_membership(db: Database, project_oid, user_id: Any):
    target_oid = parse_object_id(user_id, "userId")
    target = db[COLLABORATORS].find_one({"userId": target_oid, "projectId": project_oid})
    if not target:
        raise NotFoundError("Collaborator not found")
    if target["permissionId"] == catalog.id_for(PermissionName.OWNER):
        raise ValidationError("The project owner membership cannot be changed")
    return target


def change_permission(db: Database, ctx: AuthContext, project_id: Any, user_id: Any, permission: str) -> None:
    """Move a collaborator to another non-owner permission level (owner only)."""
    project_oid = parse_object_id(project_id, "projectId")
    permission_id = _grantable_permission_id(permission)
    membership = authorize_project(db, ctx.user_id, project_oid, Operation.COLLABORATOR_MANAGE)
    target = _target_membership(db, project_oid, user_id)

    with guarded_write(db, membership) as session:
        db[COLLABORATORS].update_one(
            {"_id": target["_id"]},
            {"$set": {"permissionId": permission_id, **audit_stamp(ctx.user_id)}},
            session=session,
        )

    if IS_DEV:
        print(f"[COLLAB] Changed user_id={target['userId']} to {permission} on project_id={project_oid}")


def revoke_collaborator(db: Database, ctx: AuthContext, project_id: Any, user_id: Any) -> None:
    """Remove a collaborator from a project (owner only)."""
    project_oid = parse_object_id(project_id, "projectId")
    membership = authorize_project(db, ctx.user_id, project_oid, Operation.COLLABORATOR_MANAGE)
    target = _target_membership(db, project_oid, user_id)

    with guarded_write(db, membership) as session:
        db[COLLABORATORS].delete_one({"_id": target["_id"]}, session=session)

    print(f"[COLLAB] Revoked user_id={target['userId']} from project_id={project_oid}")
