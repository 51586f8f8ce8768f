"""
collabhub/projects.py

Project lifecycle operations behind the mutation gate.

State machine:
    active <-> archived      (owner, can_edited)
    active|archived -> deleted   (owner, one-way)

Writes filter on isDeleted=False, so a deleted project admits no further
transition through this API.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping

from bson import ObjectId
from pymongo.database import Database
from pymongo.errors import PyMongoError

try:
    from collabhub.auth_context import AuthContext
    from collabhub.config import IS_DEV
    from collabhub.db import (
        CATEGORIES,
        COLLABORATORS,
        LOCATIONS,
        PROJECTS,
        TEMPLATES,
        now_utc,
        parse_object_id,
        transaction,
    )
    from collabhub.errors import ConflictError, NotFoundError, ValidationError
    from collabhub.gate import audit_stamp, authorize_project, guarded_write
    from collabhub.permissions import PermissionName, catalog
    from collabhub.rbac import Operation
except ModuleNotFoundError:
    from auth_context import AuthContext
    from config import IS_DEV
    from db import CATEGORIES, COLLABORATORS, LOCATIONS, PROJECTS, TEMPLATES, now_utc, parse_object_id, transaction
    from errors import ConflictError, NotFoundError, ValidationError
    from gate import audit_stamp, authorize_project, guarded_write
    from permissions import PermissionName, catalog
    from rbac import Operation


# Fields a caller may change through the generic edit endpoint
EDITABLE_FIELDS = ("name", "description", "location", "startedAt", "endedAt")

# Editable fields a caller may clear with an explicit null
NULLABLE_FIELDS = ("description", "endedAt")


# ============================================================================
# Create
# ============================================================================

def _template_categories(template: Mapping[str, Any], project_oid: ObjectId, user_oid: ObjectId) -> List[Dict[str, Any]]:
    now = now_utc()
    docs = []
    for item in template.get("categories", []):
        attributes = list(item.get("attributes", []))
        docs.append({
            "projectId": project_oid,
            "name": item.get("name", ""),
            "mainAttribute": item.get("mainAttribute") or (attributes[0] if attributes else None),
            "attributes": attributes,
            "isDeleted": False,
            "createdAt": now,
            "editedAt": now,
            "editedBy": user_oid,
        })
    return docs


def _discard_project(db: Database, project_oid: ObjectId) -> None:
    """Compensating cleanup for a partially created project."""
    db[CATEGORIES].delete_many({"projectId": project_oid})
    db[COLLABORATORS].delete_many({"projectId": project_oid})
    db[PROJECTS].delete_one({"_id": project_oid})
    print(f"[PROJECTS] Rolled back partial create: project_id={project_oid}")


def create_project(db: Database, ctx: AuthContext, payload: Mapping[str, Any]) -> ObjectId:
    """
    Create a project together with its owner membership and template categories.

    The three inserts form one unit: inside a transaction when enabled, and in
    every mode a failure removes whatever was written for the new project id.

    Args:
        payload: name, template, location, and optional description/startedAt/endedAt

    Returns:
        The new project id

    Raises:
        ValidationError: Missing name or malformed template/location reference
        NotFoundError: Template or location does not exist
        ConflictError: The unit could not be written completely
    """
    name = (payload.get("name") or "").strip()
    if not name or not payload.get("template") or not payload.get("location"):
        raise ValidationError("Please input all required input for creating new project.")

    user_oid = parse_object_id(ctx.user_id, "userId")
    template_oid = parse_object_id(payload["template"], "template")
    location_oid = parse_object_id(payload["location"], "location")

    template = db[TEMPLATES].find_one({"_id": template_oid})
    if not template:
        raise NotFoundError("Template not found")

    if not db[LOCATIONS].find_one({"_id": location_oid}, {"_id": 1}):
        raise NotFoundError("Location not found")

    owner_permission_id = catalog.id_for(PermissionName.OWNER)

    now = now_utc()
    project_oid = ObjectId()
    project_doc = {
        "_id": project_oid,
        "name": name,
        "description": payload.get("description"),
        "owner": user_oid,
        "template": template_oid,
        "location": location_oid,
        "startedAt": payload.get("startedAt") or now,
        "endedAt": payload.get("endedAt"),
        "createdAt": now,
        "editedAt": now,
        "editedBy": user_oid,
        "isArchived": False,
        "isDeleted": False,
    }
    owner_membership = {
        "userId": user_oid,
        "projectId": project_oid,
        "permissionId": owner_permission_id,
        "createdAt": now,
        "createdBy": user_oid,
        "editedAt": now,
        "editedBy": user_oid,
    }
    categories = _template_categories(template, project_oid, user_oid)

    try:
        with transaction(db) as session:
            db[PROJECTS].insert_one(project_doc, session=session)
            db[COLLABORATORS].insert_one(owner_membership, session=session)
            if categories:
                db[CATEGORIES].insert_many(categories, session=session)
    except PyMongoError as e:
        print(f"[PROJECTS] Create failed for user_id={ctx.user_id}: {type(e).__name__}: {e}")
        _discard_project(db, project_oid)
        raise ConflictError("Project could not be created") from e

    if IS_DEV:
        print(f"[PROJECTS] Created project_id={project_oid}, owner={ctx.user_id}, categories={len(categories)}")

    return project_oid


# ============================================================================
# Guarded updates
# ============================================================================

def _apply_update(db: Database, membership: Mapping[str, Any], project_oid: ObjectId, fields: Dict[str, Any]) -> None:
    with guarded_write(db, membership) as session:
        result = db[PROJECTS].update_one(
            {"_id": project_oid, "isDeleted": False},
            {"$set": fields},
            session=session,
        )
    if result.matched_count == 0:
        raise NotFoundError("Project not found")


def set_archived(db: Database, ctx: AuthContext, project_id: Any, is_archived: bool) -> None:
    """Archive or unarchive a project (owner, can_edited)."""
    project_oid = parse_object_id(project_id, "projectId")
    membership = authorize_project(db, ctx.user_id, project_oid, Operation.PROJECT_ARCHIVE)

    _apply_update(db, membership, project_oid, {"isArchived": bool(is_archived), **audit_stamp(ctx.user_id)})

    if IS_DEV:
        print(f"[PROJECTS] project_id={project_oid} isArchived={bool(is_archived)} by user_id={ctx.user_id}")


def set_deleted(db: Database, ctx: AuthContext, project_id: Any, is_deleted: bool) -> None:
    """
    Soft-delete a project (owner only). Deletion cannot be undone.

    Raises:
        ValidationError: is_deleted is not True, or malformed project id
    """
    project_oid = parse_object_id(project_id, "projectId")
    if is_deleted is not True:
        raise ValidationError("Deleted projects cannot be restored")

    membership = authorize_project(db, ctx.user_id, project_oid, Operation.PROJECT_DELETE)

    _apply_update(db, membership, project_oid, {"isDeleted": True, **audit_stamp(ctx.user_id)})

    print(f"[PROJECTS] Deleted project_id={project_oid} by user_id={ctx.user_id}")


def edit_project(db: Database, ctx: AuthContext, project_id: Any, changes: Mapping[str, Any]) -> None:
    """
    Apply a partial edit (owner, can_edited).

    Only EDITABLE_FIELDS are taken from changes. An explicit null clears a
    NULLABLE_FIELDS entry and is ignored for the others. The editedAt/editedBy stamp is
    merged after the caller's fields, so the audit trail cannot be forged.

    Raises:
        ValidationError: Malformed id, empty name, or malformed location reference
        NotFoundError: Project deleted/missing or location does not exist
    """
    project_oid = parse_object_id(project_id, "projectId")
    membership = authorize_project(db, ctx.user_id, project_oid, Operation.PROJECT_EDIT)

    fields: Dict[str, Any] = {
        k: changes[k]
        for k in EDITABLE_FIELDS
        if k in changes and (changes[k] is not None or k in NULLABLE_FIELDS)
    }

    if "name" in fields:
        fields["name"] = str(fields["name"]).strip()
        if not fields["name"]:
            raise ValidationError("Project name must not be empty")

    if "location" in fields:
        fields["location"] = parse_object_id(fields["location"], "location")
        if not db[LOCATIONS].find_one({"_id": fields["location"]}, {"_id": 1}):
            raise NotFoundError("Location not found")

    update = {**fields, **audit_stamp(ctx.user_id)}
    _apply_update(db, membership, project_oid, update)

    if IS_DEV:
        print(f"[PROJECTS] Edited project_id={project_oid} fields={sorted(fields)} by user_id={ctx.user_id}")
