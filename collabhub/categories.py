"""
collabhub/categories.py

Category and entry operations. Every call is scoped through the category's
project and goes through the same access table as project operations.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Tuple

from pymongo.database import Database

try:
    from collabhub.auth_context import AuthContext
    from collabhub.config import IS_DEV
    from collabhub.db import CATEGORIES, ENTRIES, now_utc, parse_object_id
    from collabhub.errors import NotFoundError, ValidationError
    from collabhub.gate import audit_stamp, authorize_project, guarded_write
    from collabhub.rbac import Operation
    from collabhub.schemas import CategoryView, MainAttributeValue
    from collabhub.views import category_view, main_attribute_values, project_entries
except ModuleNotFoundError:
    from auth_context import AuthContext
    from config import IS_DEV
    from db import CATEGORIES, ENTRIES, now_utc, parse_object_id
    from errors import NotFoundError, ValidationError
    from gate import audit_stamp, authorize_project, guarded_write
    from rbac import Operation
    from schemas import CategoryView, MainAttributeValue
    from views import category_view, main_attribute_values, project_entries


def _load_category(db: Database, category_id: Any) -> Dict[str, Any]:
    category_oid = parse_object_id(category_id, "categoryId")
    category = db[CATEGORIES].find_one({"_id": category_oid, "isDeleted": False})
    if not category:
        raise NotFoundError("Category not found")
    return category


def _authorized_category(
    db: Database, ctx: AuthContext, category_id: Any, operation: Operation
) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    category = _load_category(db, category_id)
    membership = authorize_project(db, ctx.user_id, category["projectId"], operation)
    return category, membership


def get_category(db: Database, ctx: AuthContext, category_id: Any) -> CategoryView:
    category, _ = _authorized_category(db, ctx, category_id, Operation.CATEGORY_VIEW)
    return category_view(db, category)


def get_main_attribute_values(db: Database, ctx: AuthContext, category_id: Any) -> List[MainAttributeValue]:
    category, _ = _authorized_category(db, ctx, category_id, Operation.CATEGORY_VIEW)
    return main_attribute_values(db, category)


def get_project_entries(db: Database, ctx: AuthContext, project_id: Any) -> List[CategoryView]:
    project_oid = parse_object_id(project_id, "projectId")
    authorize_project(db, ctx.user_id, project_oid, Operation.CATEGORY_VIEW)
    return project_entries(db, project_oid)


def create_entry(db: Database, ctx: AuthContext, category_id: Any, data: Mapping[str, Any]):
    """
    Add an entry to a category (owner, can_edited).

    Raises:
        ValidationError: data has keys outside the category attributes, or
            the main attribute is missing
    """
    category, membership = _authorized_category(db, ctx, category_id, Operation.ENTRY_CREATE)

    attributes = set(category.get("attributes", []))
    unknown = sorted(set(data) - attributes)
    if unknown:
        raise ValidationError(f"Unknown attribute(s): {', '.join(unknown)}")

    main_attribute = category.get("mainAttribute")
    if main_attribute and data.get(main_attribute) in (None, ""):
        raise ValidationError(f"Missing value for {main_attribute}")

    actor_oid = parse_object_id(ctx.user_id, "userId")
    now = now_utc()
    with guarded_write(db, membership) as session:
        result = db[ENTRIES].insert_one(
            {
                "categoryId": category["_id"],
                "projectId": category["projectId"],
                "data": dict(data),
                "createdAt": now,
                "createdBy": actor_oid,
                "editedAt": now,
                "editedBy": actor_oid,
            },
            session=session,
        )

    if IS_DEV:
        print(f"[CATEGORY] Created entry_id={result.inserted_id} in category_id={category['_id']}")
    return result.inserted_id


def edit_category(db: Database, ctx: AuthContext, category_id: Any, changes: Mapping[str, Any]) -> None:
    """
    Rename a category or change its attributes (owner, can_edited).

    Raises:
        ValidationError: Resulting mainAttribute is not one of the attributes
    """
    category, membership = _authorized_category(db, ctx, category_id, Operation.CATEGORY_EDIT)

    fields: Dict[str, Any] = {}
    if changes.get("name") is not None:
        fields["name"] = changes["name"]
    if changes.get("attributes") is not None:
        attributes = [str(a).strip() for a in changes["attributes"] if str(a).strip()]
        if len(set(attributes)) != len(attributes):
            raise ValidationError("Duplicate attribute names")
        fields["attributes"] = attributes
    if changes.get("mainAttribute") is not None:
        fields["mainAttribute"] = changes["mainAttribute"]

    attributes = fields.get("attributes", category.get("attributes", []))
    main_attribute = fields.get("mainAttribute", category.get("mainAttribute"))
    if main_attribute is not None and main_attribute not in attributes:
        raise ValidationError("mainAttribute must be one of the category attributes")

    with guarded_write(db, membership) as session:
        db[CATEGORIES].update_one(
            {"_id": category["_id"], "isDeleted": False},
            {"$set": {**fields, **audit_stamp(ctx.user_id)}},
            session=session,
        )

    if IS_DEV:
        print(f"[CATEGORY] Edited category_id={category['_id']} fields={sorted(fields)}")


def delete_category(db: Database, ctx: AuthContext, category_id: Any) -> None:
    """Soft-delete a category (owner only); its entries are kept."""
    category, membership = _authorized_category(db, ctx, category_id, Operation.CATEGORY_DELETE)

    with guarded_write(db, membership) as session:
        db[CATEGORIES].update_one(
            {"_id": category["_id"]},
            {"$set": {"isDeleted": True, **audit_stamp(ctx.user_id)}},
            session=session,
        )

    print(f"[CATEGORY] Deleted category_id={category['_id']} by user_id={ctx.user_id}")
