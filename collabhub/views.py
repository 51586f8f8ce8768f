"""
collabhub/views.py

View assembler: read-only projections built with aggregation joins.

Project views join collaborator -> project -> owner -> location starting from
the caller's memberships, so a project only ever appears to its members.
Category views are scoped through the category's project the same way.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Any, Dict, List, Optional

from pymongo.database import Database

try:
    from collabhub.db import (
        CATEGORIES,
        COLLABORATORS,
        ENTRIES,
        LOCATIONS,
        PROJECTS,
        USERS,
        parse_object_id,
        stringify_id,
    )
    from collabhub.errors import PermissionDeniedError, ValidationError
    from collabhub.rbac import NO_ACCESS_MESSAGE
    from collabhub.schemas import CategoryView, EntryView, MainAttributeValue, ProjectDetail, ProjectSummary
except ModuleNotFoundError:
    from db import CATEGORIES, COLLABORATORS, ENTRIES, LOCATIONS, PROJECTS, USERS, parse_object_id, stringify_id
    from errors import PermissionDeniedError, ValidationError
    from rbac import NO_ACCESS_MESSAGE
    from schemas import CategoryView, EntryView, MainAttributeValue, ProjectDetail, ProjectSummary


# ============================================================================
# Sorting
# ============================================================================

class SortBy(str, Enum):
    ASCENDING = "ascending"
    DESCENDING = "descending"
    NEWEST = "newest"
    OLDEST = "oldest"


SORT_STAGES: Dict[SortBy, Dict[str, int]] = {
    SortBy.ASCENDING: {"name": 1},
    SortBy.DESCENDING: {"name": -1},
    SortBy.NEWEST: {"createdAt": -1},
    SortBy.OLDEST: {"createdAt": 1},
}

DEFAULT_SORT = SortBy.NEWEST


def parse_sort(value: Optional[str]) -> SortBy:
    """
    Map a sortBy query value onto the closed set of sort keys.

    Raises:
        ValidationError: If value is not one of ascending/descending/newest/oldest
    """
    if value is None or value == "":
        return DEFAULT_SORT
    try:
        return SortBy(value)
    except ValueError:
        raise ValidationError("Wrong sortBy query")


def name_filter(search_query: Optional[str]) -> Optional[Dict[str, Any]]:
    """Case-insensitive literal substring match on project name."""
    if not search_query:
        return None
    return {"$regex": re.escape(search_query), "$options": "i"}


# ============================================================================
# Project projections
# ============================================================================

def _project_join_stages() -> List[Dict[str, Any]]:
    # Input documents: {_id: projectId}
    return [
        {"$lookup": {"from": PROJECTS, "localField": "_id", "foreignField": "_id", "as": "project"}},
        {"$unwind": "$project"},
    ]


def _owner_location_stages() -> List[Dict[str, Any]]:
    return [
        {"$lookup": {"from": USERS, "localField": "project.owner", "foreignField": "_id", "as": "owner"}},
        {"$unwind": "$owner"},
        {"$lookup": {"from": LOCATIONS, "localField": "project.location", "foreignField": "_id", "as": "location"}},
        {"$unwind": "$location"},
    ]


def build_project_list_pipeline(
    user_id: Any,
    search_query: Optional[str] = None,
    sort_by: SortBy = DEFAULT_SORT,
) -> List[Dict[str, Any]]:
    user_oid = parse_object_id(user_id, "userId")

    match: Dict[str, Any] = {
        "project.isDeleted": False,
        "project.isArchived": False,
    }
    name_match = name_filter(search_query)
    if name_match:
        match["project.name"] = name_match

    return [
        {"$match": {"userId": user_oid}},
        {"$group": {"_id": "$projectId"}},
        *_project_join_stages(),
        {"$match": match},
        *_owner_location_stages(),
        {
            "$project": {
                "_id": 0,
                "id": "$project._id",
                "name": "$project.name",
                "ownerName": "$owner.name",
                "locationName": "$location.th_name",
                "startedAt": "$project.startedAt",
                "createdAt": "$project.createdAt",
            }
        },
        {"$sort": SORT_STAGES[sort_by]},
        {"$project": {"createdAt": 0}},
    ]


def list_projects(
    db: Database,
    user_id: Any,
    search_query: Optional[str] = None,
    sort_by: Optional[str] = None,
) -> List[ProjectSummary]:
    """
    Projects the caller collaborates on, hiding archived and deleted ones.

    Raises:
        ValidationError: Malformed user id or unknown sort key
    """
    sort_key = parse_sort(sort_by)
    pipeline = build_project_list_pipeline(user_id, search_query, sort_key)
    rows = db[COLLABORATORS].aggregate(pipeline)
    return [
        ProjectSummary(
            id=stringify_id(row["id"]),
            name=row.get("name", ""),
            ownerName=row.get("ownerName"),
            locationName=row.get("locationName"),
            startedAt=row.get("startedAt"),
        )
        for row in rows
    ]


def get_project_detail(db: Database, user_id: Any, project_id: Any) -> ProjectDetail:
    """
    Detail of one project, visible to any member.

    Archived projects stay visible here; deleted ones do not. A non-member and
    a nonexistent project produce the same denial so existence is not leaked.

    Raises:
        ValidationError: Malformed user or project id
        PermissionDeniedError: Caller has no membership or the project is gone
    """
    user_oid = parse_object_id(user_id, "userId")
    project_oid = parse_object_id(project_id, "projectId")

    pipeline = [
        {"$match": {"userId": user_oid, "projectId": project_oid}},
        {"$group": {"_id": "$projectId"}},
        *_project_join_stages(),
        {"$match": {"project.isDeleted": False}},
        *_owner_location_stages(),
        {
            "$project": {
                "_id": 0,
                "name": "$project.name",
                "description": "$project.description",
                "ownerName": "$owner.name",
                "locationName": "$location.th_name",
                "startedAt": "$project.startedAt",
                "endedAt": "$project.endedAt",
                "isArchived": "$project.isArchived",
            }
        },
    ]
    rows = list(db[COLLABORATORS].aggregate(pipeline))
    if not rows:
        raise PermissionDeniedError(NO_ACCESS_MESSAGE)

    row = rows[0]
    return ProjectDetail(
        name=row.get("name", ""),
        description=row.get("description"),
        ownerName=row.get("ownerName"),
        locationName=row.get("locationName"),
        startedAt=row.get("startedAt"),
        endedAt=row.get("endedAt"),
        isArchived=bool(row.get("isArchived", False)),
    )


# ============================================================================
# Category projections
# ============================================================================

def entry_view(doc: Dict[str, Any]) -> EntryView:
    return EntryView(id=stringify_id(doc["_id"]), data=doc.get("data", {}), createdAt=doc.get("createdAt"))


def category_view(db: Database, category: Dict[str, Any]) -> CategoryView:
    entries = db[ENTRIES].find({"categoryId": category["_id"]}).sort("createdAt", 1)
    return CategoryView(
        id=stringify_id(category["_id"]),
        name=category.get("name", ""),
        mainAttribute=category.get("mainAttribute"),
        attributes=list(category.get("attributes", [])),
        entries=[entry_view(e) for e in entries],
    )


def main_attribute_values(db: Database, category: Dict[str, Any]) -> List[MainAttributeValue]:
    """Value of the category's main attribute for each of its entries."""
    main_attribute = category.get("mainAttribute")
    entries = db[ENTRIES].find({"categoryId": category["_id"]}).sort("createdAt", 1)
    return [
        MainAttributeValue(id=stringify_id(e["_id"]), value=e.get("data", {}).get(main_attribute))
        for e in entries
    ]


def project_entries(db: Database, project_oid: Any) -> List[CategoryView]:
    """Every live category of a project with its entries, in creation order."""
    categories = db[CATEGORIES].find({"projectId": project_oid, "isDeleted": False}).sort("createdAt", 1)
    return [category_view(db, c) for c in categories]
