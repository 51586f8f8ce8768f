"""
collabhub/membership.py

Membership resolver: finds the collaborator record linking a user to a project.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from bson import ObjectId
from pymongo.database import Database

try:
    from collabhub.db import COLLABORATORS, parse_object_id
except ModuleNotFoundError:
    from db import COLLABORATORS, parse_object_id


def resolve_membership(
    db: Database,
    user_id: Any,
    project_id: Any,
) -> Optional[Dict[str, Any]]:
    """
    Look up the unique membership joining user and project.

    Both identifiers are validated before the collection is touched.
    A missing membership is a normal "no access" result, not an error.

    Raises:
        ValidationError: If either identifier is not a well-formed ObjectId
    """
    user_oid: ObjectId = parse_object_id(user_id, "userId")
    project_oid: ObjectId = parse_object_id(project_id, "projectId")

    return db[COLLABORATORS].find_one({"userId": user_oid, "projectId": project_oid})
