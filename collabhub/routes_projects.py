"""
collabhub/routes_projects.py

Project and collaborator endpoints.

Security guarantees:
- All endpoints require authentication (require_auth_context)
- Project-scoped endpoints resolve the caller's membership before acting
- Permission thresholds come from the access table in rbac.py only
- The acting user comes from the auth context, never from the body
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from pymongo.database import Database

try:
    from collabhub import collaborators, projects, views
    from collabhub.auth_context import AuthContext, require_auth_context
    from collabhub.db import get_db
    from collabhub.schemas import (
        CollaboratorCreateRequest,
        CollaboratorUpdateRequest,
        Envelope,
        ProjectArchiveRequest,
        ProjectCreateRequest,
        ProjectDeleteRequest,
        ProjectEditRequest,
    )
except ModuleNotFoundError:
    import collaborators
    import projects
    import views
    from auth_context import AuthContext, require_auth_context
    from db import get_db
    from schemas import (
        CollaboratorCreateRequest,
        CollaboratorUpdateRequest,
        Envelope,
        ProjectArchiveRequest,
        ProjectCreateRequest,
        ProjectDeleteRequest,
        ProjectEditRequest,
    )


router = APIRouter(
    prefix="/projects",
    tags=["projects"],
)


@router.get("", response_model=Envelope)
def list_projects(
    search_query: Optional[str] = Query(None, alias="searchQuery", max_length=200),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    ctx: AuthContext = Depends(require_auth_context),
    db: Database = Depends(get_db),
) -> Envelope:
    """
    List active projects the caller collaborates on.

    Query:
        searchQuery: case-insensitive substring of the project name
        sortBy: ascending | descending | newest | oldest (default newest)

    Raises:
        400: Unknown sortBy
    """
    rows = views.list_projects(db, ctx.user_id, search_query, sort_by)
    return Envelope(data=[r.model_dump() for r in rows])


@router.post("", status_code=status.HTTP_201_CREATED)
def create_project(
    request: ProjectCreateRequest,
    ctx: AuthContext = Depends(require_auth_context),
    db: Database = Depends(get_db),
) -> Response:
    """
    Create a project; the caller becomes its owner.

    Raises:
        400: Missing fields or malformed template/location id
        404: Template or location does not exist
        409: Project could not be written completely
    """
    projects.create_project(db, ctx, request.model_dump())
    return Response(status_code=status.HTTP_201_CREATED)


@router.get("/{project_id}", response_model=Envelope)
def get_project(
    project_id: str,
    ctx: AuthContext = Depends(require_auth_context),
    db: Database = Depends(get_db),
) -> Envelope:
    """Project detail; any membership suffices (archived projects included)."""
    detail = views.get_project_detail(db, ctx.user_id, project_id)
    return Envelope(data=detail.model_dump())


@router.patch("/{project_id}/archived", status_code=status.HTTP_204_NO_CONTENT)
def archive_project(
    request: ProjectArchiveRequest,
    project_id: str,
    ctx: AuthContext = Depends(require_auth_context),
    db: Database = Depends(get_db),
) -> Response:
    projects.set_archived(db, ctx, project_id, request.isArchived)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/{project_id}/deleted", status_code=status.HTTP_204_NO_CONTENT)
def delete_project(
    request: ProjectDeleteRequest,
    project_id: str,
    ctx: AuthContext = Depends(require_auth_context),
    db: Database = Depends(get_db),
) -> Response:
    """Soft-delete (owner only). isDeleted=false is rejected: deletion is final."""
    projects.set_deleted(db, ctx, project_id, request.isDeleted)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
def edit_project(
    request: ProjectEditRequest,
    project_id: str,
    ctx: AuthContext = Depends(require_auth_context),
    db: Database = Depends(get_db),
) -> Response:
    projects.edit_project(db, ctx, project_id, request.model_dump(exclude_unset=True))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ---------------------------------------------------------
# Collaborators
# ---------------------------------------------------------
@router.post("/{project_id}/collaborator", status_code=status.HTTP_201_CREATED)
def create_collaborator(
    request: CollaboratorCreateRequest,
    project_id: str,
    ctx: AuthContext = Depends(require_auth_context),
    db: Database = Depends(get_db),
) -> Response:
    collaborators.add_collaborator(db, ctx, project_id, request.userId, request.permission)
    return Response(status_code=status.HTTP_201_CREATED)


@router.get("/{project_id}/collaborator", response_model=Envelope)
def get_collaborators(
    project_id: str,
    ctx: AuthContext = Depends(require_auth_context),
    db: Database = Depends(get_db),
) -> Envelope:
    rows = collaborators.list_collaborators(db, ctx, project_id)
    return Envelope(data=[r.model_dump() for r in rows])


@router.patch("/{project_id}/collaborator/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def update_collaborator(
    request: CollaboratorUpdateRequest,
    project_id: str,
    user_id: str,
    ctx: AuthContext = Depends(require_auth_context),
    db: Database = Depends(get_db),
) -> Response:
    collaborators.change_permission(db, ctx, project_id, user_id, request.permission)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{project_id}/collaborator/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_collaborator(
    project_id: str,
    user_id: str,
    ctx: AuthContext = Depends(require_auth_context),
    db: Database = Depends(get_db),
) -> Response:
    collaborators.revoke_collaborator(db, ctx, project_id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
