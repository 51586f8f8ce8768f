"""
collabhub/routes_categories.py

Category and entry endpoints. Access is resolved through the category's
project with the same access table as project endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status
from pymongo.database import Database

try:
    from collabhub import categories
    from collabhub.auth_context import AuthContext, require_auth_context
    from collabhub.db import get_db
    from collabhub.schemas import CategoryUpdateRequest, EntryCreateRequest, Envelope
except ModuleNotFoundError:
    import categories
    from auth_context import AuthContext, require_auth_context
    from db import get_db
    from schemas import CategoryUpdateRequest, EntryCreateRequest, Envelope


router = APIRouter(
    prefix="/categories",
    tags=["categories"],
)


@router.get("/{category_id}", response_model=Envelope)
def get_category_entry(
    category_id: str,
    ctx: AuthContext = Depends(require_auth_context),
    db: Database = Depends(get_db),
) -> Envelope:
    """Category with all of its entries (any membership)."""
    view = categories.get_category(db, ctx, category_id)
    return Envelope(data=view.model_dump())


@router.post("/{category_id}/entry", status_code=status.HTTP_201_CREATED)
def create_entry(
    request: EntryCreateRequest,
    category_id: str,
    ctx: AuthContext = Depends(require_auth_context),
    db: Database = Depends(get_db),
) -> Response:
    categories.create_entry(db, ctx, category_id, request.data)
    return Response(status_code=status.HTTP_201_CREATED)


@router.put("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def edit_category(
    request: CategoryUpdateRequest,
    category_id: str,
    ctx: AuthContext = Depends(require_auth_context),
    db: Database = Depends(get_db),
) -> Response:
    categories.edit_category(db, ctx, category_id, request.model_dump(exclude_unset=True))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(
    category_id: str,
    ctx: AuthContext = Depends(require_auth_context),
    db: Database = Depends(get_db),
) -> Response:
    categories.delete_category(db, ctx, category_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{category_id}/entry", response_model=Envelope)
def get_category_main_attribute(
    category_id: str,
    ctx: AuthContext = Depends(require_auth_context),
    db: Database = Depends(get_db),
) -> Envelope:
    """Main attribute value of every entry in the category."""
    rows = categories.get_main_attribute_values(db, ctx, category_id)
    return Envelope(data=[r.model_dump() for r in rows])


@router.get("/{project_id}/allEntry", response_model=Envelope)
def get_all_entry(
    project_id: str,
    ctx: AuthContext = Depends(require_auth_context),
    db: Database = Depends(get_db),
) -> Envelope:
    """Every live category of a project with its entries."""
    rows = categories.get_project_entries(db, ctx, project_id)
    return Envelope(data=[r.model_dump() for r in rows])
