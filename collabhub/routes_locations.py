"""
collabhub/routes_locations.py

Location reference data endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from pymongo.database import Database

try:
    from collabhub import locations
    from collabhub.auth_context import AuthContext, require_auth_context
    from collabhub.db import get_db
    from collabhub.schemas import Envelope, LocationCreateRequest
except ModuleNotFoundError:
    import locations
    from auth_context import AuthContext, require_auth_context
    from db import get_db
    from schemas import Envelope, LocationCreateRequest


router = APIRouter(
    prefix="/locations",
    tags=["locations"],
)


@router.post("", response_model=Envelope, status_code=status.HTTP_201_CREATED)
def create_location(
    request: LocationCreateRequest,
    ctx: AuthContext = Depends(require_auth_context),
    db: Database = Depends(get_db),
) -> Envelope:
    location_id = locations.create_location(db, request.name, request.th_name)
    return Envelope(data={"id": str(location_id)})


@router.get("", response_model=Envelope)
def get_locations(
    ctx: AuthContext = Depends(require_auth_context),
    db: Database = Depends(get_db),
) -> Envelope:
    rows = locations.list_locations(db)
    return Envelope(data=[r.model_dump() for r in rows])
