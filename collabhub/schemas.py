"""
collabhub/schemas.py

Pydantic schemas for projects, collaborators, categories and locations.
Request schemas validate shape only; identity and existence checks happen in
the service layer so they surface as domain errors.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ========================================================================
# PROJECT SCHEMAS
# ========================================================================

class ProjectCreateRequest(BaseModel):
    """Request schema for creating a project.

    template and location are entity references (ObjectId hex strings).
    """
    name: str = Field(..., min_length=1, max_length=200)
    template: str = Field(..., description="Template id")
    location: str = Field(..., description="Location id")
    description: Optional[str] = Field(None, max_length=2000)
    startedAt: Optional[datetime] = None
    endedAt: Optional[datetime] = None

    @field_validator("name", mode="before")
    @classmethod
    def trim_name(cls, v):
        """Trim whitespace from name."""
        if isinstance(v, str):
            return v.strip()
        return v


class ProjectArchiveRequest(BaseModel):
    isArchived: bool


class ProjectDeleteRequest(BaseModel):
    # Deletion is one-way; False is accepted here and rejected by the service
    isDeleted: bool


class ProjectEditRequest(BaseModel):
    """Editable project fields.

    Unknown keys (including audit fields) are dropped.
    """
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    location: Optional[str] = None
    startedAt: Optional[datetime] = None
    endedAt: Optional[datetime] = None

    @field_validator("name", mode="before")
    @classmethod
    def trim_name(cls, v):
        """Trim whitespace from name."""
        if isinstance(v, str):
            return v.strip()
        return v


class ProjectSummary(BaseModel):
    """Row of the project list view."""
    id: str
    name: str
    ownerName: Optional[str] = None
    locationName: Optional[str] = None
    startedAt: Optional[datetime] = None


class ProjectDetail(BaseModel):
    name: str
    description: Optional[str] = None
    ownerName: Optional[str] = None
    locationName: Optional[str] = None
    startedAt: Optional[datetime] = None
    endedAt: Optional[datetime] = None
    isArchived: bool = False


# ========================================================================
# COLLABORATOR SCHEMAS
# ========================================================================

class CollaboratorCreateRequest(BaseModel):
    userId: str
    permission: str = Field(..., min_length=1, max_length=50)


class CollaboratorUpdateRequest(BaseModel):
    permission: str = Field(..., min_length=1, max_length=50)


class CollaboratorView(BaseModel):
    userId: str
    name: Optional[str] = None
    permission: Optional[str] = None


# ========================================================================
# CATEGORY / ENTRY SCHEMAS
# ========================================================================

class CategoryUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    mainAttribute: Optional[str] = Field(None, min_length=1, max_length=100)
    attributes: Optional[List[str]] = None

    @field_validator("name", mode="before")
    @classmethod
    def trim_name(cls, v):
        """Trim whitespace from name."""
        if isinstance(v, str):
            return v.strip()
        return v


class EntryCreateRequest(BaseModel):
    data: Dict[str, Any] = Field(default_factory=dict)


class EntryView(BaseModel):
    id: str
    data: Dict[str, Any] = Field(default_factory=dict)
    createdAt: Optional[datetime] = None


class CategoryView(BaseModel):
    id: str
    name: str
    mainAttribute: Optional[str] = None
    attributes: List[str] = Field(default_factory=list)
    entries: List[EntryView] = Field(default_factory=list)


class MainAttributeValue(BaseModel):
    id: str
    value: Any = None


# ========================================================================
# LOCATION SCHEMAS
# ========================================================================

class LocationCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    th_name: str = Field(..., min_length=1, max_length=200, description="Localized display name")

    @field_validator("name", "th_name", mode="before")
    @classmethod
    def trim_names(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v


class LocationView(BaseModel):
    id: str
    name: str
    th_name: str


# ========================================================================
# RESPONSE ENVELOPE
# ========================================================================

class Envelope(BaseModel):
    status: Literal["success"] = "success"
    data: Any = None
