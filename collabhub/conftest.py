"""
Shared pytest fixtures: an in-memory document store wired into the app,
seeded permission levels, users with bearer tokens, and reference data.
"""

from datetime import datetime
from unittest.mock import patch

import mongomock
import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from collabhub.auth_context import AuthContext, create_access_token
from collabhub.db import (
    COLLABORATORS,
    LOCATIONS,
    TEMPLATES,
    USERS,
    ensure_indexes,
    get_db,
    now_utc,
    seed_permissions,
)
from collabhub.main import app
from collabhub.permissions import catalog
from collabhub import projects


@pytest.fixture
def mongo_db():
    db = mongomock.MongoClient()["collabhub_test"]
    ensure_indexes(db)
    seed_permissions(db)
    catalog.load(db)
    yield db
    catalog.clear()


@pytest.fixture
def client(mongo_db):
    app.dependency_overrides[get_db] = lambda: mongo_db
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestUser:
    """A user document plus its auth context and bearer header."""

    __test__ = False

    def __init__(self, doc):
        self.id = str(doc["_id"])
        self.oid = doc["_id"]
        self.name = doc["name"]
        self.ctx = AuthContext(user_id=self.id, name=doc["name"], email=doc["email"])
        token = create_access_token({"sub": self.id, "email": doc["email"]})
        self.headers = {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_user(mongo_db):
    def _make(name: str, is_active: bool = True) -> TestUser:
        doc = {
            "_id": ObjectId(),
            "name": name,
            "email": f"{name.lower()}@example.com",
            "isActive": is_active,
        }
        mongo_db[USERS].insert_one(doc)
        return TestUser(doc)
    return _make


@pytest.fixture
def owner(make_user):
    return make_user("Owner")


@pytest.fixture
def location(mongo_db):
    return mongo_db[LOCATIONS].insert_one({"name": "Bangkok", "th_name": "กรุงเทพ"}).inserted_id


@pytest.fixture
def template(mongo_db):
    return mongo_db[TEMPLATES].insert_one({
        "name": "Survey",
        "categories": [
            {"name": "Trees", "mainAttribute": "species", "attributes": ["species", "height"]},
            {"name": "Birds", "mainAttribute": "name", "attributes": ["name", "count"]},
        ],
    }).inserted_id


@pytest.fixture
def make_project(mongo_db, template, location):
    """Create a project through the service so membership and categories exist."""
    def _make(user: TestUser, name: str = "Project", created_at: datetime = None) -> ObjectId:
        payload = {"name": name, "template": str(template), "location": str(location)}
        if created_at is None:
            return projects.create_project(mongo_db, user.ctx, payload)
        with patch("collabhub.projects.now_utc", return_value=created_at):
            return projects.create_project(mongo_db, user.ctx, payload)
    return _make


@pytest.fixture
def add_member(mongo_db):
    """Insert a membership directly with the given permission name."""
    def _add(user: TestUser, project_id: ObjectId, permission: str) -> None:
        mongo_db[COLLABORATORS].insert_one({
            "userId": user.oid,
            "projectId": project_id,
            "permissionId": catalog.id_for(permission),
            "createdAt": now_utc(),
        })
    return _add
