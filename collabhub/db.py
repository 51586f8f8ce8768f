# collabhub/db.py
# Document store access layer (MongoDB via pymongo)

from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Generator, Optional

from bson import ObjectId
from pymongo import ASCENDING, MongoClient
from pymongo.client_session import ClientSession
from pymongo.database import Database

try:
    from collabhub.config import DATABASE_NAME, IS_DEV, MONGODB_URL, MONGODB_USE_TRANSACTIONS
    from collabhub.errors import ValidationError
except ModuleNotFoundError:
    from config import DATABASE_NAME, IS_DEV, MONGODB_URL, MONGODB_USE_TRANSACTIONS
    from errors import ValidationError

# Collection names
USERS = "users"
PROJECTS = "projects"
PERMISSIONS = "permissions"
COLLABORATORS = "collaborators"
LOCATIONS = "locations"
TEMPLATES = "templates"
CATEGORIES = "categories"
ENTRIES = "entries"

# Reference data seeded on startup
DEFAULT_PERMISSIONS = ("owner", "can_edited", "read_only")

_client: Optional[MongoClient] = None


def _get_client() -> MongoClient:
    global _client
    if _client is None:
        _client = MongoClient(MONGODB_URL)
        if IS_DEV:
            print(f"[DB] Connected client for {DATABASE_NAME}")
    return _client


def get_database() -> Database:
    return _get_client()[DATABASE_NAME]


def get_db() -> Database:
    """
    FastAPI dependency that provides the application database.

    Tests override this with an in-memory database:
        app.dependency_overrides[get_db] = lambda: test_db
    """
    return get_database()


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


@contextmanager
def transaction(db: Database) -> Generator[Optional[ClientSession], None, None]:
    """
    Run a block of writes as one unit.

    Yields a session bound to an open transaction when MONGODB_USE_TRANSACTIONS
    is set (replica set deployments). Otherwise yields None and callers are
    expected to compensate on failure. Pass the yielded value as session=.
    """
    if not MONGODB_USE_TRANSACTIONS:
        yield None
        return

    with db.client.start_session() as session:
        with session.start_transaction():
            yield session


def parse_object_id(value: Any, field: str) -> ObjectId:
    """
    Convert a client-supplied identifier into an ObjectId.

    Raises:
        ValidationError: If the value is not a well-formed entity reference
    """
    if isinstance(value, ObjectId):
        return value
    if not isinstance(value, str) or not ObjectId.is_valid(value):
        raise ValidationError(f"Invalid {field}")
    return ObjectId(value)


def stringify_id(value: Any) -> Optional[str]:
    return str(value) if value is not None else None


def ensure_indexes(db: Database) -> None:
    """Create the unique indexes the membership and permission invariants rely on."""
    db[PERMISSIONS].create_index([("name", ASCENDING)], unique=True)
    db[COLLABORATORS].create_index(
        [("userId", ASCENDING), ("projectId", ASCENDING)],
        unique=True,
    )
    db[COLLABORATORS].create_index([("projectId", ASCENDING)])
    db[CATEGORIES].create_index([("projectId", ASCENDING)])
    db[ENTRIES].create_index([("categoryId", ASCENDING)])


def seed_permissions(db: Database) -> int:
    """Insert any missing default permission levels. Returns the number inserted."""
    inserted = 0
    for name in DEFAULT_PERMISSIONS:
        result = db[PERMISSIONS].update_one(
            {"name": name},
            {"$setOnInsert": {"name": name}},
            upsert=True,
        )
        if result.upserted_id is not None:
            inserted += 1
    if inserted:
        print(f"[DB] Seeded {inserted} permission level(s)")
    return inserted
