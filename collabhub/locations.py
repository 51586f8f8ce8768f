"""
collabhub/locations.py

Location reference data.
"""

from __future__ import annotations

from typing import List

from bson import ObjectId
from pymongo.database import Database

try:
    from collabhub.config import IS_DEV
    from collabhub.db import LOCATIONS, now_utc, stringify_id
    from collabhub.schemas import LocationView
except ModuleNotFoundError:
    from config import IS_DEV
    from db import LOCATIONS, now_utc, stringify_id
    from schemas import LocationView


def create_location(db: Database, name: str, th_name: str) -> ObjectId:
    result = db[LOCATIONS].insert_one({"name": name, "th_name": th_name, "createdAt": now_utc()})
    if IS_DEV:
        print(f"[LOCATIONS] Created location_id={result.inserted_id} name={name}")
    return result.inserted_id


def list_locations(db: Database) -> List[LocationView]:
    return [
        LocationView(id=stringify_id(doc["_id"]), name=doc.get("name", ""), th_name=doc.get("th_name", ""))
        for doc in db[LOCATIONS].find({}).sort("name", 1)
    ]
