"""
collabhub/main.py

FastAPI application: middleware, error handlers, startup and routers.

Run:
    uvicorn collabhub.main:app --reload
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Dict

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

try:
    from collabhub.config import CORS_ORIGINS, ENV
    from collabhub.db import ensure_indexes, get_database, seed_permissions
    from collabhub.errors import register_error_handlers
    from collabhub.permissions import catalog
    from collabhub.routes_categories import router as categories_router
    from collabhub.routes_locations import router as locations_router
    from collabhub.routes_projects import router as projects_router
except ModuleNotFoundError:
    from config import CORS_ORIGINS, ENV
    from db import ensure_indexes, get_database, seed_permissions
    from errors import register_error_handlers
    from permissions import catalog
    from routes_categories import router as categories_router
    from routes_locations import router as locations_router
    from routes_projects import router as projects_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    db = get_database()
    ensure_indexes(db)
    seed_permissions(db)
    catalog.load(db)
    print(f"[STARTUP] collabhub ready (env={ENV})")
    yield


app = FastAPI(title="collabhub Backend", version="0.1", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

app.include_router(projects_router)
app.include_router(categories_router)
app.include_router(locations_router)


@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}
