"""
Substation labeler API.

On startup: create the data folders and tables, seed the first owner
account. Serves the routers plus the local object-storage bucket under
/storage so stored raster URLs resolve.
"""

import logging
import os
from uuid import uuid4

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.routes import (
    auth_router,
    component_polygons_router,
    downloads_router,
    point_annotations_router,
    session_router,
    substations_router,
    ui_config_router,
    uploads_router,
)
from app.core.config import settings
from app.core.security import hash_password
from app.db.base import Base
from app.db.session import SessionLocal, engine
from app.models.user import User

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("app")

DEFAULT_OWNER_EMAIL = "admin@local.dev"
DEFAULT_OWNER_PASSWORD = "password"


def ensure_labeler_home() -> None:
    os.makedirs(settings.LABELER_HOME, exist_ok=True)
    os.makedirs(os.path.join(settings.storage_root, settings.IMAGE_BUCKET), exist_ok=True)


def seed_owner(db: Session) -> None:
    """First start only: an owner account so someone can log in."""
    if db.execute(select(User.id).limit(1)).first() is not None:
        return
    logger.warning("No users yet, creating %s / %s", DEFAULT_OWNER_EMAIL, DEFAULT_OWNER_PASSWORD)
    db.add(
        User(
            id=str(uuid4()),
            email=DEFAULT_OWNER_EMAIL,
            name="Labeler Admin",
            password_hash=hash_password(DEFAULT_OWNER_PASSWORD),
            role="owner",
        )
    )
    db.commit()


app = FastAPI(title="Substation Labeler API", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_ORIGIN],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def on_startup():
    ensure_labeler_home()
    # No migrations; tables are created in place.
    Base.metadata.create_all(bind=engine)
    with SessionLocal() as db:
        seed_owner(db)
    logger.info("Storage bucket %s at %s", settings.IMAGE_BUCKET, settings.storage_root)


for router in (
    auth_router,
    substations_router,
    component_polygons_router,
    point_annotations_router,
    session_router,
    uploads_router,
    downloads_router,
    ui_config_router,
):
    app.include_router(router)

app.mount(
    "/storage",
    StaticFiles(directory=settings.storage_root, check_dir=False),
    name="storage",
)


@app.get("/health")
def health():
    return {"ok": True}
