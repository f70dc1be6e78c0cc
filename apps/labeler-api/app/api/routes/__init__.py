from app.api.routes.auth import router as auth_router
from app.api.routes.component_polygons import router as component_polygons_router
from app.api.routes.downloads import router as downloads_router
from app.api.routes.point_annotations import router as point_annotations_router
from app.api.routes.session import router as session_router
from app.api.routes.substations import router as substations_router
from app.api.routes.ui_config import router as ui_config_router
from app.api.routes.uploads import router as uploads_router

__all__ = [
    "auth_router",
    "component_polygons_router",
    "downloads_router",
    "point_annotations_router",
    "session_router",
    "substations_router",
    "ui_config_router",
    "uploads_router",
]
