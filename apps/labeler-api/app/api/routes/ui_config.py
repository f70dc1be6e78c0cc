"""
GET /ui-config: vocabularies and widget settings the frontend renders.
"""

from fastapi import APIRouter

from app.core.config import settings
from app.schemas.substation import UiConfigOut
from app.services.labels import COMPONENT_OPTIONS, LABEL_COLORS, SUBSTATION_TYPES

router = APIRouter(tags=["ui"])


@router.get("/ui-config", response_model=UiConfigOut)
def ui_config():
    return UiConfigOut(
        substation_types=SUBSTATION_TYPES,
        component_options=COMPONENT_OPTIONS,
        label_colors=LABEL_COLORS,
        chat_widget={
            "script_url": settings.CHAT_WIDGET_SCRIPT_URL,
            "project_id": settings.CHAT_WIDGET_PROJECT_ID,
            "version_id": settings.CHAT_WIDGET_VERSION_ID,
            "runtime_url": settings.CHAT_WIDGET_RUNTIME_URL,
        },
    )
