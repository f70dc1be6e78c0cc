"""
Annotation session request bodies.
"""

from pydantic import BaseModel, Field

from app.schemas.component_polygon import Geometry


class SelectIn(BaseModel):
    substation_id: str


class DrawIn(BaseModel):
    """A drawn shape. A GeoJSON Feature works as-is; extra keys are ignored."""
    geometry: Geometry


class ClickIn(BaseModel):
    key: str


class DialogIn(BaseModel):
    selected: list[str] = Field(default_factory=list)
    other_text: str = ""


class ToggleIn(BaseModel):
    option: str
