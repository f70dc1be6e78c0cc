"""
Substation schemas.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.component_polygon import PolygonGeometry


class SubstationCreate(BaseModel):
    full_id: Optional[str] = None
    name: Optional[str] = None
    substation_type: Optional[str] = None
    geometry: Optional[PolygonGeometry] = None


class SubstationTypeIn(BaseModel):
    value: str = ""
    other_text: str = ""


class SubstationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    kind: str = "substation"
    full_id: Optional[str] = None
    name: Optional[str] = None
    substation_type: Optional[str] = None
    geometry: Optional[dict[str, Any]] = None
    image_url: Optional[str] = None
    uploaded_by: Optional[str] = None
    annotated_by: Optional[str] = None
    completed: bool = False
    created_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None


class UiConfigOut(BaseModel):
    substation_types: list[str] = Field(default_factory=list)
    component_options: list[str] = Field(default_factory=list)
    label_colors: dict[str, str] = Field(default_factory=dict)
    chat_widget: dict[str, str] = Field(default_factory=dict)
