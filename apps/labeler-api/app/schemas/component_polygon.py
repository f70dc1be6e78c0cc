"""
Component annotation schemas.
"""

from datetime import datetime
from typing import Optional, Literal, Any, Union

from pydantic import BaseModel, ConfigDict


class PolygonGeometry(BaseModel):
    type: Literal["Polygon"]
    coordinates: list[list[list[float]]]


class LineGeometry(BaseModel):
    type: Literal["LineString"]
    coordinates: list[list[float]]


class PointGeometry(BaseModel):
    type: Literal["Point"]
    coordinates: list[float]


Geometry = Union[PolygonGeometry, LineGeometry, PointGeometry]


class ComponentPolygonCreate(BaseModel):
    substation_id: Optional[str] = None
    substation_full_id: Optional[str] = None
    label: str = ""
    confirmed: bool = False
    geometry: Geometry


class ComponentPolygonUpdate(BaseModel):
    substation_id: Optional[str] = None
    label: Optional[str] = None
    confirmed: Optional[bool] = None


class ComponentPolygonOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    substation_id: Optional[str] = None
    substation_full_id: Optional[str] = None
    label: str
    confirmed: bool = False
    geometry: dict[str, Any]
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
