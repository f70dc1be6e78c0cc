"""
Point annotation schemas. Positions are percentages of the displayed image.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class PointAnnotationCreate(BaseModel):
    x: float = Field(ge=0.0, le=100.0)
    y: float = Field(ge=0.0, le=100.0)
    labels: list[str] = Field(default_factory=list)
    custom_label: Optional[str] = None


class PointAnnotationUpdate(BaseModel):
    x: Optional[float] = Field(default=None, ge=0.0, le=100.0)
    y: Optional[float] = Field(default=None, ge=0.0, le=100.0)
    labels: Optional[list[str]] = None
    custom_label: Optional[str] = None


class PointAnnotationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    substation_id: str
    x: float
    y: float
    labels: list[str] = Field(default_factory=list)
    custom_label: Optional[str] = None
    created_by: str = ""
    created_at: Optional[datetime] = None
