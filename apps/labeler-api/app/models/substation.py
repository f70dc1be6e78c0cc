"""
Substation model.

One row per thing being annotated. OSM-derived substations carry a
`full_id` and a boundary polygon; uploaded rasters carry an `image_url`
and the raster footprint as boundary. Everything variant-specific is
nullable.
"""

from datetime import datetime
from typing import Optional, Dict, Any, List, TYPE_CHECKING

from sqlalchemy import Boolean, String, DateTime, JSON, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base

if TYPE_CHECKING:
    from app.models.component_polygon import ComponentPolygon
    from app.models.point_annotation import PointAnnotation


class Substation(Base):
    __tablename__ = "substations"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    kind: Mapped[str] = mapped_column(String, default="substation")  # substation|image

    full_id: Mapped[Optional[str]] = mapped_column(String, nullable=True, index=True)
    name: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    substation_type: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    # GeoJSON Polygon, [lng, lat] order
    geometry: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON, nullable=True)
    image_url: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    uploaded_by: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    annotated_by: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    completed: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    component_polygons: Mapped[List["ComponentPolygon"]] = relationship(
        "ComponentPolygon",
        back_populates="substation",
        order_by="ComponentPolygon.created_at",
    )
    point_annotations: Mapped[List["PointAnnotation"]] = relationship(
        "PointAnnotation",
        back_populates="substation",
        cascade="all, delete-orphan",
        order_by="PointAnnotation.created_at",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
