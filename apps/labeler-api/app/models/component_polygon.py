"""
Component annotations: one labeled shape per physical component.

`substation_id` is nullable; unassigned rows show up on every substation
map until somebody confirms them.
"""

from datetime import datetime
from typing import Optional, Dict, Any, TYPE_CHECKING

from sqlalchemy import Boolean, String, DateTime, JSON, ForeignKey, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base

if TYPE_CHECKING:
    from app.models.substation import Substation


class ComponentPolygon(Base):
    __tablename__ = "component_polygons"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    substation_id: Mapped[Optional[str]] = mapped_column(
        String, ForeignKey("substations.id"), nullable=True, index=True
    )
    substation_full_id: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    label: Mapped[str] = mapped_column(String, default="", index=True)
    confirmed: Mapped[bool] = mapped_column(Boolean, default=False)
    geometry: Mapped[Dict[str, Any]] = mapped_column(JSON)

    created_by: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    substation: Mapped[Optional["Substation"]] = relationship(
        "Substation", back_populates="component_polygons"
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), onupdate=func.now(), nullable=True
    )
