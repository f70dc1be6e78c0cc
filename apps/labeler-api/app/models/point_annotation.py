"""
Point annotations placed on the rendered image.

x/y are percentages (0..100) of the displayed image box, not pixels
and not geographic coordinates.
"""

from datetime import datetime
from typing import Optional, List, TYPE_CHECKING

from sqlalchemy import String, DateTime, Float, JSON, ForeignKey, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base

if TYPE_CHECKING:
    from app.models.substation import Substation


class PointAnnotation(Base):
    __tablename__ = "point_annotations"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    substation_id: Mapped[str] = mapped_column(
        String, ForeignKey("substations.id"), index=True
    )

    x: Mapped[float] = mapped_column(Float)
    y: Mapped[float] = mapped_column(Float)
    labels: Mapped[List[str]] = mapped_column(JSON, default=list)
    custom_label: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    created_by: Mapped[str] = mapped_column(String, default="")

    substation: Mapped["Substation"] = relationship(
        "Substation", back_populates="point_annotations"
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
