"""
Row-level access to substations and their annotations.

Every read and write goes through here so the routes and the annotation
session see one error type: SQLAlchemy failures are rolled back and
re-raised as GatewayError. A missing id on update/delete is LookupError.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Optional
from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from app.models.component_polygon import ComponentPolygon
from app.models.point_annotation import PointAnnotation
from app.models.substation import Substation

logger = logging.getLogger(__name__)


class GatewayError(RuntimeError):
    """A backend read or write failed; nothing was changed."""


def _now() -> datetime:
    return datetime.now(timezone.utc)


class PersistenceGateway:
    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def _guard(self, action: str, write: bool = False) -> Iterator[None]:
        try:
            yield
            if write:
                self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("%s failed: %s", action, exc)
            raise GatewayError(f"{action} failed: {exc.__class__.__name__}") from exc

    def _apply(self, row, changes: Dict[str, Any]) -> None:
        for field, value in changes.items():
            if not hasattr(row, field):
                raise ValueError(f"Unknown field: {field}")
            setattr(row, field, value)

    # -- substations ---------------------------------------------------

    def list_substations(self, completed: Optional[bool] = False) -> List[Substation]:
        """Newest first. `completed=None` returns every substation."""
        stmt = select(Substation)
        if completed is not None:
            stmt = stmt.where(Substation.completed.is_(completed))
        stmt = stmt.order_by(Substation.created_at.desc(), Substation.id)
        with self._guard("list substations"):
            return list(self.db.execute(stmt).scalars().all())

    def get_substation(self, substation_id: str) -> Optional[Substation]:
        with self._guard("get substation"):
            return self.db.get(Substation, substation_id)

    def insert_substation(self, **fields: Any) -> Substation:
        row = Substation(id=str(uuid4()), created_at=_now(), **fields)
        with self._guard("insert substation", write=True):
            self.db.add(row)
        self.db.refresh(row)
        return row

    def update_substation(self, substation_id: str, **changes: Any) -> Substation:
        row = self.get_substation(substation_id)
        if row is None:
            raise LookupError("Substation not found")
        self._apply(row, changes)
        with self._guard("update substation", write=True):
            self.db.add(row)
        self.db.refresh(row)
        return row

    def list_completed_with_annotations(self) -> List[Substation]:
        stmt = (
            select(Substation)
            .where(Substation.completed.is_(True))
            .options(
                selectinload(Substation.component_polygons),
                selectinload(Substation.point_annotations),
            )
            .order_by(Substation.created_at.desc(), Substation.id)
        )
        with self._guard("list completed substations"):
            return list(self.db.execute(stmt).scalars().all())

    # -- component polygons --------------------------------------------

    def list_component_polygons(
        self, substation_id: str, include_unassigned: bool = True
    ) -> List[ComponentPolygon]:
        """Rows assigned to the substation, followed by unassigned rows."""
        assigned_stmt = (
            select(ComponentPolygon)
            .where(ComponentPolygon.substation_id == substation_id)
            .order_by(ComponentPolygon.created_at, ComponentPolygon.id)
        )
        with self._guard("list component polygons"):
            rows = list(self.db.execute(assigned_stmt).scalars().all())
            if include_unassigned:
                unassigned_stmt = (
                    select(ComponentPolygon)
                    .where(ComponentPolygon.substation_id.is_(None))
                    .order_by(ComponentPolygon.created_at, ComponentPolygon.id)
                )
                rows.extend(self.db.execute(unassigned_stmt).scalars().all())
        return rows

    def get_component_polygon(self, polygon_id: str) -> Optional[ComponentPolygon]:
        with self._guard("get component polygon"):
            return self.db.get(ComponentPolygon, polygon_id)

    def insert_component_polygon(self, **fields: Any) -> ComponentPolygon:
        row = ComponentPolygon(id=str(uuid4()), created_at=_now(), **fields)
        with self._guard("insert component polygon", write=True):
            self.db.add(row)
        self.db.refresh(row)
        return row

    def update_component_polygon(self, polygon_id: str, **changes: Any) -> ComponentPolygon:
        row = self.get_component_polygon(polygon_id)
        if row is None:
            raise LookupError("Component polygon not found")
        self._apply(row, changes)
        row.updated_at = _now()
        with self._guard("update component polygon", write=True):
            self.db.add(row)
        self.db.refresh(row)
        return row

    def delete_component_polygon(self, polygon_id: str) -> None:
        row = self.get_component_polygon(polygon_id)
        if row is None:
            raise LookupError("Component polygon not found")
        with self._guard("delete component polygon", write=True):
            self.db.delete(row)

    # -- point annotations ---------------------------------------------

    def list_point_annotations(self, substation_id: str) -> List[PointAnnotation]:
        stmt = (
            select(PointAnnotation)
            .where(PointAnnotation.substation_id == substation_id)
            .order_by(PointAnnotation.created_at, PointAnnotation.id)
        )
        with self._guard("list point annotations"):
            return list(self.db.execute(stmt).scalars().all())

    def get_point_annotation(self, point_id: str) -> Optional[PointAnnotation]:
        with self._guard("get point annotation"):
            return self.db.get(PointAnnotation, point_id)

    def insert_point_annotation(self, **fields: Any) -> PointAnnotation:
        row = PointAnnotation(id=str(uuid4()), created_at=_now(), **fields)
        with self._guard("insert point annotation", write=True):
            self.db.add(row)
        self.db.refresh(row)
        return row

    def update_point_annotation(self, point_id: str, **changes: Any) -> PointAnnotation:
        row = self.get_point_annotation(point_id)
        if row is None:
            raise LookupError("Point annotation not found")
        self._apply(row, changes)
        with self._guard("update point annotation", write=True):
            self.db.add(row)
        self.db.refresh(row)
        return row

    def delete_point_annotation(self, point_id: str) -> None:
        row = self.get_point_annotation(point_id)
        if row is None:
            raise LookupError("Point annotation not found")
        with self._guard("delete point annotation", write=True):
            self.db.delete(row)
