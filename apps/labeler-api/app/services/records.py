"""
In-memory annotation records used by the map adapter and the session.

Identity is a tagged value: `Unsaved` for shapes drawn in the session
that have no row yet, `Persisted` for anything read back from storage.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union
from uuid import uuid4

from app.services.labels import BOUNDARY_LABEL


@dataclass(frozen=True)
class Unsaved:
    local_key: str

    @property
    def wire(self) -> str:
        return f"temp-{self.local_key}"


@dataclass(frozen=True)
class Persisted:
    id: str

    @property
    def wire(self) -> str:
        return self.id


RecordKey = Union[Unsaved, Persisted]


def new_unsaved_key() -> Unsaved:
    return Unsaved(local_key=uuid4().hex)


@dataclass
class AnnotationRecord:
    key: RecordKey
    label: str = ""
    confirmed: bool = False
    geometry: Optional[Dict[str, Any]] = None
    substation_id: Optional[str] = None
    substation_full_id: Optional[str] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_unsaved(self) -> bool:
        return isinstance(self.key, Unsaved)

    @property
    def is_boundary(self) -> bool:
        return self.label == BOUNDARY_LABEL

    @classmethod
    def from_row(cls, row) -> "AnnotationRecord":
        """Build a record from a ComponentPolygon row."""
        return cls(
            key=Persisted(row.id),
            label=row.label or "",
            confirmed=bool(row.confirmed),
            geometry=row.geometry,
            substation_id=row.substation_id,
            substation_full_id=row.substation_full_id,
            created_at=row.created_at or datetime.now(timezone.utc),
        )

    @classmethod
    def boundary_for(cls, substation) -> "AnnotationRecord":
        return cls(
            key=Persisted(f"substation_{substation.id}"),
            label=BOUNDARY_LABEL,
            confirmed=True,
            geometry=substation.geometry,
            substation_id=substation.id,
            substation_full_id=substation.full_id,
            created_at=substation.created_at or datetime.now(timezone.utc),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key.wire,
            "persisted": not self.is_unsaved,
            "substation_id": self.substation_id,
            "substation_full_id": self.substation_full_id,
            "label": self.label,
            "confirmed": self.confirmed,
            "geometry": self.geometry,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


def component_summary(records) -> List[Dict[str, Any]]:
    """Per-label totals and confirmed counts, sorted by label."""
    totals: Dict[str, int] = {}
    confirmed: Dict[str, int] = {}
    for record in records:
        if not record.label or record.is_boundary:
            continue
        totals[record.label] = totals.get(record.label, 0) + 1
        if record.confirmed:
            confirmed[record.label] = confirmed.get(record.label, 0) + 1
    return [
        {"label": label, "total": totals[label], "confirmed": confirmed.get(label, 0)}
        for label in sorted(totals)
    ]
