"""
Per-user annotation session.

Holds what the annotate screen is looking at: the queue of substations
still to annotate, the selected one, its component annotations and the
single create/edit dialog. States:

    no_entity_selected -> entity_loaded -> dialog_open -> entity_loaded
                                        -> entity_completed

Local state is only patched after the gateway call returned, so a
GatewayError leaves the session exactly as it was.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from app.core.config import settings
from app.services.gateway import PersistenceGateway
from app.services.labels import COMPONENT_OPTIONS, OTHER_TYPE, SUBSTATION_TYPES
from app.services.map_view import build_map_view, substation_features
from app.services.records import (
    AnnotationRecord,
    Persisted,
    Unsaved,
    component_summary,
    new_unsaved_key,
)

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    NO_ENTITY_SELECTED = "no_entity_selected"
    ENTITY_LOADED = "entity_loaded"
    DIALOG_OPEN = "dialog_open"
    ENTITY_COMPLETED = "entity_completed"


class SessionStateError(ValueError):
    """Operation not allowed in the current session state."""


class CompletionBlocked(ValueError):
    """The substation cannot be completed yet."""


@dataclass
class QueueItem:
    id: str
    full_id: Optional[str]
    name: Optional[str]
    kind: str
    substation_type: Optional[str]
    geometry: Optional[Dict[str, Any]]
    created_at: Optional[datetime]

    @classmethod
    def from_row(cls, row) -> "QueueItem":
        return cls(
            id=row.id,
            full_id=row.full_id,
            name=row.name,
            kind=row.kind,
            substation_type=row.substation_type,
            geometry=row.geometry,
            created_at=row.created_at,
        )

    @property
    def title(self) -> str:
        return self.full_id or self.name or "Unnamed Substation"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "full_id": self.full_id,
            "name": self.name,
            "kind": self.kind,
            "substation_type": self.substation_type,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass
class Dialog:
    mode: str  # create | edit
    record: AnnotationRecord
    selected: List[str] = field(default_factory=list)
    other_text: str = ""

    def final_label(self) -> str:
        if self.selected:
            return self.selected[0]
        return self.other_text.strip()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mode": self.mode,
            "record": self.record.to_dict(),
            "selected": list(self.selected),
            "other_text": self.other_text,
        }


class AnnotationSession:
    def __init__(self, user_id: str, strict_completion: Optional[bool] = None):
        self.user_id = user_id
        self.strict_completion = (
            settings.STRICT_COMPLETION if strict_completion is None else strict_completion
        )
        self.lock = threading.RLock()
        self.state = SessionState.NO_ENTITY_SELECTED
        self.queue: List[QueueItem] = []
        self.selected: Optional[QueueItem] = None
        self.annotations: List[AnnotationRecord] = []
        self.dialog: Optional[Dialog] = None
        self.substation_type = ""
        self.other_type_text = ""
        self.last_completed_id: Optional[str] = None

    # -- queue / selection ---------------------------------------------

    def load_queue(self, gateway: PersistenceGateway) -> List[QueueItem]:
        rows = gateway.list_substations(completed=False)
        self.queue = [QueueItem.from_row(row) for row in rows]
        if self.queue:
            self.select(gateway, self.queue[0].id)
        else:
            self._clear_selection()
            self.state = SessionState.NO_ENTITY_SELECTED
        return self.queue

    def select(self, gateway: PersistenceGateway, substation_id: str) -> QueueItem:
        item = next((q for q in self.queue if q.id == substation_id), None)
        if item is None:
            row = gateway.get_substation(substation_id)
            if row is None or row.completed:
                raise LookupError("Substation not found in the annotation queue")
            item = QueueItem.from_row(row)

        rows = gateway.list_component_polygons(item.id, include_unassigned=True)
        self.selected = item
        self.dialog = None
        self.annotations = [AnnotationRecord.from_row(row) for row in rows]
        self._load_type_form(item.substation_type or "")
        self.state = SessionState.ENTITY_LOADED
        return item

    def _load_type_form(self, current: str) -> None:
        if not current:
            self.substation_type, self.other_type_text = "", ""
        elif current in SUBSTATION_TYPES:
            self.substation_type, self.other_type_text = current, ""
        else:
            self.substation_type, self.other_type_text = OTHER_TYPE, current

    def _clear_selection(self) -> None:
        self.selected = None
        self.annotations = []
        self.dialog = None
        self.substation_type = ""
        self.other_type_text = ""

    def _require_entity(self) -> QueueItem:
        if self.selected is None:
            raise SessionStateError("No substation selected")
        return self.selected

    def _require_dialog(self) -> Dialog:
        if self.dialog is None:
            raise SessionStateError("No annotation dialog is open")
        return self.dialog

    # -- dialog --------------------------------------------------------

    def draw(self, geometry: Dict[str, Any]) -> Dialog:
        item = self._require_entity()
        record = AnnotationRecord(
            key=new_unsaved_key(),
            label="",
            confirmed=False,
            geometry=geometry,
            substation_id=item.id,
            substation_full_id=item.full_id,
        )
        self.dialog = Dialog(mode="create", record=record)
        self.state = SessionState.DIALOG_OPEN
        return self.dialog

    def click(self, key: str) -> Dialog:
        self._require_entity()
        record = next((r for r in self.annotations if r.key.wire == key), None)
        if record is None or record.is_boundary:
            raise LookupError("Annotation not found")
        if record.label in COMPONENT_OPTIONS:
            dialog = Dialog(mode="edit", record=record, selected=[record.label])
        else:
            dialog = Dialog(mode="edit", record=record, other_text=record.label or "")
        self.dialog = dialog
        self.state = SessionState.DIALOG_OPEN
        return dialog

    def toggle_option(self, option: str) -> Dialog:
        dialog = self._require_dialog()
        if option not in COMPONENT_OPTIONS:
            raise ValueError(f"Unknown component option: {option}")
        if option in dialog.selected:
            dialog.selected = [o for o in dialog.selected if o != option]
        else:
            dialog.selected = [*dialog.selected, option]
        return dialog

    def set_dialog(self, selected: List[str], other_text: str = "") -> Dialog:
        dialog = self._require_dialog()
        unknown = [o for o in selected if o not in COMPONENT_OPTIONS]
        if unknown:
            raise ValueError(f"Unknown component option: {unknown[0]}")
        dialog.selected = list(selected)
        dialog.other_text = other_text
        return dialog

    def cancel(self) -> None:
        self._require_dialog()
        self.dialog = None
        self.state = SessionState.ENTITY_LOADED

    def save(self, gateway: PersistenceGateway) -> AnnotationRecord:
        item = self._require_entity()
        dialog = self._require_dialog()
        record = dialog.record
        payload = {
            "substation_id": item.id,
            "substation_full_id": record.substation_full_id or item.full_id,
            "label": dialog.final_label(),
            "geometry": record.geometry,
            "confirmed": True,
        }

        if isinstance(record.key, Unsaved):
            row = gateway.insert_component_polygon(created_by=self.user_id, **payload)
            saved = AnnotationRecord.from_row(row)
            self.annotations = [*self.annotations, saved]
        else:
            row = gateway.update_component_polygon(record.key.id, **payload)
            saved = AnnotationRecord.from_row(row)
            self.annotations = [saved if r.key == record.key else r for r in self.annotations]

        logger.info(
            "Saved annotation %s on substation %s as %r", saved.key.wire, item.id, saved.label
        )
        self.dialog = None
        self.state = SessionState.ENTITY_LOADED
        return saved

    def delete(self, gateway: PersistenceGateway) -> None:
        self._require_entity()
        dialog = self._require_dialog()
        key = dialog.record.key
        if isinstance(key, Persisted):
            gateway.delete_component_polygon(key.id)
            self.annotations = [r for r in self.annotations if r.key != key]
            logger.info("Deleted annotation %s", key.id)
        self.dialog = None
        self.state = SessionState.ENTITY_LOADED

    # -- substation type / completion ----------------------------------

    def current_type_value(self) -> str:
        if self.substation_type == OTHER_TYPE:
            return self.other_type_text.strip()
        return self.substation_type

    def set_substation_type(
        self, gateway: PersistenceGateway, value: str, other_text: str = ""
    ) -> Optional[str]:
        """Returns the value written, or None when nothing was written."""
        item = self._require_entity()
        if value and value not in SUBSTATION_TYPES:
            raise ValueError(f"Unknown substation type: {value}")

        if value == "":
            self.substation_type, self.other_type_text = "", ""
            return None
        if value == OTHER_TYPE:
            final = other_text.strip()
            if not final:
                self.substation_type, self.other_type_text = OTHER_TYPE, other_text
                return None
        else:
            final = value

        gateway.update_substation(item.id, substation_type=final)
        self.substation_type = value
        self.other_type_text = other_text if value == OTHER_TYPE else ""
        item.substation_type = final
        return final

    def complete(self, gateway: PersistenceGateway, annotated_by: str) -> str:
        item = self._require_entity()
        if self.strict_completion and not self.current_type_value():
            raise CompletionBlocked("Please select a substation type before completing.")

        gateway.update_substation(
            item.id,
            completed=True,
            annotated_by=annotated_by,
            completed_at=datetime.now(timezone.utc),
        )
        logger.info("Substation %s completed by %s", item.id, annotated_by)
        self.queue = [q for q in self.queue if q.id != item.id]
        self._clear_selection()
        self.last_completed_id = item.id
        self.state = SessionState.ENTITY_COMPLETED
        return item.id

    # -- views ---------------------------------------------------------

    def summary(self) -> List[Dict[str, Any]]:
        return component_summary(self.annotations)

    def map_features(self) -> List[AnnotationRecord]:
        if self.selected is None:
            return list(self.annotations)
        features = substation_features(self.selected, self.annotations)
        if self.dialog is not None and self.dialog.record.is_unsaved:
            features.append(self.dialog.record)
        return features

    def map_view(self) -> Dict[str, Any]:
        return build_map_view(self.map_features())

    def snapshot(self) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "queue": [q.to_dict() for q in self.queue],
            "selected": self.selected.to_dict() if self.selected else None,
            "substation_type": self.substation_type,
            "other_type_text": self.other_type_text,
            "annotations": [r.to_dict() for r in self.annotations],
            "dialog": self.dialog.to_dict() if self.dialog else None,
            "summary": self.summary(),
            "last_completed_id": self.last_completed_id,
        }


class SessionStore:
    def __init__(self):
        self._sessions: Dict[str, AnnotationSession] = {}
        self._lock = threading.Lock()

    def get(self, user_id: str) -> AnnotationSession:
        with self._lock:
            session = self._sessions.get(user_id)
            if session is None:
                session = AnnotationSession(user_id)
                self._sessions[user_id] = session
            return session

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()


session_store = SessionStore()
