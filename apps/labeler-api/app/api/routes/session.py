"""
Annotation session routes. Each user has one session held in memory.

- POST /session/load              reload the queue and select the newest
- GET  /session                   current state, queue, annotations, dialog
- POST /session/select            select a substation
- POST /session/draw              shape drawn on the map -> create dialog
- POST /session/click             existing shape clicked -> edit dialog
- POST /session/dialog            replace the dialog selection
- POST /session/dialog/toggle     toggle one component option
- POST /session/dialog/save
- POST /session/dialog/delete
- POST /session/dialog/cancel
- PUT  /session/type              classify the selected substation
- POST /session/complete          mark the selected substation complete
- GET  /session/map               map view for the selected substation
"""

from fastapi import APIRouter, Depends

from app.api.deps import get_current_user, get_gateway, service_errors
from app.models.user import User
from app.schemas.session import ClickIn, DialogIn, DrawIn, SelectIn, ToggleIn
from app.schemas.substation import SubstationTypeIn
from app.services.annotation_session import AnnotationSession, session_store
from app.services.gateway import PersistenceGateway

router = APIRouter(prefix="/session", tags=["session"])


def get_session(user: User = Depends(get_current_user)) -> AnnotationSession:
    return session_store.get(user.id)


@router.post("/load")
def load(
    session: AnnotationSession = Depends(get_session),
    gateway: PersistenceGateway = Depends(get_gateway),
):
    with session.lock, service_errors():
        session.load_queue(gateway)
        return session.snapshot()


@router.get("")
def current(session: AnnotationSession = Depends(get_session)):
    with session.lock:
        return session.snapshot()


@router.post("/select")
def select(
    payload: SelectIn,
    session: AnnotationSession = Depends(get_session),
    gateway: PersistenceGateway = Depends(get_gateway),
):
    with session.lock, service_errors():
        session.select(gateway, payload.substation_id)
        return session.snapshot()


@router.post("/draw")
def draw(payload: DrawIn, session: AnnotationSession = Depends(get_session)):
    with session.lock, service_errors():
        session.draw(payload.geometry.model_dump())
        return session.snapshot()


@router.post("/click")
def click(payload: ClickIn, session: AnnotationSession = Depends(get_session)):
    with session.lock, service_errors():
        session.click(payload.key)
        return session.snapshot()


@router.post("/dialog")
def set_dialog(payload: DialogIn, session: AnnotationSession = Depends(get_session)):
    with session.lock, service_errors():
        session.set_dialog(payload.selected, payload.other_text)
        return session.snapshot()


@router.post("/dialog/toggle")
def toggle(payload: ToggleIn, session: AnnotationSession = Depends(get_session)):
    with session.lock, service_errors():
        session.toggle_option(payload.option)
        return session.snapshot()


@router.post("/dialog/save")
def save(
    session: AnnotationSession = Depends(get_session),
    gateway: PersistenceGateway = Depends(get_gateway),
):
    with session.lock, service_errors():
        saved = session.save(gateway)
        return {"saved": saved.to_dict(), **session.snapshot()}


@router.post("/dialog/delete")
def delete(
    session: AnnotationSession = Depends(get_session),
    gateway: PersistenceGateway = Depends(get_gateway),
):
    with session.lock, service_errors():
        session.delete(gateway)
        return session.snapshot()


@router.post("/dialog/cancel")
def cancel(session: AnnotationSession = Depends(get_session)):
    with session.lock, service_errors():
        session.cancel()
        return session.snapshot()


@router.put("/type")
def set_type(
    payload: SubstationTypeIn,
    session: AnnotationSession = Depends(get_session),
    gateway: PersistenceGateway = Depends(get_gateway),
):
    with session.lock, service_errors():
        written = session.set_substation_type(gateway, payload.value, payload.other_text)
        return {"written": written, **session.snapshot()}


@router.post("/complete")
def complete(
    session: AnnotationSession = Depends(get_session),
    gateway: PersistenceGateway = Depends(get_gateway),
    user: User = Depends(get_current_user),
):
    with session.lock, service_errors():
        session.complete(gateway, annotated_by=user.display_name)
        return session.snapshot()


@router.get("/map")
def session_map(session: AnnotationSession = Depends(get_session)):
    with session.lock:
        return session.map_view()
