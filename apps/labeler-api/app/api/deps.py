"""
Shared FastAPI dependencies:
- DB session, persistence gateway, object storage
- Current user from the bearer token, plus a role gate
- service_errors(): service exceptions -> HTTP status codes
"""

from contextlib import contextmanager
from typing import Iterator, Optional

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.orm import Session

from app.core.security import decode_token
from app.db.session import SessionLocal
from app.models.user import User
from app.services.annotation_session import CompletionBlocked, SessionStateError
from app.services.gateway import GatewayError, PersistenceGateway
from app.services.storage import ObjectStorage, StorageError, get_storage as _build_storage

bearer_scheme = HTTPBearer(auto_error=False)


def get_db() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_gateway(db: Session = Depends(get_db)) -> PersistenceGateway:
    return PersistenceGateway(db)


def get_storage() -> ObjectStorage:
    return _build_storage()


def get_current_user(
    db: Session = Depends(get_db),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> User:
    """401 for a missing/bad token or unknown user, 403 for a disabled account."""
    if credentials is None:
        raise HTTPException(status_code=401, detail="Missing bearer token")
    try:
        user_id = decode_token(credentials.credentials).get("sub")
    except JWTError:
        user_id = None
    if not user_id:
        raise HTTPException(status_code=401, detail="Invalid token")

    user = db.get(User, user_id)
    if user is None:
        raise HTTPException(status_code=401, detail="User not found")
    if not user.active:
        raise HTTPException(status_code=403, detail="Account inactive")
    return user


def require_role(*roles: str):
    """Usage: Depends(require_role("owner", "admin"))"""
    def _checker(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            raise HTTPException(status_code=403, detail=f"Requires role: {', '.join(roles)}")
        return user
    return _checker


@contextmanager
def service_errors():
    """Translate service exceptions into HTTP errors."""
    try:
        yield
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except (CompletionBlocked, SessionStateError) as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except (GatewayError, StorageError) as exc:
        raise HTTPException(status_code=502, detail=str(exc))
