# Vault API - RESTful endpoints for credential management
#
# - Initialize/unlock/lock/reset vault
# - CRUD operations for entries
# - Entry operations require the vault session to be unlocked

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from ..config import get_settings
from ..core.kv_store import SQLiteKeyValueStore
from ..vault import (
    AuthenticationError,
    FormatError,
    VaultAlreadyInitializedError,
    VaultLockedError,
    VaultNotInitializedError,
    VaultSession,
    VaultStore,
)
from .security import verify_session_token

router = APIRouter(prefix="/api/vault", tags=["vault"])

# Process-wide session (desktop backend serves a single user)
_session: Optional[VaultSession] = None


def get_session() -> VaultSession:
    """Get or create the vault session backed by the configured database."""
    global _session
    if _session is None:
        storage = SQLiteKeyValueStore(get_settings().db_path)
        _session = VaultSession(VaultStore(storage))
    return _session


def current_session() -> Optional[VaultSession]:
    """The session if one has been built, without creating it."""
    return _session


def set_session(session: Optional[VaultSession]) -> None:
    """Replace the session singleton (for testing)."""
    global _session
    _session = session


# Request/Response Models
class MasterPasswordRequest(BaseModel):
    master_password: str = Field(..., min_length=1)


class CreateEntryRequest(BaseModel):
    service_name: str = Field(..., min_length=1, max_length=200)
    username: str
    secret: str = Field(..., min_length=1)
    url: Optional[str] = None
    notes: Optional[str] = None
    category: Optional[str] = None


class UpdateEntryRequest(BaseModel):
    service_name: Optional[str] = Field(None, min_length=1, max_length=200)
    username: Optional[str] = None
    secret: Optional[str] = Field(None, min_length=1)
    url: Optional[str] = None
    notes: Optional[str] = None
    category: Optional[str] = None


class VaultStatusResponse(BaseModel):
    initialized: bool
    is_unlocked: bool


def _run(operation, *args, **kwargs):
    """Call a session operation, mapping vault errors onto HTTP errors."""
    try:
        return operation(*args, **kwargs)
    except VaultLockedError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except AuthenticationError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))
    except VaultNotInitializedError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except FormatError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Vault data is corrupted",
        )


# Endpoints

@router.get("/status", response_model=VaultStatusResponse)
def get_vault_status(token: str = Depends(verify_session_token)):
    """Whether the vault exists and whether the session is unlocked."""
    session = get_session()
    return VaultStatusResponse(
        initialized=session.store.is_initialized(),
        is_unlocked=session.is_unlocked,
    )


@router.post("/initialize")
def initialize_vault(
    request: MasterPasswordRequest,
    token: str = Depends(verify_session_token)
):
    """Create the vault and unlock the session."""
    try:
        get_session().setup(request.master_password)
    except VaultAlreadyInitializedError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    return {"success": True, "message": "Vault created successfully"}


@router.post("/unlock")
def unlock_vault(
    request: MasterPasswordRequest,
    token: str = Depends(verify_session_token)
):
    """Verify the master password and unlock the session."""
    if not get_session().unlock(request.master_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect master password"
        )

    return {"success": True, "message": "Vault unlocked"}


@router.post("/lock")
def lock_vault(token: str = Depends(verify_session_token)):
    """Forget the master password held by the session."""
    get_session().lock()
    return {"success": True, "message": "Vault locked"}


@router.post("/reset")
def reset_vault(token: str = Depends(verify_session_token)):
    """Wipe the vault. Irreversible; no master password is asked for."""
    session = get_session()
    session.lock()
    session.store.reset()
    return {"success": True, "message": "Vault reset"}


@router.get("/entries")
def list_entries(
    q: Optional[str] = None,
    token: str = Depends(verify_session_token)
):
    """
    List entries, most recently updated first, optionally filtered by ``q``.

    Secrets are not included; fetch a single entry to read its secret.
    """
    session = get_session()
    if q:
        entries = _run(session.search_entries, q)
    else:
        entries = _run(session.list_entries)

    entries = sorted(entries, key=lambda e: e.updated_at, reverse=True)
    return {"entries": [entry.to_public_dict() for entry in entries]}


@router.post("/entries", status_code=status.HTTP_201_CREATED)
def create_entry(
    request: CreateEntryRequest,
    token: str = Depends(verify_session_token)
):
    """Add a new entry."""
    entry = _run(get_session().create_entry, **request.model_dump())
    return entry.to_dict()


@router.get("/entries/{entry_id}")
def get_entry(
    entry_id: str,
    token: str = Depends(verify_session_token)
):
    """Get one entry, including its secret."""
    entry = _run(get_session().get_entry, entry_id)
    if entry is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Entry not found")
    return entry.to_dict()


@router.patch("/entries/{entry_id}")
def update_entry(
    entry_id: str,
    request: UpdateEntryRequest,
    token: str = Depends(verify_session_token)
):
    """Change the fields present in the request body."""
    changes = request.model_dump(exclude_unset=True)
    for name in ("service_name", "username", "secret"):
        if name in changes and changes[name] is None:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"{name} cannot be cleared"
            )
    entry = _run(get_session().update_entry, entry_id, **changes)
    if entry is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Entry not found")
    return entry.to_dict()


@router.delete("/entries/{entry_id}")
def delete_entry(
    entry_id: str,
    token: str = Depends(verify_session_token)
):
    """Delete an entry."""
    if not _run(get_session().delete_entry, entry_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Entry not found")
    return {"success": True, "message": "Entry deleted"}
