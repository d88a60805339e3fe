# =======================================================================================
# doorcheck/api/dependencies.py - FastAPI Dependencies
# =======================================================================================
from typing import Optional
from fastapi import Depends, Header, Request
from ..config import Config
from ..database import DatabaseManager
from ..services.credential_gate import CredentialGate
from ..services.doorcheck_service import DoorcheckService


def get_config(request: Request) -> Config:
    return request.app.state.config


def get_db(request: Request) -> DatabaseManager:
    """
    Routes open their own transaction with ``db.get_connection()`` and build the
    response only after it has committed, so a failed commit still reaches the
    error handlers.
    """
    return request.app.state.db


def get_doorcheck_service(request: Request) -> DoorcheckService:
    return request.app.state.doorcheck_service


def require_door_key(
    x_api_key: Optional[str] = Header(None),
    config: Config = Depends(get_config),
) -> None:
    """Door devices authenticate with the shared ``X-API-Key`` secret."""
    CredentialGate(config.DOOR_API_KEY, "DOOR_API_KEY").check(x_api_key)


def require_admin_key(
    x_admin_key: Optional[str] = Header(None),
    config: Config = Depends(get_config),
) -> None:
    CredentialGate(config.ADMIN_API_KEY, "ADMIN_API_KEY").check(x_admin_key)
