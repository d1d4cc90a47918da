import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from admin_backend.api.deps import get_app_settings
from admin_backend.core.config import Settings
from admin_backend.core.security import auth_required, check_admin_credentials, create_access_token

logger = logging.getLogger(__name__)

router = APIRouter()


class LoginIn(BaseModel):
    username: str
    password: str


@router.post("/login")
async def login(body: LoginIn, settings: Settings = Depends(get_app_settings)):
    if not settings.ADMIN_PASSWORD:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Admin login not configured",
        )
    if not check_admin_credentials(settings, body.username, body.password):
        logger.warning("Failed admin login for %r", body.username)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    logger.info("Admin %s logged in", body.username)
    return {
        "access_token": create_access_token(settings, body.username),
        "token_type": "bearer",
        "expires_in": settings.JWT_EXPIRE_MINUTES * 60,
    }


@router.get("/me")
async def get_me(user: Dict[str, Any] = Depends(auth_required)):
    return {"user": user}
