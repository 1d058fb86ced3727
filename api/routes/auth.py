from fastapi import APIRouter, HTTPException
from api.auth import check_password, create_access_token
from api.models.auth import LoginRequest, TokenResponse
from config import settings
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login", response_model=TokenResponse)
async def login(credentials: LoginRequest):
    """Обмен пароля организатора на токен доступа к дашборду"""
    if not check_password(credentials.password):
        logger.warning("Failed dashboard login attempt")
        raise HTTPException(status_code=401, detail="Incorrect password")

    return TokenResponse(
        access_token=create_access_token(),
        expires_in=settings.TOKEN_TTL_SECONDS
    )
