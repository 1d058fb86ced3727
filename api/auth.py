import base64
import hmac
import hashlib
import json
import time
from typing import Optional, Dict
from fastapi import Header, HTTPException
from config import settings

ORGANIZER_SUBJECT = "organizer"


def _b64encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()


def _b64decode(value: str) -> bytes:
    return base64.urlsafe_b64decode(value + "=" * (-len(value) % 4))


def _sign(payload: str) -> str:
    return hmac.new(
        settings.SECRET_KEY.encode(),
        payload.encode(),
        hashlib.sha256
    ).hexdigest()


def check_password(password: str) -> bool:
    """Сравнение пароля организатора за постоянное время"""
    return hmac.compare_digest(password.encode(), settings.DASHBOARD_PASSWORD.encode())


def create_access_token(ttl_seconds: Optional[int] = None, now: Optional[float] = None) -> str:
    """
    Выпустить токен организатора.

    Формат: base64url(JSON{"sub", "exp"}) + "." + hex(HMAC-SHA256(SECRET_KEY, payload))
    """
    issued_at = time.time() if now is None else now
    ttl = settings.TOKEN_TTL_SECONDS if ttl_seconds is None else ttl_seconds
    payload = _b64encode(json.dumps(
        {"sub": ORGANIZER_SUBJECT, "exp": int(issued_at + ttl)},
        separators=(",", ":")
    ).encode())
    return f"{payload}.{_sign(payload)}"


def verify_access_token(token: str, now: Optional[float] = None) -> Optional[Dict]:
    """
    Проверка токена организатора

    Returns:
        Dict с данными токена или None если подпись неверна или срок истек
    """
    payload, sep, signature = token.partition(".")
    if not sep or not payload or not signature:
        return None

    if not hmac.compare_digest(_sign(payload), signature):
        return None

    try:
        claims = json.loads(_b64decode(payload))
    except (ValueError, UnicodeDecodeError):
        return None

    if not isinstance(claims, dict) or claims.get("sub") != ORGANIZER_SUBJECT:
        return None

    current = time.time() if now is None else now
    exp = claims.get("exp")
    if not isinstance(exp, int) or current >= exp:
        return None

    return claims


async def require_organizer(
    authorization: Optional[str] = Header(None)
) -> Dict:
    """Dependency: доступ к регистрациям только с токеном организатора"""
    if not authorization:
        raise HTTPException(
            status_code=401,
            detail="Authorization required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise HTTPException(
            status_code=401,
            detail="Invalid authorization header",
            headers={"WWW-Authenticate": "Bearer"},
        )

    claims = verify_access_token(token.strip())
    if not claims:
        raise HTTPException(
            status_code=401,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return claims
