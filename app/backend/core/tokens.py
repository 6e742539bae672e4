from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict
from uuid import UUID

from jose import JWTError, jwt  # ← python-jose 사용

from app.backend.core.config import get_settings


# ---- 공통 ----
def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


def _exp_in(minutes: int) -> datetime:
    return _utcnow() + timedelta(minutes=minutes)


def _make_jwt(payload: Dict[str, Any], exp: datetime) -> str:
    settings = get_settings()
    to_encode = payload.copy()
    to_encode["iat"] = int(_utcnow().timestamp())
    to_encode["exp"] = int(exp.timestamp())
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def _decode(token: str) -> Dict[str, Any]:
    # jose.jwt.decode는 서명 불일치/만료 시 JWTError를 던짐
    settings = get_settings()
    return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])


def access_token_ttl_seconds() -> int:
    return 60 * get_settings().access_token_expire_minutes


# ---- Access Token (session token) ----
def create_access_token(
    sub: UUID | str,
    extra: Dict[str, Any] | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    payload = {"sub": str(sub), "typ": "access"}
    if extra:
        payload.update(extra)
    if expires_delta is not None:
        exp = _utcnow() + expires_delta
    else:
        exp = _exp_in(get_settings().access_token_expire_minutes)
    return _make_jwt(payload, exp)


def verify_access_token(token: str) -> Dict[str, Any]:
    """
    유효한 Access Token이면 payload(dict)를 반환,
    서명 불일치·만료·type 오류가 나면 JWTError를 던진다.
    """
    payload = _decode(token)
    if payload.get("typ") != "access":
        raise JWTError("Invalid token type")
    if "sub" not in payload:
        raise JWTError("Missing sub")
    return payload


def decode_access_token(token: str):
    """verify_access_token 과 동일 기능. 실패 시 None."""
    try:
        return verify_access_token(token)
    except JWTError:
        return None


def token_expired(token: str, now: datetime | None = None) -> bool:
    """
    Client-side expiry check: reads `exp` without verifying the signature
    (the client does not hold the signing key). Unreadable tokens count as expired.
    """
    try:
        claims = jwt.get_unverified_claims(token)
    except JWTError:
        return True
    exp = claims.get("exp")
    if exp is None:
        return False
    now = now or _utcnow()
    return int(exp) <= int(now.timestamp())
