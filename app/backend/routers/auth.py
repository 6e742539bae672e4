from __future__ import annotations

import os
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from fastapi.security import OAuth2PasswordRequestForm

from app.backend.core.tokens import access_token_ttl_seconds
from app.backend.dependencies.auth import get_current_user
from app.backend.dependencies.stores import get_auth_store
from app.backend.schemas.auth import AuthResponse, LoginRequest, SignupRequest, UserRead
from app.backend.services.auth_service import AuthResult, AuthStore

auth_router = APIRouter(prefix="/api/auth", tags=["auth"])

# ──────────────────────────────────────────────────────────────────────────────
# 환경변수 & 상수
# ──────────────────────────────────────────────────────────────────────────────
# AT를 쿠키로도 내려줄지(웹 혼용 환경에서만 권장; 기본 False)
AUTH_SET_COOKIE_ON_POST = os.getenv("AUTH_SET_COOKIE_ON_POST", "false").lower() == "true"
COOKIE_SECURE = os.getenv("COOKIE_SECURE", "false").lower() == "true"  # 배포시 true 권장


# ──────────────────────────────────────────────────────────────────────────────
# 내부 헬퍼
# ──────────────────────────────────────────────────────────────────────────────
def _set_access_cookie_if_enabled(response: Response, jwt_token: str) -> None:
    """
    Access Token을 쿠키로도 내려야 하는 환경(웹)에서만 사용.
    기본값은 False이며, 보안상 AT는 클라이언트 세션 포인터에 보관.
    """
    if response is not None and AUTH_SET_COOKIE_ON_POST:
        response.set_cookie(
            key="access_token",
            value=jwt_token,
            httponly=True,
            secure=COOKIE_SECURE,
            max_age=access_token_ttl_seconds(),
            path="/",
        )


def _build_auth_response(result: AuthResult) -> AuthResponse:
    return AuthResponse(
        user=result.user,
        token=result.token,
        expires_in=access_token_ttl_seconds(),
    )


# ──────────────────────────────────────────────────────────────────────────────
# 이메일/비밀번호 인증
# ──────────────────────────────────────────────────────────────────────────────
@auth_router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def signup(
    body: SignupRequest,
    response: Response,
    auth: AuthStore = Depends(get_auth_store),
):
    result = auth.signup(body.email, body.password, body.name)
    _set_access_cookie_if_enabled(response, result.token)
    return _build_auth_response(result)


@auth_router.post("/login", response_model=AuthResponse)
def login(
    body: LoginRequest,
    response: Response,
    auth: AuthStore = Depends(get_auth_store),
):
    result = auth.login(body.email, body.password)
    _set_access_cookie_if_enabled(response, result.token)
    return _build_auth_response(result)


@auth_router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(response: Response, auth: AuthStore = Depends(get_auth_store)):
    """
    토큰은 stateless(JWT, 만료 시각 포함)라서 서버에서 지울 것은 쿠키뿐.
    클라이언트는 자신의 세션 포인터를 비운다.
    """
    auth.logout()
    response.delete_cookie("access_token", path="/")
    response.status_code = status.HTTP_204_NO_CONTENT
    return response


@auth_router.get("/me", response_model=UserRead)
def me(
    user_id: UUID = Depends(get_current_user),
    auth: AuthStore = Depends(get_auth_store),
):
    return auth.current_user(user_id)


# ──────────────────────────────────────────────────────────────────────────────
# Swagger "Authorize" 버튼용 OAuth2 password form (username = email)
# ──────────────────────────────────────────────────────────────────────────────
@auth_router.post("/token")
def login_for_access_token(
    response: Response,
    form_data: OAuth2PasswordRequestForm = Depends(),
    auth: AuthStore = Depends(get_auth_store),
):
    result = auth.login(form_data.username, form_data.password)
    _set_access_cookie_if_enabled(response, result.token)
    return {
        "access_token": result.token,
        "token_type": "bearer",
        "expires_in": access_token_ttl_seconds(),
    }
