# app/backend/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlmodel import text
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.backend.core.config import get_settings
from app.backend.core.errors import AppError
from app.backend.core.logging_config import setup_logging
from app.db.session import create_all_tables, engine

# 라우터
from app.backend.routers import auth, task

settings = get_settings()
setup_logging(settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    # Migration is a deployment concern (alembic); auto-create is for SQLite/dev.
    if settings.storage_backend == "sql" and settings.auto_create_tables:
        create_all_tables()
    yield


app = FastAPI(
    title="Taskboard Backend",
    version=settings.app_version,
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ──────────────────────────────────────────────────────────────────────────────
# 에러 응답: 항상 {"error": "<message>"}
# ──────────────────────────────────────────────────────────────────────────────
@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("%s %s -> %s | %s", request.method, request.url.path, exc.status_code, exc.message)
    else:
        logger.info("%s %s -> %s | %s", request.method, request.url.path, exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
    else:
        message = "Invalid request"
    return JSONResponse(status_code=400, content={"error": message})


# 라우터 등록
app.include_router(auth.auth_router)
app.include_router(task.router)


@app.get("/health")
def health_app():
    return {"ok": True}


@app.get("/health/db")
def health_db():
    if settings.storage_backend != "sql":
        return {"ok": True, "backend": settings.storage_backend}
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return {"ok": True, "backend": "sql"}
    except Exception:
        logger.exception("DB health check failed")
        raise HTTPException(status_code=503, detail="Database connection failed")
