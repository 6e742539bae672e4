import logging
from functools import lru_cache
from uuid import UUID

from fastapi import Depends

from app.backend.backends.base import PersistenceBackend
from app.backend.core.config import Settings, get_settings
from app.backend.dependencies.auth import get_current_user
from app.backend.services.auth_service import AuthStore
from app.backend.services.task_service import TaskStore

log = logging.getLogger(__name__)


def build_backend(settings: Settings) -> PersistenceBackend:
    """Pick the persistence backend once, from configuration."""
    kind = settings.storage_backend
    if kind == "sql":
        from app.backend.backends.sql import SqlBackend
        from app.db.session import create_all_tables, engine_for

        bind = engine_for(settings.database_url)
        if settings.auto_create_tables:
            create_all_tables(bind)
        log.info("persistence backend: sql")
        return SqlBackend(bind)
    if kind == "local":
        from app.backend.backends.local import LocalBackend
        from app.db.local_store import LocalKeyValueStore

        log.info("persistence backend: local (%s)", settings.local_store_path)
        return LocalBackend(
            LocalKeyValueStore(settings.local_store_path, namespace=settings.local_store_namespace)
        )
    raise RuntimeError("STORAGE_BACKEND must be one of local|sql")


@lru_cache(maxsize=1)
def get_backend() -> PersistenceBackend:
    return build_backend(get_settings())


def get_auth_store(backend: PersistenceBackend = Depends(get_backend)) -> AuthStore:
    # 서버 쪽은 stateless: 세션 포인터는 클라이언트가 보관
    return AuthStore(backend)


def get_task_store(
    owner_id: UUID = Depends(get_current_user),
    backend: PersistenceBackend = Depends(get_backend),
) -> TaskStore:
    return TaskStore(backend, owner_id)
