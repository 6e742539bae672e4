# app/backend/backends/sql.py
from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import select

from app.backend.core.errors import DuplicateEmailError, NetworkOrStorageError
from app.backend.models.task import Task
from app.backend.models.user import User
from app.db.session import session_scope

logger = logging.getLogger(__name__)


class SqlBackend:
    """
    SQLModel backend (SQLite / Postgres).

    Each method opens its own session; the database serializes writes per row.
    Returned instances are detached but fully loaded.
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def _storage_error(self, op: str, exc: Exception) -> NetworkOrStorageError:
        logger.error("SQL backend %s failed | %s", op, exc)
        return NetworkOrStorageError("Database unavailable")

    # ---- users ----

    def find_user_by_email(self, email: str) -> User | None:
        try:
            with session_scope(self._engine) as db:
                return db.exec(select(User).where(User.email == email)).first()
        except SQLAlchemyError as exc:
            raise self._storage_error("find_user_by_email", exc) from exc

    def find_user_by_id(self, user_id: UUID) -> User | None:
        try:
            with session_scope(self._engine) as db:
                return db.get(User, user_id)
        except SQLAlchemyError as exc:
            raise self._storage_error("find_user_by_id", exc) from exc

    def insert_user(self, user: User) -> User:
        try:
            with session_scope(self._engine) as db:
                db.add(user)
                db.commit()
                db.refresh(user)
                return user
        except IntegrityError as exc:
            # unique index on user.email
            raise DuplicateEmailError() from exc
        except SQLAlchemyError as exc:
            raise self._storage_error("insert_user", exc) from exc

    # ---- tasks ----

    def list_tasks_by_owner(self, owner_id: UUID) -> list[Task]:
        stmt = (
            select(Task)
            .where(Task.user_id == owner_id)
            .order_by(Task.created_at.desc())
        )
        try:
            with session_scope(self._engine) as db:
                return list(db.exec(stmt).all())
        except SQLAlchemyError as exc:
            raise self._storage_error("list_tasks_by_owner", exc) from exc

    def get_task(self, owner_id: UUID, task_id: UUID) -> Task | None:
        try:
            with session_scope(self._engine) as db:
                task = db.get(Task, task_id)
        except SQLAlchemyError as exc:
            raise self._storage_error("get_task", exc) from exc
        if not task or task.user_id != owner_id:
            return None
        return task

    def insert_task(self, task: Task) -> Task:
        try:
            with session_scope(self._engine) as db:
                db.add(task)
                db.commit()
                db.refresh(task)
                return task
        except SQLAlchemyError as exc:
            raise self._storage_error("insert_task", exc) from exc

    def update_task_by_id(self, owner_id: UUID, task_id: UUID, fields: dict[str, Any]) -> Task | None:
        try:
            with session_scope(self._engine) as db:
                task = db.get(Task, task_id)
                if not task or task.user_id != owner_id:
                    return None
                for key, value in fields.items():
                    setattr(task, key, value)
                db.add(task)
                db.commit()
                db.refresh(task)
                return task
        except SQLAlchemyError as exc:
            raise self._storage_error("update_task_by_id", exc) from exc

    def delete_task_by_id(self, owner_id: UUID, task_id: UUID) -> bool:
        try:
            with session_scope(self._engine) as db:
                task = db.get(Task, task_id)
                if not task or task.user_id != owner_id:
                    return False
                db.delete(task)
                db.commit()
                return True
        except SQLAlchemyError as exc:
            raise self._storage_error("delete_task_by_id", exc) from exc
