from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from app.backend.models.task import TaskStatus


class TaskCreate(BaseModel):
    # 공백 검사는 TaskStore.create에서 (로컬/서버 공통 규칙)
    title: str
    description: str
    status: TaskStatus = TaskStatus.PENDING


class TaskUpdate(BaseModel):
    """Partial update: only fields present in the request body are merged."""
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[TaskStatus] = None


class TaskRead(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    id: UUID
    title: str
    description: str
    status: TaskStatus
    created_at: datetime
    updated_at: datetime
