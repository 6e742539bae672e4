# app/routers/task.py

from fastapi import APIRouter, Depends, Response, status

from app.backend.dependencies.stores import get_task_store
from app.backend.schemas.task import TaskCreate, TaskRead, TaskUpdate
from app.backend.services.task_service import TaskStore

router = APIRouter(prefix="/api/tasks", tags=["Tasks"])


@router.get("", response_model=list[TaskRead])
def get_all_tasks(store: TaskStore = Depends(get_task_store)):
    return store.list_all()


@router.post("", response_model=TaskRead, status_code=status.HTTP_201_CREATED)
def create_task(body: TaskCreate, store: TaskStore = Depends(get_task_store)):
    return store.create(body.title, body.description, body.status)


@router.get("/{task_id}", response_model=TaskRead)
def get_task(task_id: str, store: TaskStore = Depends(get_task_store)):
    return store.get(task_id)


@router.put("/{task_id}", response_model=TaskRead)
def update_task(task_id: str, body: TaskUpdate, store: TaskStore = Depends(get_task_store)):
    # 요청에 포함된 필드만 병합
    return store.update(task_id, body.model_dump(exclude_unset=True))


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task(task_id: str, store: TaskStore = Depends(get_task_store)):
    store.delete(task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
