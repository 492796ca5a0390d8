"""Tasks — follow-ups for territory managers, paged per tenant."""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from vpdash.api.deps import Store, require_permission
from vpdash.core.config import get_settings
from vpdash.models.task import Task, TaskCreate, TaskPage, TaskRead, TaskUpdate

router = APIRouter(prefix="/tasks", tags=["tasks"])

settings = get_settings()


@router.get("", response_model=TaskPage)
async def list_tasks(
    store: Store,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=settings.default_page_size, ge=1, le=settings.max_page_size),
    account_id: int | None = None,
) -> TaskPage:
    if account_id is not None:
        result = await store.tasks.page(page, limit, Task.account_id == account_id)
    else:
        result = await store.get_tasks(page=page, limit=limit)
    return TaskPage(
        tasks=[TaskRead.model_validate(t) for t in result.items],
        total=result.total,
        page=result.page,
        limit=result.limit,
    )


@router.post(
    "",
    response_model=TaskRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_permission("write"))],
)
async def create_task(body: TaskCreate, store: Store) -> TaskRead:
    if await store.get_account(body.account_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Account not found")
    if body.playbook_id is not None and await store.get_playbook(body.playbook_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Playbook not found")
    task = await store.create_task(body)
    return TaskRead.model_validate(task)


@router.get("/{task_id}", response_model=TaskRead)
async def get_task(task_id: int, store: Store) -> TaskRead:
    task = await store.get_task(task_id)
    if task is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    return TaskRead.model_validate(task)


@router.patch(
    "/{task_id}",
    response_model=TaskRead,
    dependencies=[Depends(require_permission("write"))],
)
async def update_task(task_id: int, body: TaskUpdate, store: Store) -> TaskRead:
    task = await store.update_task(task_id, body)
    if task is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    return TaskRead.model_validate(task)
