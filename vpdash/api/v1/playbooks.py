"""Playbooks — saved call lists, including AI-generated gap playbooks."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from vpdash.api.deps import (
    Auth,
    CurrentTenant,
    Session,
    Store,
    require_credits,
    require_feature_limit,
    require_permission,
)
from vpdash.core.plans import AIActionType, Feature
from vpdash.models.credit import CreditMetadata
from vpdash.models.playbook import (
    PlaybookCreate,
    PlaybookGenerate,
    PlaybookGenerated,
    PlaybookRead,
)
from vpdash.models.task import Task, TaskRead
from vpdash.services.credits import CreditCheckResult, deduct_credits
from vpdash.services.playbook_generator import create_gap_playbook, find_gap_targets

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/playbooks", tags=["playbooks"])


@router.post(
    "",
    response_model=PlaybookRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[
        Depends(require_permission("write")),
        Depends(require_feature_limit(Feature.PLAYBOOKS)),
    ],
)
async def create_playbook(body: PlaybookCreate, auth: Auth, store: Store) -> PlaybookRead:
    playbook = await store.create_playbook({
        **body.model_dump(),
        "generated_by": str(auth.user_id),
        "task_count": 0,
    })
    return PlaybookRead.model_validate(playbook)


@router.post(
    "/generate",
    response_model=PlaybookGenerated,
    status_code=status.HTTP_201_CREATED,
    dependencies=[
        Depends(require_permission("write")),
        Depends(require_feature_limit(Feature.PLAYBOOKS)),
    ],
)
async def generate_playbook(
    body: PlaybookGenerate,
    auth: Auth,
    tenant: CurrentTenant,
    session: Session,
    store: Store,
    _credits: Annotated[
        CreditCheckResult, Depends(require_credits(AIActionType.GENERATE_PLAYBOOK))
    ],
) -> PlaybookGenerated:
    """Build a playbook from the accounts with the largest category gaps.

    Credits are charged only after the playbook and its tasks exist.
    """
    targets = await find_gap_targets(
        store,
        segment=body.segment,
        min_gap_pct=body.min_gap_pct,
        max_accounts=body.max_accounts,
    )
    if not targets:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="No accounts with category gaps match these filters",
        )

    playbook, tasks = await create_gap_playbook(
        store, body, targets, generated_by=str(auth.user_id)
    )

    charge = await deduct_credits(
        session,
        tenant.id,
        tenant.plan_type,
        AIActionType.GENERATE_PLAYBOOK,
        CreditMetadata(description=f"Playbook '{playbook.name}' with {len(tasks)} tasks"),
    )
    if not charge.success:
        logger.warning(
            "Playbook %s generated for tenant %s but not charged: %s",
            playbook.id, tenant.id, charge.error,
        )

    return PlaybookGenerated(
        **PlaybookRead.model_validate(playbook).model_dump(),
        credits_remaining=charge.credits_remaining,
    )


@router.get("", response_model=list[PlaybookRead])
async def list_playbooks(store: Store) -> list[PlaybookRead]:
    return [PlaybookRead.model_validate(p) for p in await store.get_playbooks()]


@router.get("/{playbook_id}", response_model=PlaybookRead)
async def get_playbook(playbook_id: int, store: Store) -> PlaybookRead:
    playbook = await store.get_playbook(playbook_id)
    if playbook is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Playbook not found")
    return PlaybookRead.model_validate(playbook)


@router.get("/{playbook_id}/tasks", response_model=list[TaskRead])
async def list_playbook_tasks(playbook_id: int, store: Store) -> list[TaskRead]:
    if await store.get_playbook(playbook_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Playbook not found")
    links = await store.get_playbook_tasks(playbook_id)
    tasks = await store.tasks.batch(Task.id, [link.task_id for link in links])
    return [TaskRead.model_validate(t) for t in tasks]
