"""Gap playbooks — turn the largest category gaps into a call list."""

import logging
from dataclasses import dataclass, field

from vpdash.models.account import Account, AccountCategoryGap
from vpdash.models.playbook import Playbook, PlaybookGenerate
from vpdash.models.task import Task
from vpdash.services.tenant_storage import TenantStorage

logger = logging.getLogger(__name__)

# Gaps mentioned per task
GAPS_PER_TASK = 3


@dataclass
class GapTarget:
    account: Account
    gaps: list[AccountCategoryGap] = field(default_factory=list)
    opportunity_score: float = 0.0

    @property
    def estimated_opportunity(self) -> float:
        return sum(g.estimated_opportunity or 0.0 for g in self.gaps)


async def find_gap_targets(
    store: TenantStorage,
    segment: str | None = None,
    min_gap_pct: float = 0.0,
    max_accounts: int = 10,
) -> list[GapTarget]:
    """Accounts with open category gaps, best opportunity first.

    Metrics and gaps are fetched with one batch query each regardless of
    how many accounts the tenant has.
    """
    criteria = [Account.status == "active"]
    if segment:
        criteria.append(Account.segment == segment)
    accounts = await store.accounts.list(*criteria)
    if not accounts:
        return []

    ids = [a.id for a in accounts]
    gaps_by_account = await store.get_account_category_gaps_batch(ids)
    metrics_by_account = await store.get_account_metrics_batch(ids)

    targets = []
    for account in accounts:
        gaps = [
            g for g in gaps_by_account.get(account.id, [])
            if g.gap_pct is not None and g.gap_pct > 0 and g.gap_pct >= min_gap_pct
        ]
        if not gaps:
            continue
        metrics = metrics_by_account.get(account.id)
        score = metrics.opportunity_score if metrics and metrics.opportunity_score else 0.0
        targets.append(GapTarget(account=account, gaps=gaps, opportunity_score=score))

    targets.sort(key=lambda t: (t.opportunity_score, t.gaps[0].gap_pct), reverse=True)
    return targets[:max_accounts]


def _describe(target: GapTarget, category_names: dict[int, str]) -> tuple[str, str, list[dict]]:
    top = target.gaps[:GAPS_PER_TASK]
    names = [category_names.get(g.category_id, f"Category {g.category_id}") for g in top]
    title = f"Review {', '.join(names)} with {target.account.name}"
    lines = [
        f"- {name}: {g.gap_pct:.1f}% below expected mix"
        + (f", ~${g.estimated_opportunity:,.0f} opportunity" if g.estimated_opportunity else "")
        for name, g in zip(names, top)
    ]
    description = "Category gaps:\n" + "\n".join(lines)
    gap_categories = [
        {
            "category_id": g.category_id,
            "category_name": name,
            "gap_pct": g.gap_pct,
            "estimated_opportunity": g.estimated_opportunity,
        }
        for name, g in zip(names, top)
    ]
    return title[:500], description, gap_categories


async def create_gap_playbook(
    store: TenantStorage,
    request: PlaybookGenerate,
    targets: list[GapTarget],
    generated_by: str | None = None,
) -> tuple[Playbook, list[Task]]:
    category_names = {c.id: c.name for c in await store.get_product_categories()}

    playbook = await store.create_playbook({
        "name": request.name,
        "generated_by": generated_by,
        "filters_used": {
            "segment": request.segment,
            "min_gap_pct": request.min_gap_pct,
            "max_accounts": request.max_accounts,
        },
        "task_count": 0,
    })

    tasks = []
    for target in targets:
        title, description, gap_categories = _describe(target, category_names)
        task = await store.create_task({
            "account_id": target.account.id,
            "playbook_id": playbook.id,
            "assigned_tm": target.account.assigned_tm,
            "task_type": "call",
            "title": title,
            "description": description,
            "gap_categories": gap_categories,
        })
        await store.create_playbook_task({"playbook_id": playbook.id, "task_id": task.id})
        tasks.append(task)

    playbook = await store.playbooks.update(playbook.id, {"task_count": len(tasks)})
    logger.info(
        "Generated playbook %s for tenant %s with %d tasks",
        playbook.id, store.tenant_id, len(tasks),
    )
    return playbook, tasks
