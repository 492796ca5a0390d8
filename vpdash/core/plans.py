"""Centralized plan configuration.

Single source of truth for feature limits, AI credit allowances, AI action
costs and the plan hierarchy. Every table here is a read-only mapping so no
request can mutate another request's view of a plan.
"""

from enum import StrEnum
from types import MappingProxyType
from typing import Any, Mapping

from vpdash.core.errors import PlanConfigurationError

UNLIMITED = -1


class PlanType(StrEnum):
    FREE = "free"
    STARTER = "starter"
    GROWTH = "growth"
    PROFESSIONAL = "professional"
    SCALE = "scale"
    ENTERPRISE = "enterprise"


class SubscriptionStatus(StrEnum):
    NONE = "none"
    TRIALING = "trialing"
    ACTIVE = "active"
    PAST_DUE = "past_due"
    CANCELED = "canceled"
    UNPAID = "unpaid"


ACTIVE_SUBSCRIPTION_STATUSES = frozenset(
    {SubscriptionStatus.ACTIVE, SubscriptionStatus.TRIALING}
)


class Feature(StrEnum):
    PLAYBOOKS = "playbooks"
    ICPS = "icps"
    ENROLLED_ACCOUNTS = "enrolled_accounts"
    ACCOUNTS = "accounts"
    USERS = "users"


class AIActionType(StrEnum):
    GENERATE_PLAYBOOK = "generate_playbook"
    ASK_ANYTHING = "ask_anything"
    ACCOUNT_DOSSIER = "account_dossier"
    EMAIL_COMPOSER = "email_composer"
    EMAIL_ANALYSIS = "email_analysis"
    DAILY_BRIEFING = "daily_briefing"
    WEEKLY_REVIEW = "weekly_review"
    ICP_SUGGESTION = "icp_suggestion"


# Feature caps for tenants without a paid plan.
DEFAULT_FREE_LIMITS: Mapping[str, int] = MappingProxyType({
    Feature.PLAYBOOKS: 1,
    Feature.ICPS: 1,
    Feature.ENROLLED_ACCOUNTS: 1,
    Feature.ACCOUNTS: UNLIMITED,
    Feature.USERS: 1,
})

# Monthly AI credit allowance per plan.
PLAN_CREDIT_ALLOWANCES: Mapping[str, int] = MappingProxyType({
    PlanType.FREE: 100,
    PlanType.STARTER: 25,
    PlanType.GROWTH: 500,
    PlanType.PROFESSIONAL: UNLIMITED,
    PlanType.SCALE: 2000,
    PlanType.ENTERPRISE: UNLIMITED,
})

AI_ACTION_CREDITS: Mapping[str, int] = MappingProxyType({
    AIActionType.GENERATE_PLAYBOOK: 10,
    AIActionType.ASK_ANYTHING: 1,
    AIActionType.ACCOUNT_DOSSIER: 5,
    AIActionType.EMAIL_COMPOSER: 2,
    AIActionType.EMAIL_ANALYSIS: 1,
    AIActionType.DAILY_BRIEFING: 3,
    AIActionType.WEEKLY_REVIEW: 5,
    AIActionType.ICP_SUGGESTION: 5,
})

AI_ACTION_LABELS: Mapping[str, str] = MappingProxyType({
    AIActionType.GENERATE_PLAYBOOK: "Generate Playbook",
    AIActionType.ASK_ANYTHING: "Ask Anything",
    AIActionType.ACCOUNT_DOSSIER: "Account Dossier",
    AIActionType.EMAIL_COMPOSER: "Email Composer",
    AIActionType.EMAIL_ANALYSIS: "Email Analysis",
    AIActionType.DAILY_BRIEFING: "Daily Briefing",
    AIActionType.WEEKLY_REVIEW: "Weekly Account Review",
    AIActionType.ICP_SUGGESTION: "ICP Suggestion",
})

# growth and professional sit on the same rung.
PLAN_HIERARCHY: Mapping[str, int] = MappingProxyType({
    PlanType.FREE: 0,
    PlanType.STARTER: 1,
    PlanType.GROWTH: 2,
    PlanType.PROFESSIONAL: 2,
    PlanType.SCALE: 3,
    PlanType.ENTERPRISE: 4,
})


def plan_rank(plan_type: str | None) -> int:
    """Rank of a plan in the hierarchy. ``None`` ranks as free."""
    try:
        return PLAN_HIERARCHY[plan_type or PlanType.FREE]
    except KeyError:
        raise PlanConfigurationError(plan_type, "not in the plan hierarchy") from None


def is_unlimited(value: int) -> bool:
    return value == UNLIMITED


# Paid plans published to the registry table by ``sync_plans``.
CURRENT_PLANS: tuple[Mapping[str, Any], ...] = (
    MappingProxyType({
        "name": "Starter",
        "slug": PlanType.STARTER,
        "monthly_price": 0,
        "yearly_price": 0,
        "features": (
            "1 user",
            "25 AI credits / month",
            "1 enrolled account",
            "Basic gap analysis",
            "Standard playbooks",
        ),
        "limits": MappingProxyType({
            "accounts": 1, "users": 1, "enrolled_accounts": 1,
            "playbooks": 1, "icps": 1,
            "ai_credits": PLAN_CREDIT_ALLOWANCES[PlanType.STARTER],
        }),
        "display_order": 1,
    }),
    MappingProxyType({
        "name": "Growth",
        "slug": PlanType.GROWTH,
        "monthly_price": 2400,
        "yearly_price": 24000,
        "features": (
            "Up to 5 users",
            "500 AI credits / month",
            "Up to 20 enrolled accounts",
            "AI gap analysis & playbooks",
            "ICP Builder",
        ),
        "limits": MappingProxyType({
            "accounts": UNLIMITED, "users": 5, "enrolled_accounts": 20,
            "playbooks": UNLIMITED, "icps": 3,
            "ai_credits": PLAN_CREDIT_ALLOWANCES[PlanType.GROWTH],
        }),
        "display_order": 2,
    }),
    MappingProxyType({
        "name": "Professional",
        "slug": PlanType.PROFESSIONAL,
        "monthly_price": 3500,
        "yearly_price": 35000,
        "features": (
            "Up to 10 users",
            "Unlimited AI credits",
            "Up to 50 enrolled accounts",
            "Email intelligence",
        ),
        "limits": MappingProxyType({
            "accounts": UNLIMITED, "users": 10, "enrolled_accounts": 50,
            "playbooks": UNLIMITED, "icps": 10,
            "ai_credits": PLAN_CREDIT_ALLOWANCES[PlanType.PROFESSIONAL],
        }),
        "display_order": 3,
    }),
    MappingProxyType({
        "name": "Scale",
        "slug": PlanType.SCALE,
        "monthly_price": 5000,
        "yearly_price": 50000,
        "features": (
            "Up to 20 users",
            "2,000 AI credits / month",
            "Unlimited enrolled accounts",
            "Agentic daily briefings",
        ),
        "limits": MappingProxyType({
            "accounts": UNLIMITED, "users": 20, "enrolled_accounts": UNLIMITED,
            "playbooks": UNLIMITED, "icps": UNLIMITED,
            "ai_credits": PLAN_CREDIT_ALLOWANCES[PlanType.SCALE],
        }),
        "display_order": 4,
    }),
    MappingProxyType({
        "name": "Enterprise",
        "slug": PlanType.ENTERPRISE,
        "monthly_price": 0,
        "yearly_price": 0,
        "features": (
            "Unlimited users",
            "Unlimited AI credits",
            "Everything in Scale",
            "SSO & advanced security",
        ),
        "limits": MappingProxyType({
            "accounts": UNLIMITED, "users": UNLIMITED, "enrolled_accounts": UNLIMITED,
            "playbooks": UNLIMITED, "icps": UNLIMITED,
            "ai_credits": PLAN_CREDIT_ALLOWANCES[PlanType.ENTERPRISE],
        }),
        "display_order": 5,
    }),
)
