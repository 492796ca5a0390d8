"""Subscription and plan guards, and the bodies of guard rejections."""

from datetime import datetime

import pytest
from fastapi import HTTPException

from vpdash.api.deps import (
    check_active_subscription,
    check_plan,
    credit_limit_exceeded,
    feature_limit_exceeded,
    require_plan,
    subscription_info,
)
from vpdash.core.errors import PlanConfigurationError
from vpdash.core.plans import plan_rank
from vpdash.models.tenant import Tenant
from vpdash.services.credits import CreditCheckResult
from vpdash.services.feature_limits import LimitCheckResult


def _tenant(plan_type: str = "free", subscription_status: str = "none", **extra) -> Tenant:
    return Tenant(
        id=1,
        name="Acme Supply",
        slug="acme",
        plan_type=plan_type,
        subscription_status=subscription_status,
        **extra,
    )


# ── Active subscription ──────────────────────────────────────

@pytest.mark.parametrize("status", ["none", "canceled", "past_due"])
def test_free_plan_never_needs_subscription(status):
    check_active_subscription(_tenant("free", status))


@pytest.mark.parametrize("status", ["active", "trialing"])
def test_paid_plan_with_live_subscription_passes(status):
    check_active_subscription(_tenant("growth", status))


@pytest.mark.parametrize("status", ["past_due", "canceled", "unpaid", "none"])
def test_paid_plan_without_live_subscription_is_blocked(status):
    with pytest.raises(HTTPException) as exc_info:
        check_active_subscription(_tenant("growth", status))

    assert exc_info.value.status_code == 402
    assert exc_info.value.detail == {
        "message": "Active subscription required",
        "subscription_status": status,
        "plan_type": "growth",
    }


# ── Minimum plan ─────────────────────────────────────────────

def test_plan_hierarchy():
    assert plan_rank("free") < plan_rank("starter") < plan_rank("growth")
    assert plan_rank("growth") == plan_rank("professional")
    assert plan_rank("professional") < plan_rank("scale") < plan_rank("enterprise")
    assert plan_rank(None) == plan_rank("free")


@pytest.mark.parametrize("current", ["growth", "professional", "scale", "enterprise"])
def test_plan_at_or_above_minimum_passes(current):
    check_plan(_tenant(current, "active"), "growth")


def test_professional_satisfies_growth_and_vice_versa():
    check_plan(_tenant("growth", "active"), "professional")
    check_plan(_tenant("professional", "active"), "growth")


def test_plan_below_minimum_is_blocked():
    with pytest.raises(HTTPException) as exc_info:
        check_plan(_tenant("starter", "active"), "growth")

    assert exc_info.value.status_code == 403
    assert exc_info.value.detail == {
        "message": "growth plan or higher required",
        "current_plan": "starter",
        "required_plan": "growth",
    }


def test_misspelled_minimum_plan_fails_at_build_time():
    with pytest.raises(PlanConfigurationError):
        require_plan("grwoth")
    with pytest.raises(PlanConfigurationError):
        plan_rank("platinum")


def test_unknown_current_plan_is_not_ranked_as_free():
    with pytest.raises(PlanConfigurationError):
        check_plan(_tenant("platinum", "active"), "free")


# ── Subscription info ────────────────────────────────────────

def test_subscription_info():
    period_end = datetime(2025, 4, 30)
    info = subscription_info(_tenant("scale", "trialing", billing_period_end=period_end))
    assert info == {
        "is_active": True,
        "status": "trialing",
        "plan_type": "scale",
        "billing_period_end": period_end,
    }
    assert subscription_info(_tenant("growth", "past_due"))["is_active"] is False


# ── Rejection bodies ─────────────────────────────────────────

def test_feature_limit_rejection_body():
    exc = feature_limit_exceeded(LimitCheckResult(
        allowed=False, limit=1, current=1, feature="enrolled_accounts", plan_type="free",
    ))
    assert exc.status_code == 403
    assert exc.detail["error"] == "FEATURE_LIMIT_EXCEEDED"
    assert exc.detail["feature"] == "enrolled_accounts"
    assert exc.detail["limit"] == 1
    assert exc.detail["current"] == 1
    assert exc.detail["plan_type"] == "free"
    assert exc.detail["upgrade_required"] is True
    assert "1 enrolled accounts" in exc.detail["message"]


def test_credit_limit_rejection_body():
    exc = credit_limit_exceeded("generate_playbook", CreditCheckResult(
        allowed=False,
        credits_required=10,
        credits_remaining=4,
        credits_used=21,
        total_allowance=25,
        unlimited=False,
        action_label="Generate Playbook",
    ))
    assert exc.status_code == 403
    assert exc.detail["error"] == "CREDIT_LIMIT_EXCEEDED"
    assert exc.detail["action_type"] == "generate_playbook"
    assert exc.detail["credits_required"] == 10
    assert exc.detail["credits_remaining"] == 4
    assert exc.detail["total_allowance"] == 25
    assert exc.detail["upgrade_required"] is True
    assert '"Generate Playbook" requires 10 credits' in exc.detail["message"]
