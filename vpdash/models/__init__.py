"""Import all models so SQLModel.metadata picks them up."""

from vpdash.models.account import (
    Account,
    AccountCategoryGap,
    AccountCategoryGapRead,
    AccountCreate,
    AccountMetrics,
    AccountRead,
    AccountUpdate,
)
from vpdash.models.api_token import ApiToken
from vpdash.models.catalog import CustomCategory, Product, ProductCategory
from vpdash.models.credit import (
    ActionBreakdown,
    CreditLedger,
    CreditMetadata,
    CreditTransaction,
    CreditTransactionRead,
    CreditUsageRead,
)
from vpdash.models.data_upload import DataUpload
from vpdash.models.order import Order, OrderItem
from vpdash.models.plan import SubscriptionPlan, SubscriptionPlanRead
from vpdash.models.playbook import (
    Playbook,
    PlaybookCreate,
    PlaybookGenerate,
    PlaybookGenerated,
    PlaybookRead,
    PlaybookTask,
)
from vpdash.models.program import (
    ProgramAccount,
    ProgramAccountCreate,
    ProgramAccountRead,
    ProgramAccountUpdate,
    RevShareTier,
)
from vpdash.models.segment_profile import (
    ProfileCategory,
    ProfileReviewLog,
    SegmentProfile,
    SegmentProfileCreate,
    SegmentProfileRead,
    SegmentProfileUpdate,
)
from vpdash.models.setting import (
    ScoringWeights,
    ScoringWeightsRead,
    ScoringWeightsWrite,
    Setting,
    SettingRead,
    SettingWrite,
)
from vpdash.models.task import Task, TaskCreate, TaskPage, TaskRead, TaskUpdate
from vpdash.models.tenant import SubscriptionStatusRead, Tenant, TenantRead
from vpdash.models.territory import TerritoryManager
from vpdash.models.user import User, UserCreate, UserRead, UserRole

__all__ = [
    "Account",
    "AccountCategoryGap",
    "AccountCategoryGapRead",
    "AccountCreate",
    "AccountMetrics",
    "AccountRead",
    "AccountUpdate",
    "ActionBreakdown",
    "ApiToken",
    "CreditLedger",
    "CreditMetadata",
    "CreditTransaction",
    "CreditTransactionRead",
    "CreditUsageRead",
    "CustomCategory",
    "DataUpload",
    "Order",
    "OrderItem",
    "Playbook",
    "PlaybookCreate",
    "PlaybookGenerate",
    "PlaybookGenerated",
    "PlaybookRead",
    "PlaybookTask",
    "Product",
    "ProductCategory",
    "ProfileCategory",
    "ProfileReviewLog",
    "ProgramAccount",
    "ProgramAccountCreate",
    "ProgramAccountRead",
    "ProgramAccountUpdate",
    "RevShareTier",
    "ScoringWeights",
    "ScoringWeightsRead",
    "ScoringWeightsWrite",
    "SegmentProfile",
    "SegmentProfileCreate",
    "SegmentProfileRead",
    "SegmentProfileUpdate",
    "Setting",
    "SettingRead",
    "SettingWrite",
    "SubscriptionPlan",
    "SubscriptionPlanRead",
    "SubscriptionStatusRead",
    "Task",
    "TaskCreate",
    "TaskPage",
    "TaskRead",
    "TaskUpdate",
    "Tenant",
    "TenantRead",
    "TerritoryManager",
    "User",
    "UserCreate",
    "UserRead",
    "UserRole",
]
