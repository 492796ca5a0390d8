"""Integration errors raised by the storage and metering layer.

Business conditions (limits reached, credits exhausted) are returned as
result objects. These exceptions signal a caller bug instead.
"""


class ConfigurationError(RuntimeError):
    """Base class for misconfigured tenant or plan wiring."""


class TenantConfigurationError(ConfigurationError):
    def __init__(self, tenant_id: object, reason: str) -> None:
        self.tenant_id = tenant_id
        super().__init__(f"Invalid tenant id {tenant_id!r}: {reason}")


class PlanConfigurationError(ConfigurationError):
    def __init__(self, plan_type: object, reason: str = "unknown plan") -> None:
        self.plan_type = plan_type
        super().__init__(f"Plan {plan_type!r} cannot be resolved: {reason}")
