"""Dashboard and prompt analytics reads."""

from __future__ import annotations

from prompt_mock.core.errors import NotFoundError, ValidationError
from prompt_mock.core.models import DashboardOverview, PromptAnalytics
from prompt_mock.core.store import EntityStore

DEFAULT_RANGE_DAYS = 30


def dashboard_overview(store: EntityStore, tenant_id: str | None) -> DashboardOverview:
    """The tenant's dashboard payload with a live prompt count."""
    overview = store.dashboard.get(tenant_id or "")
    if overview is None:
        raise NotFoundError("Tenant not found")
    result = overview.model_copy(deep=True)
    result.stats.total_prompts.value = len(store.tenant_prompts(tenant_id))
    return result


def parse_range(raw: str | None) -> int:
    if raw is None or raw == "":
        return DEFAULT_RANGE_DAYS
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"Invalid range: {raw}")


def prompt_analytics(store: EntityStore, tenant_id: str | None, range_days: int) -> PromptAnalytics:
    dataset = store.analytics.get(tenant_id or "", {}).get(range_days)
    if dataset is None:
        raise NotFoundError("Analytics not found")
    return dataset
