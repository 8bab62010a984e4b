"""Entity models held by the mock store.

All models serialise with camelCase aliases so the wire shape matches the
live API (``createdAt``, ``tenantId`` ...). Python code uses snake_case.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

SortField = Literal["created_at", "updated_at", "title"]
SortOrder = Literal["asc", "desc"]
ShareTargetType = Literal["user", "email", "tenant"]
ShareRole = Literal["viewer", "editor", "approver"]
ApprovalStatus = Literal["pending", "approved", "rejected", "changes_requested"]


class MockModel(BaseModel):
    """Base model with camelCase wire aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        """JSON-ready dict using the wire field names."""
        return self.model_dump(mode="json", by_alias=True)


# --- Tenants ---


class Tenant(MockModel):
    id: str
    name: str
    slug: str
    created_at: datetime


class TenantSummary(MockModel):
    id: str
    name: str
    slug: str

    @classmethod
    def of(cls, tenant: Tenant) -> TenantSummary:
        return cls(id=tenant.id, name=tenant.name, slug=tenant.slug)


# --- Prompts ---


class PromptVersion(MockModel):
    """Immutable snapshot of a prompt's content at one version."""

    version: int
    title: str
    body: str
    tags: list[str]
    metadata: dict[str, Any] | None
    created_at: datetime
    created_by: str | None


class Prompt(MockModel):
    id: str
    tenant_id: str
    title: str
    body: str
    tags: list[str] = Field(default_factory=list)
    metadata: dict[str, Any] | None = None
    created_at: datetime
    updated_at: datetime
    version: int = Field(default=1, ge=1)
    archived: bool = False
    created_by: str | None = None

    def snapshot(self, created_at: datetime, created_by: str | None = None) -> PromptVersion:
        """Capture the current content as a version snapshot."""
        return PromptVersion(
            version=self.version,
            title=self.title,
            body=self.body,
            tags=list(self.tags),
            metadata=dict(self.metadata) if self.metadata is not None else None,
            created_at=created_at,
            created_by=created_by if created_by is not None else self.created_by,
        )


# --- Collaboration ---


class PromptComment(MockModel):
    id: str
    prompt_id: str
    tenant_id: str
    parent_id: str | None = None
    body: str
    created_by: str
    created_at: datetime
    updated_at: datetime
    resolved: bool = False


class PromptShare(MockModel):
    id: str
    prompt_id: str
    tenant_id: str
    target_type: ShareTargetType
    target_identifier: str
    role: ShareRole
    created_by: str
    created_at: datetime
    expires_at: datetime | None = None


class PromptApproval(MockModel):
    id: str
    prompt_id: str
    tenant_id: str
    requested_by: str
    approver: str
    status: ApprovalStatus = "pending"
    message: str | None = None
    created_at: datetime
    updated_at: datetime


class PromptActivityEntry(MockModel):
    id: str
    prompt_id: str
    tenant_id: str
    actor: str | None
    action: str
    metadata: dict[str, Any] | None = None
    created_at: datetime


class NotificationItem(MockModel):
    id: str
    tenant_id: str | None
    recipient: str
    type: str
    message: str
    metadata: dict[str, Any] | None = None
    read_at: datetime | None = None
    created_at: datetime


# --- Analytics ---


class DashboardMetric(MockModel):
    value: int
    previous: int | None = None


class DashboardStats(MockModel):
    total_prompts: DashboardMetric
    usage_today: DashboardMetric
    usage_this_week: DashboardMetric
    active_prompts: DashboardMetric
    recently_updated: DashboardMetric

    @classmethod
    def empty(cls) -> DashboardStats:
        zero = DashboardMetric(value=0, previous=0)
        return cls(
            total_prompts=zero,
            usage_today=zero,
            usage_this_week=zero,
            active_prompts=zero,
            recently_updated=zero,
        )


class TrendPoint(MockModel):
    date: datetime
    count: int


class PromptUsageEntry(MockModel):
    prompt_id: str
    title: str
    version: int
    usage_count: int
    last_used: datetime | None = None


class DashboardOverview(MockModel):
    tenant: TenantSummary
    range_days: int = 14
    stats: DashboardStats
    trend: list[TrendPoint] = Field(default_factory=list)
    top_prompts: list[PromptUsageEntry] = Field(default_factory=list)


class PromptAnalytics(MockModel):
    data: list[PromptUsageEntry] = Field(default_factory=list)
    tenant: TenantSummary
    range_days: int
