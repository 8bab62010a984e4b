"""Pydantic request models for intercepted payloads and the control plane."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import Field

from prompt_mock.core.models import ApprovalStatus, MockModel, ShareRole, ShareTargetType


# --- Tenants ---


class TenantCreate(MockModel):
    name: str = Field(..., min_length=1)
    slug: str = Field(..., min_length=1)


# --- Prompts ---


class PromptCreate(MockModel):
    tenant_id: str | None = None
    title: str
    body: str
    tags: list[str] = Field(default_factory=list)
    metadata: dict[str, Any] | None = None
    archived: bool = False
    created_by: str | None = None


class PromptUpdate(MockModel):
    """Partial update; omitted or null fields keep their current value."""

    tenant_id: str | None = None
    title: str | None = None
    body: str | None = None
    tags: list[str] | None = None
    metadata: dict[str, Any] | None = None
    archived: bool | None = None
    created_by: str | None = None


# --- Collaboration ---


class CommentCreate(MockModel):
    body: str = Field(..., min_length=1)
    parent_id: str | None = None
    created_by: str | None = None


class CommentUpdate(MockModel):
    body: str | None = None
    resolved: bool | None = None


class ShareCreate(MockModel):
    target_type: ShareTargetType
    target_identifier: str = Field(..., min_length=1)
    role: ShareRole
    expires_at: datetime | None = None
    created_by: str | None = None


class ApprovalCreate(MockModel):
    approver: str = Field(..., min_length=1)
    message: str | None = None
    requested_by: str | None = None


class ApprovalUpdate(MockModel):
    status: ApprovalStatus | None = None
    message: str | None = None


# --- Control plane ---


class FailureConfig(MockModel):
    """Set the failure budget for one capability key."""

    capability: str
    count: int = Field(..., ge=0)
    tenant_id: str | None = None
    sub_key: str | int | None = None


class ResetRequest(MockModel):
    seed: bool | None = None
