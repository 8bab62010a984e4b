"""Authoritative in-memory collections for the mock backend."""

from __future__ import annotations

import threading
from typing import Any

from prompt_mock.core.errors import ConflictError, NotFoundError
from prompt_mock.core.ids import IdAllocator
from prompt_mock.core.models import (
    DashboardOverview,
    DashboardStats,
    NotificationItem,
    Prompt,
    PromptActivityEntry,
    PromptAnalytics,
    PromptApproval,
    PromptComment,
    PromptShare,
    PromptVersion,
    Tenant,
    TenantSummary,
)

ANALYTICS_RANGES = (7, 14, 30)


class EntityStore:
    """Tenants, their prompts, and everything hanging off a prompt.

    Prompts are kept in per-tenant lists (order matters for stable sorting)
    plus a global id index. Comments and approvals are additionally indexed by
    their own id so callers holding only that id avoid a full scan.

    ``lock`` is re-entrant; the interceptor holds it for the whole handling
    of a request.
    """

    def __init__(self, ids: IdAllocator | None = None) -> None:
        self.ids = ids or IdAllocator()
        self.lock = threading.RLock()
        self.tenants: dict[str, Tenant] = {}
        self.prompts_by_tenant: dict[str, list[Prompt]] = {}
        self.versions: dict[str, list[PromptVersion]] = {}
        self.comments: dict[str, list[PromptComment]] = {}
        self.shares: dict[str, list[PromptShare]] = {}
        self.approvals: dict[str, list[PromptApproval]] = {}
        self.activity: dict[str, list[PromptActivityEntry]] = {}
        self.notifications: list[NotificationItem] = []
        self.dashboard: dict[str, DashboardOverview] = {}
        self.analytics: dict[str, dict[int, PromptAnalytics]] = {}
        self._prompt_index: dict[str, Prompt] = {}
        self._comment_owner: dict[str, str] = {}
        self._approval_owner: dict[str, str] = {}

    def clear(self) -> None:
        """Drop every record and forget all issued ids."""
        with self.lock:
            self.tenants.clear()
            self.prompts_by_tenant.clear()
            self.versions.clear()
            self.comments.clear()
            self.shares.clear()
            self.approvals.clear()
            self.activity.clear()
            self.notifications.clear()
            self.dashboard.clear()
            self.analytics.clear()
            self._prompt_index.clear()
            self._comment_owner.clear()
            self._approval_owner.clear()
            self.ids.reset()

    # --- Tenants ---

    def add_tenant(
        self,
        tenant: Tenant,
        overview: DashboardOverview | None = None,
        analytics: dict[int, PromptAnalytics] | None = None,
    ) -> Tenant:
        """Register a tenant with an empty prompt partition and analytics."""
        if tenant.id in self.tenants:
            raise ConflictError(f"Tenant '{tenant.id}' already exists")
        summary = TenantSummary.of(tenant)
        self.ids.reserve(tenant.id)
        self.tenants[tenant.id] = tenant
        self.prompts_by_tenant.setdefault(tenant.id, [])
        self.dashboard[tenant.id] = overview or DashboardOverview(
            tenant=summary, range_days=14, stats=DashboardStats.empty()
        )
        self.analytics[tenant.id] = analytics or {
            days: PromptAnalytics(data=[], tenant=summary, range_days=days)
            for days in ANALYTICS_RANGES
        }
        return tenant

    def get_tenant(self, tenant_id: str) -> Tenant | None:
        return self.tenants.get(tenant_id)

    def list_tenants(self) -> list[Tenant]:
        return list(self.tenants.values())

    def find_tenant_by_slug(self, slug: str) -> Tenant | None:
        for tenant in self.tenants.values():
            if tenant.slug == slug:
                return tenant
        return None

    # --- Prompts ---

    def tenant_prompts(self, tenant_id: str) -> list[Prompt]:
        """The tenant's prompt list. Unknown tenants have an empty partition."""
        return self.prompts_by_tenant.get(tenant_id, [])

    def insert_prompt(
        self,
        prompt: Prompt,
        versions: list[PromptVersion] | None = None,
        prepend: bool = True,
    ) -> Prompt:
        """Store a prompt in its tenant partition together with its history."""
        if prompt.id in self._prompt_index:
            raise ConflictError(f"Prompt '{prompt.id}' already exists")
        self.ids.reserve(prompt.id)
        partition = self.prompts_by_tenant.setdefault(prompt.tenant_id, [])
        if prepend:
            partition.insert(0, prompt)
        else:
            partition.append(prompt)
        self._prompt_index[prompt.id] = prompt
        self.versions[prompt.id] = list(versions or [])
        return prompt

    def find_prompt(self, prompt_id: str) -> Prompt | None:
        return self._prompt_index.get(prompt_id)

    def get_prompt(self, prompt_id: str, tenant_id: str | None = None) -> Prompt:
        """Look up a prompt, optionally requiring it to belong to ``tenant_id``."""
        prompt = self._prompt_index.get(prompt_id)
        if prompt is None or (tenant_id is not None and prompt.tenant_id != tenant_id):
            raise NotFoundError("Prompt not found")
        return prompt

    def remove_prompt(self, prompt_id: str, tenant_id: str) -> bool:
        """Remove a prompt and cascade to everything that references it.

        Returns False when nothing was removed. A prompt owned by another
        tenant is left untouched.
        """
        prompt = self._prompt_index.get(prompt_id)
        if prompt is not None and prompt.tenant_id != tenant_id:
            return False

        removed = False
        if prompt is not None:
            partition = self.prompts_by_tenant.get(tenant_id, [])
            self.prompts_by_tenant[tenant_id] = [p for p in partition if p.id != prompt_id]
            del self._prompt_index[prompt_id]
            removed = True

        self.versions.pop(prompt_id, None)
        for comment in self.comments.pop(prompt_id, []):
            self._comment_owner.pop(comment.id, None)
        self.shares.pop(prompt_id, None)
        for approval in self.approvals.pop(prompt_id, []):
            self._approval_owner.pop(approval.id, None)
        self.activity.pop(prompt_id, None)
        return removed

    def references(self, prompt_id: str) -> dict[str, int]:
        """Count of child records still pointing at ``prompt_id``."""
        return {
            "versions": len(self.versions.get(prompt_id, [])),
            "comments": len(self.comments.get(prompt_id, [])),
            "shares": len(self.shares.get(prompt_id, [])),
            "approvals": len(self.approvals.get(prompt_id, [])),
            "activity": len(self.activity.get(prompt_id, [])),
            "comment_index": sum(1 for p in self._comment_owner.values() if p == prompt_id),
            "approval_index": sum(1 for p in self._approval_owner.values() if p == prompt_id),
        }

    # --- Version history ---

    def versions_of(self, prompt_id: str) -> list[PromptVersion]:
        return self.versions.get(prompt_id, [])

    def push_version(self, prompt_id: str, version: PromptVersion) -> None:
        """Prepend a snapshot; history is kept newest first."""
        self.versions.setdefault(prompt_id, []).insert(0, version)

    # --- Comments ---

    def comments_of(self, prompt_id: str) -> list[PromptComment]:
        return self.comments.get(prompt_id, [])

    def add_comment(self, comment: PromptComment) -> PromptComment:
        self.ids.reserve(comment.id)
        self.comments.setdefault(comment.prompt_id, []).append(comment)
        self._comment_owner[comment.id] = comment.prompt_id
        return comment

    def find_comment(self, comment_id: str) -> PromptComment | None:
        prompt_id = self._comment_owner.get(comment_id)
        if prompt_id is None:
            return None
        for comment in self.comments.get(prompt_id, []):
            if comment.id == comment_id:
                return comment
        return None

    def remove_comments(self, prompt_id: str, comment_ids: set[str]) -> None:
        self.comments[prompt_id] = [
            c for c in self.comments.get(prompt_id, []) if c.id not in comment_ids
        ]
        for comment_id in comment_ids:
            self._comment_owner.pop(comment_id, None)

    # --- Shares ---

    def shares_of(self, prompt_id: str) -> list[PromptShare]:
        return self.shares.get(prompt_id, [])

    def add_share(self, share: PromptShare) -> list[PromptShare]:
        self.ids.reserve(share.id)
        shares = self.shares.setdefault(share.prompt_id, [])
        shares.append(share)
        return shares

    def remove_share(self, prompt_id: str, share_id: str) -> list[PromptShare]:
        self.shares[prompt_id] = [s for s in self.shares.get(prompt_id, []) if s.id != share_id]
        return self.shares[prompt_id]

    # --- Approvals ---

    def approvals_of(self, prompt_id: str) -> list[PromptApproval]:
        return self.approvals.get(prompt_id, [])

    def add_approval(self, approval: PromptApproval) -> PromptApproval:
        self.ids.reserve(approval.id)
        self.approvals.setdefault(approval.prompt_id, []).append(approval)
        self._approval_owner[approval.id] = approval.prompt_id
        return approval

    def find_approval(self, approval_id: str) -> PromptApproval | None:
        prompt_id = self._approval_owner.get(approval_id)
        if prompt_id is None:
            return None
        for approval in self.approvals.get(prompt_id, []):
            if approval.id == approval_id:
                return approval
        return None

    # --- Activity ---

    def activity_of(self, prompt_id: str) -> list[PromptActivityEntry]:
        return self.activity.get(prompt_id, [])

    def add_activity(self, entry: PromptActivityEntry, prepend: bool = True) -> PromptActivityEntry:
        """Log an activity entry; the feed is kept newest first."""
        self.ids.reserve(entry.id)
        feed = self.activity.setdefault(entry.prompt_id, [])
        if prepend:
            feed.insert(0, entry)
        else:
            feed.append(entry)
        return entry

    # --- Notifications ---

    def add_notification(self, item: NotificationItem) -> NotificationItem:
        self.ids.reserve(item.id)
        self.notifications.append(item)
        return item

    def find_notification(self, notification_id: str) -> NotificationItem | None:
        for item in self.notifications:
            if item.id == notification_id:
                return item
        return None

    # --- Serialisation ---

    def to_wire(self) -> dict[str, Any]:
        """Full state dump using wire field names."""

        def dump(groups: dict[str, list[Any]]) -> dict[str, list[dict[str, Any]]]:
            return {key: [item.to_wire() for item in items] for key, items in groups.items()}

        return {
            "tenants": [t.to_wire() for t in self.tenants.values()],
            "promptsByTenant": dump(self.prompts_by_tenant),
            "promptVersions": dump(self.versions),
            "promptComments": dump(self.comments),
            "promptShares": dump(self.shares),
            "promptApprovals": dump(self.approvals),
            "promptActivity": dump(self.activity),
            "notifications": [n.to_wire() for n in self.notifications],
        }
