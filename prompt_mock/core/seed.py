"""Default dataset loaded into a fresh mock backend.

Two tenants (Acme with 8 prompts, Globex with 5), a small collaboration
thread on ``prompt_acme_1``, per-tenant dashboard and analytics payloads and
two notifications. Every timestamp is derived from ``BASE_DATE`` so the data
is identical between runs.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from prompt_mock.core.models import (
    DashboardMetric,
    DashboardOverview,
    DashboardStats,
    NotificationItem,
    Prompt,
    PromptActivityEntry,
    PromptAnalytics,
    PromptApproval,
    PromptComment,
    PromptShare,
    PromptUsageEntry,
    PromptVersion,
    Tenant,
    TenantSummary,
    TrendPoint,
)
from prompt_mock.core.store import EntityStore

BASE_DATE = datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


def _acme_prompt(index: int) -> Prompt:
    created_at = BASE_DATE - timedelta(hours=12 * index)
    even = index % 2 == 0
    return Prompt(
        id=f"prompt_acme_{index + 1}",
        tenant_id="tenant_acme",
        title=f"Acme Prompt {index + 1}",
        body=f"You are assisting Acme users with workflow {index + 1}.",
        tags=["support", "beta"] if even else ["onboarding"],
        metadata={"channel": "chat", "tier": "enterprise"} if even else None,
        created_at=created_at,
        updated_at=created_at + timedelta(minutes=20),
        version=3 if index % 3 == 0 else 2,
        archived=index == 7,
        created_by="morgan" if even else "casey",
    )


def _globex_prompt(index: int) -> Prompt:
    created_at = BASE_DATE - timedelta(hours=6 * index)
    return Prompt(
        id=f"prompt_globex_{index + 1}",
        tenant_id="tenant_globex",
        title=f"Globex Prompt {index + 1}",
        body=f"Handle Globex automation {index + 1}.",
        tags=["growth"] if index % 2 == 0 else ["sales"],
        metadata={"category": "priority"} if index == 0 else None,
        created_at=created_at,
        updated_at=created_at + timedelta(minutes=45),
        version=1,
        archived=False,
        created_by="jordan",
    )


def _seed_history(prompt: Prompt) -> list[PromptVersion]:
    """Current snapshot plus one earlier draft, newest first."""
    history = [prompt.snapshot(created_at=prompt.updated_at)]
    if prompt.version - 1 > 0:
        history.append(
            PromptVersion(
                version=prompt.version - 1,
                title=f"{prompt.title} draft",
                body=f"{prompt.body}\nPrevious revision.",
                tags=list(prompt.tags),
                metadata=prompt.metadata,
                created_at=prompt.updated_at - timedelta(days=1),
                created_by="revision-bot",
            )
        )
    return history


def _overview(tenant: Tenant, prompts: list[Prompt]) -> DashboardOverview:
    acme = tenant.id == "tenant_acme"
    return DashboardOverview(
        tenant=TenantSummary.of(tenant),
        range_days=14,
        stats=DashboardStats(
            total_prompts=DashboardMetric(value=len(prompts), previous=6),
            usage_today=DashboardMetric(value=42 if acme else 17, previous=12),
            usage_this_week=DashboardMetric(value=280 if acme else 96, previous=210),
            active_prompts=DashboardMetric(value=7 if acme else 5, previous=5),
            recently_updated=DashboardMetric(value=3, previous=2),
        ),
        trend=[
            TrendPoint(
                date=BASE_DATE - timedelta(days=i),
                count=25 + i * 3 if acme else 12 + i * 2,
            )
            for i in range(7)
        ],
        top_prompts=[
            PromptUsageEntry(
                prompt_id=p.id,
                title=p.title,
                version=p.version,
                usage_count=100 - i * 10,
                last_used=BASE_DATE - timedelta(hours=i),
            )
            for i, p in enumerate(prompts[:5])
        ],
    )


def _analytics(tenant: Tenant, prompts: list[Prompt]) -> dict[int, PromptAnalytics]:
    dataset = [
        PromptUsageEntry(
            prompt_id=p.id,
            title=p.title,
            version=p.version,
            usage_count=80 - i * 5,
            last_used=BASE_DATE - timedelta(minutes=90 * i),
        )
        for i, p in enumerate(prompts)
    ]
    summary = TenantSummary.of(tenant)
    return {
        7: PromptAnalytics(data=dataset[:3], tenant=summary, range_days=7),
        14: PromptAnalytics(data=dataset[:5], tenant=summary, range_days=14),
        30: PromptAnalytics(data=dataset, tenant=summary, range_days=30),
    }


def seed_default_data(store: EntityStore) -> None:
    """Populate ``store`` with the default tenants, prompts and feeds."""
    tenants = [
        Tenant(
            id="tenant_acme",
            name="Acme Corp",
            slug="acme",
            created_at=BASE_DATE - timedelta(days=30),
        ),
        Tenant(
            id="tenant_globex",
            name="Globex",
            slug="globex",
            created_at=BASE_DATE - timedelta(days=14),
        ),
    ]
    prompts = {
        "tenant_acme": [_acme_prompt(i) for i in range(8)],
        "tenant_globex": [_globex_prompt(i) for i in range(5)],
    }

    for tenant in tenants:
        tenant_prompts = prompts[tenant.id]
        store.add_tenant(
            tenant,
            overview=_overview(tenant, tenant_prompts),
            analytics=_analytics(tenant, tenant_prompts),
        )
        for prompt in tenant_prompts:
            store.insert_prompt(prompt, versions=_seed_history(prompt), prepend=False)

    store.add_comment(
        PromptComment(
            id="comment_1",
            prompt_id="prompt_acme_1",
            tenant_id="tenant_acme",
            parent_id=None,
            body="This prompt looks great!",
            created_by="alex",
            created_at=BASE_DATE - timedelta(hours=2),
            updated_at=BASE_DATE - timedelta(hours=2),
        )
    )
    store.add_comment(
        PromptComment(
            id="comment_2",
            prompt_id="prompt_acme_1",
            tenant_id="tenant_acme",
            parent_id="comment_1",
            body="Thanks! I'll adjust the flow accordingly.",
            created_by="morgan",
            created_at=BASE_DATE - timedelta(hours=1),
            updated_at=BASE_DATE - timedelta(hours=1),
        )
    )
    store.add_share(
        PromptShare(
            id="share_1",
            prompt_id="prompt_acme_1",
            tenant_id="tenant_acme",
            target_type="user",
            target_identifier="alex",
            role="editor",
            created_by="morgan",
            created_at=BASE_DATE - timedelta(minutes=15),
        )
    )
    store.add_approval(
        PromptApproval(
            id="approval_1",
            prompt_id="prompt_acme_1",
            tenant_id="tenant_acme",
            requested_by="morgan",
            approver="alex",
            status="pending",
            message="Requesting final sign-off",
            created_at=BASE_DATE - timedelta(minutes=30),
            updated_at=BASE_DATE - timedelta(minutes=30),
        )
    )
    store.add_activity(
        PromptActivityEntry(
            id="activity_1",
            prompt_id="prompt_acme_1",
            tenant_id="tenant_acme",
            actor="alex",
            action="commented",
            metadata={"body": "This prompt looks great!"},
            created_at=BASE_DATE - timedelta(hours=2),
        ),
        prepend=False,
    )
    store.add_activity(
        PromptActivityEntry(
            id="activity_2",
            prompt_id="prompt_acme_1",
            tenant_id="tenant_acme",
            actor="system",
            action="usage_recorded",
            metadata={"count": 5},
            created_at=BASE_DATE - timedelta(minutes=45),
        ),
        prepend=False,
    )

    store.add_notification(
        NotificationItem(
            id="notification_1",
            tenant_id="tenant_acme",
            recipient="operator",
            type="usage",
            message="Prompt Acme Prompt 1 exceeded target usage.",
            metadata={"promptId": "prompt_acme_1"},
            read_at=None,
            created_at=BASE_DATE - timedelta(minutes=20),
        )
    )
    store.add_notification(
        NotificationItem(
            id="notification_2",
            tenant_id="tenant_acme",
            recipient="operator",
            type="approval",
            message="Approval requested for Globex Prompt 2.",
            metadata={"promptId": "prompt_globex_2"},
            read_at=BASE_DATE - timedelta(hours=1),
            created_at=BASE_DATE - timedelta(hours=1),
        )
    )
