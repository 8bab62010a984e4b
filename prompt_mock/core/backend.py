"""MockBackend: wires the store, query engine, mutations and fault injector."""

from __future__ import annotations

from collections.abc import Mapping
from functools import lru_cache
from typing import Any

import structlog

from prompt_mock.config import get_settings
from prompt_mock.core.analytics import dashboard_overview, prompt_analytics
from prompt_mock.core.faults import FaultInjector
from prompt_mock.core.models import DashboardOverview, PromptAnalytics
from prompt_mock.core.mutations import Clock, MutationPipeline, utc_now
from prompt_mock.core.query import PromptPage, PromptQuery, query_prompts
from prompt_mock.core.seed import seed_default_data
from prompt_mock.core.store import EntityStore

logger = structlog.get_logger()


class MockBackend:
    """In-memory stand-in for the prompt management API.

    Reads go through :meth:`list_prompts` and friends, writes through
    ``mutations``, and ``faults`` is consulted by the interceptor before either.
    """

    def __init__(
        self,
        seed: bool = True,
        failures: Mapping[str, Any] | None = None,
        clock: Clock = utc_now,
        default_actor: str = "e2e-user",
        default_page_size: int = 20,
    ) -> None:
        self.seed = seed
        self.clock = clock
        self.default_page_size = default_page_size
        self.store = EntityStore()
        self.faults = FaultInjector(failures)
        self.mutations = MutationPipeline(self.store, clock=clock, default_actor=default_actor)
        if seed:
            seed_default_data(self.store)

    def reset(self, seed: bool | None = None) -> None:
        """Drop all state and failure budgets, optionally reloading the seed data."""
        reseed = self.seed if seed is None else seed
        with self.store.lock:
            self.store.clear()
            self.faults.clear()
            if reseed:
                seed_default_data(self.store)
        logger.info("backend.reset", seeded=reseed)

    def list_prompts(self, tenant_id: str, query: PromptQuery | None = None) -> PromptPage:
        query = query or PromptQuery(page_size=self.default_page_size)
        return query_prompts(self.store.tenant_prompts(tenant_id), query)

    def overview(self, tenant_id: str | None) -> DashboardOverview:
        return dashboard_overview(self.store, tenant_id)

    def analytics(self, tenant_id: str | None, range_days: int) -> PromptAnalytics:
        return prompt_analytics(self.store, tenant_id, range_days)

    def state(self) -> dict[str, Any]:
        """Wire-shaped dump of all records plus the remaining failure budgets."""
        with self.store.lock:
            return {**self.store.to_wire(), "failures": self.faults.snapshot()}


@lru_cache
def get_backend() -> MockBackend:
    """Get cached backend instance configured from settings."""
    settings = get_settings()
    return MockBackend(
        seed=settings.seed,
        failures=settings.failures,
        default_actor=settings.default_actor,
        default_page_size=settings.default_page_size,
    )
