"""Tests for dashboard and analytics reads and backend lifecycle."""

import pytest

from prompt_mock.core.analytics import parse_range
from prompt_mock.core.backend import MockBackend
from prompt_mock.core.errors import NotFoundError, ValidationError


class TestDashboard:
    def test_total_prompts_is_live(self, backend):
        assert backend.overview("tenant_acme").stats.total_prompts.value == 8
        backend.mutations.create_prompt("tenant_acme", title="A", body="b")
        overview = backend.overview("tenant_acme")
        assert overview.stats.total_prompts.value == 9
        assert overview.stats.total_prompts.previous == 6

    def test_stored_payload_is_not_modified(self, backend):
        backend.mutations.delete_prompt("prompt_acme_1", "tenant_acme")
        backend.overview("tenant_acme")
        assert backend.store.dashboard["tenant_acme"].stats.total_prompts.value == 8

    def test_unknown_tenant(self, backend):
        with pytest.raises(NotFoundError, match="Tenant not found"):
            backend.overview("ghost")

    def test_wire_shape(self, backend):
        wire = backend.overview("tenant_globex").to_wire()
        assert wire["tenant"] == {"id": "tenant_globex", "name": "Globex", "slug": "globex"}
        assert wire["rangeDays"] == 14
        assert set(wire["stats"]) == {
            "totalPrompts",
            "usageToday",
            "usageThisWeek",
            "activePrompts",
            "recentlyUpdated",
        }
        assert len(wire["trend"]) == 7
        assert wire["topPrompts"][0]["promptId"] == "prompt_globex_1"


class TestPromptAnalytics:
    def test_ranges(self, backend):
        assert len(backend.analytics("tenant_acme", 7).data) == 3
        assert backend.analytics("tenant_acme", 14).range_days == 14

    def test_unsupported_range(self, backend):
        with pytest.raises(NotFoundError):
            backend.analytics("tenant_acme", 90)

    def test_parse_range(self):
        assert parse_range(None) == 30
        assert parse_range("") == 30
        assert parse_range("7") == 7
        with pytest.raises(ValidationError, match="Invalid range: week"):
            parse_range("week")


class TestBackendLifecycle:
    def test_reset_reseeds(self, backend):
        backend.mutations.create_prompt("tenant_acme", title="A", body="b")
        backend.faults.configure("tenants", 3)
        backend.reset()
        assert len(backend.store.tenant_prompts("tenant_acme")) == 8
        assert backend.faults.snapshot() == {}

    def test_reset_without_seed(self, backend):
        backend.reset(seed=False)
        assert backend.store.list_tenants() == []

    def test_unseeded_backend(self):
        assert MockBackend(seed=False).store.list_tenants() == []

    def test_initial_failures(self):
        backend = MockBackend(failures={"dashboard": {"tenant_acme": 1}})
        assert backend.faults.remaining("dashboard", "tenant_acme") == 1

    def test_state(self, backend):
        backend.faults.configure("tenants", 1)
        state = backend.state()
        assert state["failures"] == {"tenants": 1}
        assert len(state["promptsByTenant"]["tenant_acme"]) == 8

    def test_list_prompts_uses_default_page_size(self):
        backend = MockBackend(default_page_size=5)
        page = backend.list_prompts("tenant_acme")
        assert len(page.data) == 5
        assert page.pagination.total_pages == 2
