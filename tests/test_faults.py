"""Tests for the budgeted fault injector."""

import pytest

from prompt_mock.core.errors import InjectedFault
from prompt_mock.core.faults import FaultInjector


class TestGlobalBudget:
    def test_unconfigured_never_fails(self):
        faults = FaultInjector()
        assert not any(faults.should_fail("tenants") for _ in range(5))

    def test_fails_exactly_k_times(self):
        faults = FaultInjector({"tenants": 2})
        results = [faults.should_fail("tenants") for _ in range(4)]
        assert results == [True, True, False, False]
        assert faults.remaining("tenants") == 0

    def test_global_budget_applies_to_any_tenant(self):
        faults = FaultInjector({"notifications": 1})
        assert faults.should_fail("notifications", tenant_id="tenant_acme")
        assert not faults.should_fail("notifications", tenant_id="tenant_globex")


class TestTenantBudget:
    def test_only_matching_tenant_fails(self):
        faults = FaultInjector({"dashboard": {"t1": 1}})
        assert not faults.should_fail("dashboard", tenant_id="t2")
        assert not faults.should_fail("dashboard")
        assert faults.should_fail("dashboard", tenant_id="t1")
        assert not faults.should_fail("dashboard", tenant_id="t1")

    def test_sub_key_budget(self):
        faults = FaultInjector({"analytics": {"t1": {7: 1}}})
        assert not faults.should_fail("analytics", "t1", "30")
        assert not faults.should_fail("analytics", "t1")
        assert faults.should_fail("analytics", "t1", "7")
        assert not faults.should_fail("analytics", "t1", "7")

    def test_configure_and_remaining(self):
        faults = FaultInjector()
        faults.configure("prompts", 3, tenant_id="tenant_acme")
        assert faults.remaining("prompts", "tenant_acme") == 3
        assert faults.remaining("prompts", "tenant_globex") == 0
        faults.should_fail("prompts", "tenant_acme")
        assert faults.remaining("prompts", "tenant_acme") == 2

    def test_snapshot_is_a_copy(self):
        faults = FaultInjector({"analytics": {"t1": {"14": 2}}})
        snap = faults.snapshot()
        snap["analytics"]["t1"]["14"] = 0
        assert faults.remaining("analytics", "t1", "14") == 2


class TestValidation:
    def test_negative_count_rejected(self):
        with pytest.raises(ValueError):
            FaultInjector().configure("tenants", -1)

    def test_sub_key_requires_tenant(self):
        with pytest.raises(ValueError):
            FaultInjector().configure("analytics", 1, sub_key="7")

    def test_unknown_capability_rejected(self):
        with pytest.raises(ValueError, match="Unknown capability"):
            FaultInjector().configure("promtps", 1)
        with pytest.raises(ValueError, match="Unknown capability"):
            FaultInjector({"promtps": 1})

    def test_check_raises_injected_fault(self):
        faults = FaultInjector({"usage": 1})
        with pytest.raises(InjectedFault) as exc:
            faults.check("usage")
        assert exc.value.status_code == 500
        assert exc.value.capability == "usage"
        faults.check("usage")

    def test_clear(self):
        faults = FaultInjector({"tenants": 5})
        faults.clear()
        assert faults.snapshot() == {}
        assert not faults.should_fail("tenants")
