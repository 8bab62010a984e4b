"""Budgeted, counter-based forcing of failure responses.

A budget is keyed by capability, then optionally by tenant id, then
optionally by a sub-key (for example an analytics range)::

    {"tenants": 2}                          # any caller, two failures
    {"prompts": {"tenant_acme": 1}}         # only Acme's prompt calls
    {"analytics": {"tenant_acme": {"7": 1}}}

Each matching call with a positive budget consumes one unit and fails.
"""

from __future__ import annotations

import copy
import threading
from collections.abc import Mapping
from typing import Any

import structlog

from prompt_mock.core.errors import InjectedFault

logger = structlog.get_logger()

CAPABILITIES = (
    "tenants",
    "prompts",
    "versions",
    "usage",
    "comments",
    "shares",
    "approvals",
    "activity",
    "dashboard",
    "analytics",
    "notifications",
)


def _validate_count(count: Any) -> int:
    if isinstance(count, bool) or not isinstance(count, int) or count < 0:
        raise ValueError(f"Failure budget must be a non-negative integer, got {count!r}")
    return count


class FaultInjector:
    """Holds failure budgets and consumes them atomically."""

    def __init__(self, budgets: Mapping[str, Any] | None = None) -> None:
        self._budgets: dict[str, Any] = {}
        self._lock = threading.Lock()
        if budgets:
            self.load(budgets)

    def load(self, budgets: Mapping[str, Any]) -> None:
        """Merge a nested budget mapping into the current configuration."""
        for capability, bucket in budgets.items():
            if isinstance(bucket, Mapping):
                for tenant_id, tenant_bucket in bucket.items():
                    if isinstance(tenant_bucket, Mapping):
                        for sub_key, count in tenant_bucket.items():
                            self.configure(capability, count, tenant_id, str(sub_key))
                    else:
                        self.configure(capability, tenant_bucket, tenant_id)
            else:
                self.configure(capability, bucket)

    def configure(
        self,
        capability: str,
        count: int,
        tenant_id: str | None = None,
        sub_key: str | None = None,
    ) -> None:
        """Set the remaining failure budget for one key."""
        if capability not in CAPABILITIES:
            raise ValueError(f"Unknown capability {capability!r}")
        count = _validate_count(count)
        if sub_key is not None and tenant_id is None:
            raise ValueError("A sub-key budget requires a tenant id")

        with self._lock:
            if tenant_id is None:
                self._budgets[capability] = count
            else:
                bucket = self._budgets.get(capability)
                if not isinstance(bucket, dict):
                    bucket = self._budgets[capability] = {}
                if sub_key is None:
                    bucket[tenant_id] = count
                else:
                    inner = bucket.get(tenant_id)
                    if not isinstance(inner, dict):
                        inner = bucket[tenant_id] = {}
                    inner[str(sub_key)] = count

        logger.info(
            "faults.configured",
            capability=capability,
            tenant_id=tenant_id,
            sub_key=sub_key,
            count=count,
        )

    def should_fail(
        self,
        capability: str,
        tenant_id: str | None = None,
        sub_key: str | None = None,
    ) -> bool:
        """Consume one unit of budget if any remains for this call."""
        with self._lock:
            bucket = self._budgets.get(capability)
            if bucket is None:
                return False

            if isinstance(bucket, int):
                if bucket <= 0:
                    return False
                self._budgets[capability] = bucket - 1
                return True

            if tenant_id is None:
                return False
            tenant_bucket = bucket.get(tenant_id)
            if isinstance(tenant_bucket, int):
                if tenant_bucket <= 0:
                    return False
                bucket[tenant_id] = tenant_bucket - 1
                return True

            if isinstance(tenant_bucket, dict) and sub_key is not None:
                inner = tenant_bucket.get(str(sub_key), 0)
                if inner <= 0:
                    return False
                tenant_bucket[str(sub_key)] = inner - 1
                return True

            return False

    def check(
        self,
        capability: str,
        tenant_id: str | None = None,
        sub_key: str | None = None,
    ) -> None:
        """Raise :class:`InjectedFault` when the call should fail."""
        if self.should_fail(capability, tenant_id, sub_key):
            logger.info(
                "faults.injected",
                capability=capability,
                tenant_id=tenant_id,
                sub_key=sub_key,
                remaining=self.remaining(capability, tenant_id, sub_key),
            )
            raise InjectedFault(capability)

    def remaining(
        self,
        capability: str,
        tenant_id: str | None = None,
        sub_key: str | None = None,
    ) -> int:
        """Budget left for the most specific configured key."""
        with self._lock:
            bucket = self._budgets.get(capability)
            if isinstance(bucket, int):
                return bucket
            if not isinstance(bucket, dict) or tenant_id is None:
                return 0
            tenant_bucket = bucket.get(tenant_id)
            if isinstance(tenant_bucket, int):
                return tenant_bucket
            if isinstance(tenant_bucket, dict) and sub_key is not None:
                return tenant_bucket.get(str(sub_key), 0)
            return 0

    def snapshot(self) -> dict[str, Any]:
        with self._lock:
            return copy.deepcopy(self._budgets)

    def clear(self) -> None:
        with self._lock:
            self._budgets.clear()
