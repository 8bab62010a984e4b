"""Control plane endpoints — reset state and configure injected failures."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException

from prompt_mock.api.interceptor import RouteInterceptor, get_interceptor
from prompt_mock.api.models import FailureConfig, ResetRequest

router = APIRouter()


@router.get("/state")
async def get_state(
    interceptor: RouteInterceptor = Depends(get_interceptor),
) -> dict[str, Any]:
    """Dump every record and the remaining failure budgets."""
    return interceptor.backend.state()


@router.post("/reset")
async def reset_state(
    data: ResetRequest | None = None,
    interceptor: RouteInterceptor = Depends(get_interceptor),
) -> dict[str, Any]:
    """Drop all records and budgets, reloading the seed data unless told not to."""
    seed = data.seed if data else None
    interceptor.backend.reset(seed=seed)
    return {"status": "reset", "tenants": len(interceptor.backend.store.tenants)}


@router.get("/failures")
async def list_failures(
    interceptor: RouteInterceptor = Depends(get_interceptor),
) -> dict[str, Any]:
    return interceptor.backend.faults.snapshot()


@router.put("/failures")
async def configure_failure(
    data: FailureConfig,
    interceptor: RouteInterceptor = Depends(get_interceptor),
) -> dict[str, Any]:
    """Set the failure budget for one capability key."""
    sub_key = str(data.sub_key) if data.sub_key is not None else None
    try:
        interceptor.backend.faults.configure(data.capability, data.count, data.tenant_id, sub_key)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return interceptor.backend.faults.snapshot()


@router.delete("/failures", status_code=204)
async def clear_failures(
    interceptor: RouteInterceptor = Depends(get_interceptor),
) -> None:
    interceptor.backend.faults.clear()


@router.get("/routes")
async def list_routes(
    interceptor: RouteInterceptor = Depends(get_interceptor),
) -> list[dict[str, Any]]:
    """The intercepted route table."""
    return [
        {"method": r.method, "pattern": r.pattern, "capability": r.capability}
        for r in interceptor.routes
    ]
