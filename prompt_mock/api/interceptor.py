"""Dispatches intercepted requests to the mock backend."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, TypeVar

import structlog
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from prompt_mock.api.http import MockRequest, MockResponse
from prompt_mock.api.models import (
    ApprovalCreate,
    ApprovalUpdate,
    CommentCreate,
    CommentUpdate,
    PromptCreate,
    PromptUpdate,
    ShareCreate,
    TenantCreate,
)
from prompt_mock.api.routes import Route, RouteTable
from prompt_mock.config import get_settings
from prompt_mock.core.analytics import parse_range
from prompt_mock.core.backend import MockBackend, get_backend
from prompt_mock.core.errors import InjectedFault, MockApiError, ValidationError
from prompt_mock.core.models import MockModel
from prompt_mock.core.query import PromptQuery

logger = structlog.get_logger()

M = TypeVar("M", bound=BaseModel)


def describe_validation_error(exc: PydanticValidationError) -> str:
    """First pydantic error as a one-line message, e.g. ``Missing title``."""
    error = exc.errors()[0]
    field = ".".join(str(part) for part in error["loc"]) or "body"
    if error["type"] == "missing":
        return f"Missing {field}"
    return f"Invalid {field}: {error['msg']}"


def parse_payload(model: type[M], data: Mapping[str, Any]) -> M:
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(describe_validation_error(e))


def _data(payload: MockModel | Iterable[MockModel] | None) -> dict[str, Any]:
    if payload is None or isinstance(payload, MockModel):
        return {"data": payload.to_wire() if payload is not None else None}
    return {"data": [item.to_wire() for item in payload]}


def _analytics_range(request: MockRequest) -> str:
    """Budget key for an analytics call: the range as it selects the dataset."""
    try:
        return str(parse_range(request.query.get("range")))
    except ValidationError:
        return request.query.get("range", "")


@dataclass
class RouteContext:
    request: MockRequest
    params: dict[str, str]
    tenant_id: str | None

    @property
    def authorized(self) -> bool:
        return self.request.header("authorization") is not None

    def require_tenant(self) -> str:
        if not self.tenant_id:
            raise ValidationError("Missing tenantId")
        return self.tenant_id


class RouteInterceptor:
    """Matches method + path against the route table and answers from the backend.

    Per request: match a route, resolve the tenant context, consult the fault
    injector, run the handler, serialize. Requests that match no route return
    None so the caller can let them through to the real network.
    """

    def __init__(
        self,
        backend: MockBackend,
        api_prefix: str = "",
        tenant_header: str = "x-tenant-id",
    ) -> None:
        self.backend = backend
        prefix = api_prefix.strip("/")
        self.api_prefix = f"/{prefix}" if prefix else ""
        self.tenant_header = tenant_header
        self.routes = RouteTable(self._build_routes())

    def _build_routes(self) -> list[Route]:
        header = ("header",)
        return [
            Route("GET", "/tenants", self.list_tenants, "tenants", ()),
            Route("POST", "/tenants", self.create_tenant, "tenants", ()),
            Route("GET", "/prompts", self.list_prompts, "prompts", ("query", "header")),
            Route("POST", "/prompts", self.create_prompt, "prompts", ("body",)),
            Route("PUT", "/prompts/{prompt_id}", self.update_prompt, "prompts", ("header", "body")),
            Route("DELETE", "/prompts/{prompt_id}", self.delete_prompt, "prompts", header),
            Route("GET", "/prompts/{prompt_id}/versions", self.list_versions, "versions", header),
            Route("POST", "/prompts/{prompt_id}/usage", self.record_usage, "usage", header),
            Route("GET", "/prompts/{prompt_id}/comments", self.list_comments, "comments", header),
            Route("POST", "/prompts/{prompt_id}/comments", self.create_comment, "comments", header),
            Route("PATCH", "/comments/{comment_id}", self.update_comment, "comments", header),
            Route("DELETE", "/comments/{comment_id}", self.delete_comment, "comments", header),
            Route("GET", "/prompts/{prompt_id}/shares", self.list_shares, "shares", header),
            Route("POST", "/prompts/{prompt_id}/shares", self.create_share, "shares", header),
            Route(
                "DELETE",
                "/prompts/{prompt_id}/shares/{share_id}",
                self.delete_share,
                "shares",
                header,
            ),
            Route(
                "GET", "/prompts/{prompt_id}/approvals", self.list_approvals, "approvals", header
            ),
            Route(
                "POST", "/prompts/{prompt_id}/approvals", self.create_approval, "approvals", header
            ),
            Route("PATCH", "/approvals/{approval_id}", self.update_approval, "approvals", header),
            Route("GET", "/prompts/{prompt_id}/activity", self.list_activity, "activity", header),
            Route("GET", "/analytics/overview", self.dashboard, "dashboard", ("header", "query")),
            Route(
                "GET",
                "/analytics/prompts",
                self.prompt_analytics,
                "analytics",
                ("header", "query"),
                sub_key=_analytics_range,
            ),
            Route("GET", "/notifications", self.list_notifications, "notifications", ()),
            Route(
                "PATCH",
                "/notifications",
                self.read_all_notifications,
                "notifications",
                ("header", "query"),
            ),
            Route(
                "PATCH",
                "/notifications/{notification_id}",
                self.read_notification,
                "notifications",
                (),
            ),
        ]

    # --- Dispatch ---

    def handle(self, request: MockRequest) -> MockResponse | None:
        """Answer ``request`` from the mock, or return None to pass it through."""
        path = self._strip_prefix(request.path)
        resolved = self.routes.resolve(request.method, path) if path is not None else None
        if resolved is None:
            logger.debug("mock.passthrough", method=request.method, path=request.path)
            return None

        route, params = resolved
        tenant_id = self._tenant_for(route, request)
        with self.backend.store.lock:
            try:
                if route.capability:
                    sub_key = route.sub_key(request) if route.sub_key else None
                    self.backend.faults.check(route.capability, tenant_id, sub_key)
                response = route.handler(RouteContext(request, params, tenant_id))
            except InjectedFault as e:
                response = MockResponse.text(e.status_code, e.message)
            except MockApiError as e:
                logger.warning(
                    "mock.request_rejected",
                    method=request.method,
                    path=request.path,
                    status=e.status_code,
                    error=e.message,
                )
                response = MockResponse.json(e.status_code, {"error": e.message})

        logger.debug(
            "mock.request",
            method=request.method,
            path=request.path,
            tenant_id=tenant_id,
            status=response.status_code,
        )
        return response

    def _strip_prefix(self, path: str) -> str | None:
        if not self.api_prefix:
            return path
        if path == self.api_prefix or path.startswith(self.api_prefix + "/"):
            return path[len(self.api_prefix):] or "/"
        return None

    def _tenant_for(self, route: Route, request: MockRequest) -> str | None:
        for source in route.tenant_sources:
            if source == "header":
                value = request.header(self.tenant_header)
            elif source == "query":
                value = request.query.get("tenantId")
            else:
                value = request.json_or_empty().get("tenantId")
            if isinstance(value, str) and value:
                return value
        return None

    @property
    def _store(self):
        return self.backend.store

    @property
    def _mutations(self):
        return self.backend.mutations

    # --- Tenants ---

    def list_tenants(self, ctx: RouteContext) -> MockResponse:
        return MockResponse.json(200, _data(self._store.list_tenants()))

    def create_tenant(self, ctx: RouteContext) -> MockResponse:
        payload = parse_payload(TenantCreate, ctx.request.json())
        tenant = self._mutations.create_tenant(name=payload.name, slug=payload.slug)
        return MockResponse.json(201, _data(tenant))

    # --- Prompts ---

    def list_prompts(self, ctx: RouteContext) -> MockResponse:
        tenant_id = ctx.require_tenant()
        params: dict[str, Any] = dict(ctx.request.query)
        params.setdefault("pageSize", self.backend.default_page_size)
        query = parse_payload(PromptQuery, params)
        page = self.backend.list_prompts(tenant_id, query)
        return MockResponse.json(200, page.to_wire())

    def create_prompt(self, ctx: RouteContext) -> MockResponse:
        body = ctx.request.json()
        tenant_id = ctx.require_tenant()
        payload = parse_payload(PromptCreate, body)
        prompt = self._mutations.create_prompt(
            tenant_id, **payload.model_dump(exclude={"tenant_id"})
        )
        return MockResponse.json(201, _data(prompt))

    def update_prompt(self, ctx: RouteContext) -> MockResponse:
        body = ctx.request.json()
        tenant_id = ctx.require_tenant()
        payload = parse_payload(PromptUpdate, body)
        prompt = self._mutations.update_prompt(
            ctx.params["prompt_id"],
            tenant_id,
            **payload.model_dump(exclude={"tenant_id"}, exclude_none=True),
        )
        return MockResponse.json(200, _data(prompt))

    def delete_prompt(self, ctx: RouteContext) -> MockResponse:
        self._mutations.delete_prompt(ctx.params["prompt_id"], ctx.require_tenant())
        return MockResponse.empty(204)

    def list_versions(self, ctx: RouteContext) -> MockResponse:
        prompt = self._store.get_prompt(ctx.params["prompt_id"], ctx.tenant_id)
        return MockResponse.json(200, _data(self._store.versions_of(prompt.id)))

    def record_usage(self, ctx: RouteContext) -> MockResponse:
        self._mutations.record_usage(
            ctx.params["prompt_id"], ctx.require_tenant(), authorized=ctx.authorized
        )
        return MockResponse.empty(204)

    # --- Comments ---

    def list_comments(self, ctx: RouteContext) -> MockResponse:
        prompt = self._store.get_prompt(ctx.params["prompt_id"], ctx.tenant_id)
        return MockResponse.json(200, _data(self._store.comments_of(prompt.id)))

    def create_comment(self, ctx: RouteContext) -> MockResponse:
        payload = parse_payload(CommentCreate, ctx.request.json())
        comment = self._mutations.add_comment(
            ctx.params["prompt_id"],
            ctx.tenant_id,
            body=payload.body,
            parent_id=payload.parent_id,
            created_by=payload.created_by,
        )
        return MockResponse.json(201, _data(comment))

    def update_comment(self, ctx: RouteContext) -> MockResponse:
        payload = parse_payload(CommentUpdate, ctx.request.json())
        comment = self._mutations.update_comment(
            ctx.params["comment_id"],
            ctx.tenant_id,
            body=payload.body,
            resolved=payload.resolved,
        )
        return MockResponse.json(200, _data(comment))

    def delete_comment(self, ctx: RouteContext) -> MockResponse:
        self._mutations.delete_comment(ctx.params["comment_id"], ctx.tenant_id)
        return MockResponse.empty(204)

    # --- Shares ---

    def list_shares(self, ctx: RouteContext) -> MockResponse:
        prompt = self._store.get_prompt(ctx.params["prompt_id"], ctx.tenant_id)
        return MockResponse.json(200, _data(self._store.shares_of(prompt.id)))

    def create_share(self, ctx: RouteContext) -> MockResponse:
        payload = parse_payload(ShareCreate, ctx.request.json())
        shares = self._mutations.add_share(
            ctx.params["prompt_id"],
            ctx.tenant_id,
            target_type=payload.target_type,
            target_identifier=payload.target_identifier,
            role=payload.role,
            expires_at=payload.expires_at,
            created_by=payload.created_by,
        )
        return MockResponse.json(200, _data(shares))

    def delete_share(self, ctx: RouteContext) -> MockResponse:
        shares = self._mutations.remove_share(
            ctx.params["prompt_id"], ctx.tenant_id, ctx.params["share_id"]
        )
        return MockResponse.json(200, _data(shares))

    # --- Approvals ---

    def list_approvals(self, ctx: RouteContext) -> MockResponse:
        prompt = self._store.get_prompt(ctx.params["prompt_id"], ctx.tenant_id)
        return MockResponse.json(200, _data(self._store.approvals_of(prompt.id)))

    def create_approval(self, ctx: RouteContext) -> MockResponse:
        payload = parse_payload(ApprovalCreate, ctx.request.json())
        approval = self._mutations.request_approval(
            ctx.params["prompt_id"],
            ctx.tenant_id,
            approver=payload.approver,
            message=payload.message,
            requested_by=payload.requested_by,
        )
        return MockResponse.json(201, _data(approval))

    def update_approval(self, ctx: RouteContext) -> MockResponse:
        payload = parse_payload(ApprovalUpdate, ctx.request.json())
        approval = self._mutations.update_approval(
            ctx.params["approval_id"],
            ctx.tenant_id,
            status=payload.status,
            message=payload.message,
        )
        return MockResponse.json(200, _data(approval))

    # --- Activity ---

    def list_activity(self, ctx: RouteContext) -> MockResponse:
        prompt = self._store.get_prompt(ctx.params["prompt_id"], ctx.tenant_id)
        return MockResponse.json(200, _data(self._store.activity_of(prompt.id)))

    # --- Analytics ---

    def dashboard(self, ctx: RouteContext) -> MockResponse:
        overview = self.backend.overview(ctx.require_tenant())
        return MockResponse.json(200, _data(overview))

    def prompt_analytics(self, ctx: RouteContext) -> MockResponse:
        range_days = parse_range(ctx.request.query.get("range"))
        dataset = self.backend.analytics(ctx.require_tenant(), range_days)
        return MockResponse.json(200, dataset.to_wire())

    # --- Notifications ---

    def list_notifications(self, ctx: RouteContext) -> MockResponse:
        return MockResponse.json(200, _data(self._store.notifications))

    def read_all_notifications(self, ctx: RouteContext) -> MockResponse:
        items = self._mutations.mark_all_notifications_read(ctx.tenant_id)
        return MockResponse.json(200, _data(items))

    def read_notification(self, ctx: RouteContext) -> MockResponse:
        item = self._mutations.mark_notification_read(ctx.params["notification_id"])
        return MockResponse.json(200, _data(item))


@lru_cache
def get_interceptor() -> RouteInterceptor:
    """Get cached interceptor bound to the shared backend."""
    settings = get_settings()
    return RouteInterceptor(
        get_backend(),
        api_prefix=settings.api_prefix,
        tenant_header=settings.tenant_header,
    )
