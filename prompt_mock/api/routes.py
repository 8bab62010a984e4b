"""Route table — explicit {method, path pattern} → handler mapping."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any

TenantSource = str  # "header" | "query" | "body"


def split_path(path: str) -> list[str]:
    return [segment for segment in path.split("/") if segment]


@dataclass(frozen=True)
class Route:
    """One intercepted endpoint.

    ``pattern`` uses ``{name}`` placeholders for single path segments.
    ``tenant_sources`` lists where the tenant context is read from, in order.
    ``sub_key`` picks the fault sub-key (e.g. an analytics range) off a request.
    """

    method: str
    pattern: str
    handler: Callable[..., Any]
    capability: str | None = None
    tenant_sources: tuple[TenantSource, ...] = ("header",)
    sub_key: Callable[[Any], str | None] | None = None
    segments: tuple[str, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "segments", tuple(split_path(self.pattern)))

    def match(self, method: str, segments: list[str]) -> dict[str, str] | None:
        """Path parameters when method and segment count both line up."""
        if method != self.method or len(segments) != len(self.segments):
            return None
        params: dict[str, str] = {}
        for expected, actual in zip(self.segments, segments):
            if expected.startswith("{") and expected.endswith("}"):
                params[expected[1:-1]] = actual
            elif expected != actual:
                return None
        return params


class RouteTable:
    """Ordered collection of routes; the first match wins."""

    def __init__(self, routes: Iterable[Route] = ()) -> None:
        self._routes: list[Route] = []
        for route in routes:
            self.add(route)

    def add(self, route: Route) -> None:
        for existing in self._routes:
            if existing.method == route.method and existing.segments == route.segments:
                raise ValueError(f"Duplicate route {route.method} {route.pattern}")
        self._routes.append(route)

    def resolve(self, method: str, path: str) -> tuple[Route, dict[str, str]] | None:
        segments = split_path(path)
        for route in self._routes:
            params = route.match(method.upper(), segments)
            if params is not None:
                return route, params
        return None

    def __iter__(self) -> Iterator[Route]:
        return iter(self._routes)

    def __len__(self) -> int:
        return len(self._routes)
