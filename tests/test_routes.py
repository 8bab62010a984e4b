"""Tests for the route table."""

import pytest

from prompt_mock.api.routes import Route, RouteTable, split_path


def _noop(ctx):
    return None


class TestRouteMatching:
    def test_split_path_ignores_empty_segments(self):
        assert split_path("/prompts/") == ["prompts"]
        assert split_path("//prompts//p1/comments") == ["prompts", "p1", "comments"]

    def test_literal_route(self):
        route = Route("GET", "/prompts", _noop)
        assert route.match("GET", ["prompts"]) == {}
        assert route.match("POST", ["prompts"]) is None
        assert route.match("GET", ["prompts", "p1"]) is None

    def test_placeholder_captures_segment(self):
        route = Route("DELETE", "/prompts/{prompt_id}/shares/{share_id}", _noop)
        assert route.match("DELETE", ["prompts", "p1", "shares", "s9"]) == {
            "prompt_id": "p1",
            "share_id": "s9",
        }
        assert route.match("DELETE", ["prompts", "p1", "comments", "s9"]) is None


class TestRouteTable:
    def test_resolves_by_segment_count(self):
        table = RouteTable(
            [
                Route("GET", "/prompts", _noop, "prompts"),
                Route("GET", "/prompts/{prompt_id}/versions", _noop, "versions"),
                Route("GET", "/prompts/{prompt_id}/comments", _noop, "comments"),
            ]
        )
        route, params = table.resolve("GET", "/prompts/p1/comments")
        assert route.capability == "comments"
        assert params == {"prompt_id": "p1"}
        assert table.resolve("GET", "/prompts/p1") is None

    def test_method_is_case_insensitive(self):
        table = RouteTable([Route("PATCH", "/comments/{comment_id}", _noop)])
        assert table.resolve("patch", "/comments/c1") is not None

    def test_duplicate_rejected(self):
        table = RouteTable([Route("GET", "/tenants", _noop)])
        with pytest.raises(ValueError):
            table.add(Route("GET", "/tenants/", _noop))

    def test_len_and_iter(self):
        routes = [Route("GET", "/tenants", _noop), Route("POST", "/tenants", _noop)]
        table = RouteTable(routes)
        assert len(table) == 2
        assert [r.method for r in table] == ["GET", "POST"]
