"""Transport-neutral request/response types used by the interceptor."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from prompt_mock.core.errors import ValidationError


@dataclass
class MockRequest:
    """An intercepted request. Header names are matched case-insensitively."""

    method: str
    path: str
    query: dict[str, str] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes | None = None

    def __post_init__(self) -> None:
        self.method = self.method.upper()
        self.headers = {k.lower(): v for k, v in self.headers.items()}

    def header(self, name: str) -> str | None:
        return self.headers.get(name.lower())

    def json(self) -> dict[str, Any]:
        """Decode the body as a JSON object. An empty body is ``{}``."""
        if not self.body:
            return {}
        try:
            payload = json.loads(self.body)
        except (ValueError, UnicodeDecodeError):
            raise ValidationError("Invalid JSON body")
        if not isinstance(payload, dict):
            raise ValidationError("JSON body must be an object")
        return payload

    def json_or_empty(self) -> dict[str, Any]:
        try:
            return self.json()
        except ValidationError:
            return {}


@dataclass
class MockResponse:
    status_code: int
    body: bytes = b""
    content_type: str | None = None

    @classmethod
    def json(cls, status_code: int, payload: Any) -> MockResponse:
        return cls(
            status_code=status_code,
            body=json.dumps(payload).encode("utf-8"),
            content_type="application/json",
        )

    @classmethod
    def text(cls, status_code: int, text: str) -> MockResponse:
        return cls(status_code=status_code, body=text.encode("utf-8"), content_type="text/plain")

    @classmethod
    def empty(cls, status_code: int = 204) -> MockResponse:
        return cls(status_code=status_code)

    @property
    def headers(self) -> dict[str, str]:
        return {"content-type": self.content_type} if self.content_type else {}

    def json_body(self) -> Any:
        return json.loads(self.body) if self.body else None
