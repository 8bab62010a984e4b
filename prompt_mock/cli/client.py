"""HTTP client for a running PromptMock server's control plane."""

from __future__ import annotations

from typing import Any

import httpx


class MockControlClient:
    """Wraps the /__mock__ endpoints of a running mock server."""

    def __init__(self, base_url: str = "http://127.0.0.1:8787") -> None:
        self.base_url = base_url.rstrip("/")
        self._client = httpx.Client(base_url=self.base_url, timeout=10)

    def _handle(self, resp: httpx.Response) -> Any:
        if resp.status_code >= 400:
            try:
                body = resp.json()
                detail = body.get("detail") or body.get("error") or resp.text
            except ValueError:
                detail = resp.text
            raise RuntimeError(f"API error ({resp.status_code}): {detail}")
        if resp.status_code == 204 or not resp.content:
            return None
        return resp.json()

    def health(self) -> dict:
        return self._handle(self._client.get("/health"))

    def state(self) -> dict:
        return self._handle(self._client.get("/__mock__/state"))

    def reset(self, seed: bool | None = None) -> dict:
        payload = {} if seed is None else {"seed": seed}
        return self._handle(self._client.post("/__mock__/reset", json=payload))

    def failures(self) -> dict:
        return self._handle(self._client.get("/__mock__/failures"))

    def set_failure(
        self,
        capability: str,
        count: int,
        tenant_id: str | None = None,
        sub_key: str | None = None,
    ) -> dict:
        data: dict[str, Any] = {"capability": capability, "count": count}
        if tenant_id:
            data["tenantId"] = tenant_id
        if sub_key:
            data["subKey"] = sub_key
        return self._handle(self._client.put("/__mock__/failures", json=data))

    def clear_failures(self) -> None:
        self._handle(self._client.delete("/__mock__/failures"))

    def routes(self) -> list[dict]:
        return self._handle(self._client.get("/__mock__/routes"))
