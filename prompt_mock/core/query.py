"""Filter, sort and paginate a tenant's prompts."""

from __future__ import annotations

import json
import math
from typing import Any

from pydantic import Field, field_validator

from prompt_mock.core.models import MockModel, Prompt, SortField, SortOrder


class PromptQuery(MockModel):
    """List parameters as accepted on ``GET /prompts``."""

    search: str | None = None
    tag: str | None = None
    metadata_key: str | None = None
    metadata_value: str | None = None
    sort_by: SortField = "updated_at"
    order: SortOrder = "desc"
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=20, ge=1)

    @field_validator("search", "tag", "metadata_key", "metadata_value", mode="before")
    @classmethod
    def _blank_is_unset(cls, value: Any) -> Any:
        if isinstance(value, str) and value == "":
            return None
        return value


class Pagination(MockModel):
    page: int
    page_size: int
    total: int
    total_pages: int


class PromptPage(MockModel):
    """One page of prompts plus pagination and an echo of the applied query."""

    data: list[Prompt]
    pagination: Pagination
    sort: SortField
    order: SortOrder
    filters: dict[str, str]


def stringify(value: Any) -> str:
    """Render a metadata value the way filters compare it."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str)


def _haystack(prompt: Prompt) -> str:
    return " ".join(
        [
            prompt.title,
            prompt.body,
            " ".join(prompt.tags),
            stringify(prompt.metadata or {}),
        ]
    ).lower()


def _matches_metadata(prompt: Prompt, key: str, value: str | None) -> bool:
    if prompt.metadata is None:
        return False
    if value is not None:
        return value in stringify(prompt.metadata.get(key)).lower()
    return key in prompt.metadata


def _sort_key(sort_by: SortField):
    if sort_by == "title":
        return lambda p: p.title.lower()
    if sort_by == "created_at":
        return lambda p: p.created_at.timestamp()
    return lambda p: p.updated_at.timestamp()


def query_prompts(prompts: list[Prompt], query: PromptQuery) -> PromptPage:
    """Apply search, tag and metadata filters, then sort and slice one page.

    ``sorted`` is stable in both directions, so records with equal sort keys
    keep their stored relative order across repeated queries.
    """
    search = query.search.lower() if query.search else None
    metadata_value = query.metadata_value.lower() if query.metadata_value else None

    results = list(prompts)
    if search:
        results = [p for p in results if search in _haystack(p)]
    if query.tag:
        results = [p for p in results if query.tag in p.tags]
    if query.metadata_key:
        results = [p for p in results if _matches_metadata(p, query.metadata_key, metadata_value)]

    results = sorted(results, key=_sort_key(query.sort_by), reverse=query.order == "desc")

    total = len(results)
    total_pages = max(1, math.ceil(total / query.page_size))
    start = (query.page - 1) * query.page_size

    filters = {
        "search": search,
        "tag": query.tag,
        "metadataKey": query.metadata_key,
        "metadataValue": metadata_value,
    }
    return PromptPage(
        data=results[start : start + query.page_size],
        pagination=Pagination(
            page=query.page,
            page_size=query.page_size,
            total=total,
            total_pages=total_pages,
        ),
        sort=query.sort_by,
        order=query.order,
        filters={k: v for k, v in filters.items() if v is not None},
    )
