"""Pydantic schemas for search results."""

from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field


class SearchResultType(str, Enum):
    PROMPT = "prompt"
    WORKSPACE = "workspace"
    CATEGORY = "category"
    TEMPLATE = "template"


class SearchResult(BaseModel):
    """One match, ready for display."""

    id: UUID
    title: str
    url: str
    breadcrumbs: list[str]
    type: SearchResultType


class SearchResults(BaseModel):
    """Matches grouped by entity type."""

    prompts: list[SearchResult] = Field(default_factory=list)
    workspaces: list[SearchResult] = Field(default_factory=list)
    categories: list[SearchResult] = Field(default_factory=list)
    templates: list[SearchResult] = Field(default_factory=list)
