"""Search API routes."""

from fastapi import APIRouter, Query

from promption.core.auth import CurrentUser
from promption.core.constants import MAX_SEARCH_QUERY_LENGTH
from promption.modules.search.schemas import SearchResults
from promption.modules.search.services import SearchSvc


router = APIRouter(prefix="/search", tags=["search"])


@router.get(
    "",
    response_model=SearchResults,
    summary="Search",
    description=(
        "Case-insensitive search over prompts, workspaces, categories and "
        "templates in the caller's workspaces."
    ),
)
async def search(
    service: SearchSvc,
    current_user: CurrentUser,
    q: str = Query("", max_length=MAX_SEARCH_QUERY_LENGTH),
) -> SearchResults:
    return await service.search(current_user, q)
