from fastapi import APIRouter
from fastapi import Query
from fastapi import Security
from fastapi.security import HTTPAuthorizationCredentials

from github_stats.api.errors import to_http_exception
from github_stats.api.schemas.languages import LanguageStats
from github_stats.api.schemas.languages import LanguageStatsResult
from github_stats.core.security import bearer_scheme
from github_stats.core.security import resolve_github_token
from github_stats.exceptions import GitHubStatsError
from github_stats.services.language_service import fetch_language_stats
from github_stats.services.language_service import get_top_languages


router = APIRouter()


@router.get("/users/{username}/languages")
async def get_user_languages(
    username: str,
    include_forks: bool = False,
    include_private: bool = False,
    credentials: HTTPAuthorizationCredentials | None = Security(bearer_scheme),
) -> LanguageStatsResult:
    """Return language statistics aggregated over the user's repositories."""

    token = resolve_github_token(credentials)

    try:
        return await fetch_language_stats(
            username,
            token,
            include_forks=include_forks,
            include_private=include_private,
        )
    except GitHubStatsError as exc:
        raise to_http_exception(exc) from exc


@router.get("/users/{username}/languages/top")
async def get_user_top_languages(
    username: str,
    limit: int = Query(default=10, ge=0, le=100),
    include_forks: bool = False,
    include_private: bool = False,
    credentials: HTTPAuthorizationCredentials | None = Security(bearer_scheme),
) -> list[LanguageStats]:
    """Return the most used languages of the user, largest share first."""

    token = resolve_github_token(credentials)

    try:
        return await get_top_languages(
            username,
            token,
            limit,
            include_forks=include_forks,
            include_private=include_private,
        )
    except GitHubStatsError as exc:
        raise to_http_exception(exc) from exc
