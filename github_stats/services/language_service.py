import logging
from collections.abc import Iterable
from dataclasses import dataclass
from dataclasses import field

from github_stats.api.schemas.languages import LanguageStats
from github_stats.api.schemas.languages import LanguageStatsResult
from github_stats.api.schemas.languages import RateLimitInfo
from github_stats.clients.github_client import GraphQLExecutor
from github_stats.clients.github_client import open_client
from github_stats.clients.validation import RawRepository
from github_stats.services.repository_service import count_repositories
from github_stats.services.repository_service import fetch_all_repositories


logger = logging.getLogger(__name__)


@dataclass
class LanguageAggregation:
    bytes: int = 0
    repos: set[str] = field(default_factory=set)
    color: str | None = None


def aggregate_languages(
    repositories: Iterable[RawRepository],
) -> dict[str, LanguageAggregation]:
    """Fold every repository's language edges into per-language totals.

    Keys keep first-seen order. A language's color is the first non-empty
    color reported for it.
    """

    aggregation: dict[str, LanguageAggregation] = {}
    for repository in repositories:
        edges = repository.languages.edges
        if not edges:
            continue

        repo_id = repository.identifier
        for edge in edges:
            name = edge.node.name
            current = aggregation.setdefault(name, LanguageAggregation())
            current.bytes += edge.size
            current.repos.add(repo_id)
            if edge.node.color and not current.color:
                current.color = edge.node.color

    return aggregation


def summarize_languages(
    aggregation: dict[str, LanguageAggregation],
) -> tuple[list[LanguageStats], int]:
    """Turn totals into percentage-annotated stats, largest share first."""

    total_bytes = sum(language.bytes for language in aggregation.values())
    if total_bytes == 0:
        return [], 0

    languages = [
        LanguageStats(
            name=name,
            bytes=language.bytes,
            repo_count=len(language.repos),
            percentage=language.bytes / total_bytes * 100,
            color=language.color,
        )
        for name, language in aggregation.items()
    ]
    # sorted() is stable, so equal shares keep first-seen order.
    languages = sorted(languages, key=lambda stats: stats.percentage, reverse=True)
    return languages, total_bytes


async def fetch_language_stats(
    username: str,
    token: str,
    *,
    include_forks: bool = False,
    include_private: bool = False,
    client: GraphQLExecutor | None = None,
) -> LanguageStatsResult:
    """Fetch and aggregate GitHub language statistics for a user.

    By default only public, non-fork repositories are analysed.
    `include_private` needs a token owned by `username`.

    Raises:
        NotFoundError: If the user does not exist.
        GitHubPermissionError: If the token lacks the required scopes.
        IdentityMismatchError: If private repositories are requested for an
            account other than the token's own.
        GraphQLError: For other errors reported by GitHub.
    """

    async with open_client(token, client) as graphql:
        fetched = await fetch_all_repositories(
            graphql,
            username,
            include_forks=include_forks,
            include_private=include_private,
        )

    languages, total_bytes = summarize_languages(
        aggregate_languages(fetched.filtered)
    )
    logger.debug(
        "Aggregated %d languages across %d repositories for %s",
        len(languages),
        len(fetched.filtered),
        username,
    )
    rate_limit = None
    if fetched.rate_limit is not None:
        rate_limit = RateLimitInfo(
            cost=fetched.rate_limit.cost,
            remaining=fetched.rate_limit.remaining,
            reset_at=fetched.rate_limit.reset_at,
        )

    return LanguageStatsResult(
        languages=tuple(languages),
        total_bytes=total_bytes,
        total_repos=len(fetched.filtered),
        repo_counts=count_repositories(fetched.repositories),
        filtered_repo_counts=count_repositories(fetched.filtered),
        rate_limit=rate_limit,
    )


async def get_top_languages(
    username: str,
    token: str,
    limit: int = 10,
    *,
    include_forks: bool = False,
    include_private: bool = False,
    client: GraphQLExecutor | None = None,
) -> list[LanguageStats]:
    """Return the `limit` most used languages, ordered by percentage."""

    if limit < 0:
        raise ValueError("limit must be zero or greater")

    stats = await fetch_language_stats(
        username,
        token,
        include_forks=include_forks,
        include_private=include_private,
        client=client,
    )
    return list(stats.languages[:limit])
