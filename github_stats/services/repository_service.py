import logging
from collections.abc import Sequence
from dataclasses import dataclass

from github_stats.api.schemas.languages import RepoCounts
from github_stats.clients.github_client import GraphQLExecutor
from github_stats.clients.github_client import fetch_viewer_login
from github_stats.clients.queries import LANGUAGE_PAGE_SIZE
from github_stats.clients.queries import LANGUAGE_SUBPAGE_SIZE
from github_stats.clients.queries import REPOSITORY_LANGUAGES_QUERY
from github_stats.clients.queries import REPOSITORY_PAGE_SIZE
from github_stats.clients.queries import USER_REPOSITORIES_QUERY
from github_stats.clients.queries import VIEWER_REPOSITORIES_QUERY
from github_stats.clients.validation import LanguageConnection
from github_stats.clients.validation import PageInfo
from github_stats.clients.validation import RateLimit
from github_stats.clients.validation import RawRepository
from github_stats.clients.validation import RepositoryConnection
from github_stats.clients.validation import parse_model
from github_stats.clients.validation import raise_for_graphql_errors
from github_stats.clients.validation import require_object
from github_stats.exceptions import DataShapeError
from github_stats.exceptions import IdentityMismatchError


logger = logging.getLogger(__name__)


@dataclass
class RepositoryFetch:
    """Outcome of one pagination run over a user's repositories."""

    repositories: list[RawRepository]
    filtered: list[RawRepository]
    rate_limit: RateLimit | None = None


def keep_repository(
    repository: RawRepository, include_forks: bool, include_private: bool
) -> bool:
    if not include_forks and repository.is_fork:
        return False
    if not include_private and repository.is_private:
        return False
    return True


def count_repositories(repositories: Sequence[RawRepository]) -> RepoCounts:
    """Count total/public/private/forks/non-forks over a repository list."""

    total = len(repositories)
    private = sum(1 for repository in repositories if repository.is_private)
    forks = sum(1 for repository in repositories if repository.is_fork)
    return RepoCounts(
        total=total,
        public=total - private,
        private=private,
        forks=forks,
        non_forks=total - forks,
    )


async def fetch_all_repositories(
    client: GraphQLExecutor,
    username: str,
    *,
    include_forks: bool = False,
    include_private: bool = False,
) -> RepositoryFetch:
    """Collect every repository page for `username`, then its missing languages.

    Private repositories are only visible to the token's own account, so
    `include_private` switches to a viewer-scoped query and requires the
    token to belong to `username`. Public-only runs filter privacy on the
    server; forks are always filtered here.

    Pagination follows `pageInfo.endCursor` until GitHub reports
    `hasNextPage: false`; there is no page cap.

    Raises:
        IdentityMismatchError: If `include_private` is set and the token
            belongs to another account.
        NotFoundError: If the user does not exist.
    """

    if include_private:
        viewer_login = await fetch_viewer_login(client)
        if viewer_login.lower() != username.lower():
            raise IdentityMismatchError(
                f'Private repositories of "{username}" require a token owned by '
                f'that account; the token belongs to "{viewer_login}".'
            )
        query = VIEWER_REPOSITORIES_QUERY
        owner_field = "viewer"
        base_variables: dict[str, object] = {"privacy": None}
    else:
        query = USER_REPOSITORIES_QUERY
        owner_field = "user"
        base_variables = {"login": username, "privacy": "PUBLIC"}

    repositories: list[RawRepository] = []
    rate_limit: RateLimit | None = None
    cursor: str | None = None
    has_next_page = True
    page = 0

    while has_next_page:
        variables = {
            **base_variables,
            "first": REPOSITORY_PAGE_SIZE,
            "cursor": cursor,
            "languageFirst": LANGUAGE_PAGE_SIZE,
        }
        data = raise_for_graphql_errors(await client.execute(query, variables))
        owner = require_object(
            data, owner_field, not_found=f'User "{username}" not found.'
        )
        connection = parse_model(
            RepositoryConnection,
            require_object(owner, "repositories"),
            "repositories page",
        )
        if data.get("rateLimit") is not None:
            rate_limit = parse_model(RateLimit, data["rateLimit"], "rate limit")

        nodes = [node for node in connection.nodes if node is not None]
        repositories.extend(nodes)
        page += 1
        logger.debug(
            "Fetched repositories page %d for %s (%d nodes, rate limit remaining %s)",
            page,
            username,
            len(nodes),
            rate_limit.remaining if rate_limit else "unknown",
        )

        has_next_page = connection.page_info.has_next_page
        cursor = connection.page_info.end_cursor
        if has_next_page and cursor is None:
            raise DataShapeError(
                "GitHub reported another repositories page without a cursor"
            )

    filtered = [
        repository
        for repository in repositories
        if keep_repository(repository, include_forks, include_private)
    ]

    for repository in filtered:
        if repository.languages.has_more:
            owner_login = repository.owner.login if repository.owner else username
            await fetch_remaining_languages(client, repository, owner_login)

    logger.info(
        "Collected %d repositories for %s (%d after filtering) in %d pages",
        len(repositories),
        username,
        len(filtered),
        page,
    )
    return RepositoryFetch(
        repositories=repositories, filtered=filtered, rate_limit=rate_limit
    )


async def fetch_remaining_languages(
    client: GraphQLExecutor, repository: RawRepository, owner_login: str
) -> None:
    """Append the language edges GitHub truncated on the repositories page.

    Pages of one repository are requested strictly in order; edges are
    appended to `repository.languages.edges` as they arrive.
    """

    page_info = repository.languages.page_info
    cursor = page_info.end_cursor if page_info else None
    has_next_page = repository.languages.has_more

    while has_next_page:
        data = raise_for_graphql_errors(
            await client.execute(
                REPOSITORY_LANGUAGES_QUERY,
                {
                    "owner": owner_login,
                    "name": repository.name,
                    "first": LANGUAGE_SUBPAGE_SIZE,
                    "cursor": cursor,
                },
            )
        )
        node = require_object(
            data,
            "repository",
            not_found=f'Repository "{owner_login}/{repository.name}" not found.',
        )
        languages = parse_model(
            LanguageConnection,
            require_object(node, "languages"),
            "repository languages",
        )
        repository.languages.edges.extend(languages.edges)

        has_next_page = languages.has_more
        if languages.page_info is not None:
            cursor = languages.page_info.end_cursor
        if has_next_page and cursor is None:
            raise DataShapeError(
                "GitHub reported another languages page without a cursor"
            )

    repository.languages.page_info = PageInfo(has_next_page=False, end_cursor=cursor)
    logger.debug(
        "Repository %s has %d language edges",
        repository.identifier,
        len(repository.languages.edges),
    )
