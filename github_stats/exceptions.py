class GitHubStatsError(Exception):
    """Base class for every failure raised while talking to GitHub."""


class InvalidRangeError(GitHubStatsError, ValueError):
    """Raised when a requested date range starts after it ends."""


class NotFoundError(GitHubStatsError):
    """Raised when the requested user, repository or calendar is absent."""


class DataShapeError(GitHubStatsError):
    """Raised when a GitHub response lacks a field the query asked for."""


class GraphQLError(GitHubStatsError):
    """Raised when GitHub reports errors in a GraphQL response."""


class GitHubPermissionError(GraphQLError):
    """Raised when GitHub rejects a query for scope or access reasons."""


class IdentityMismatchError(GitHubStatsError):
    """Raised when a viewer-scoped query is used for somebody else's login."""


class TransportError(GitHubStatsError):
    """Raised when the HTTP request to GitHub fails."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
