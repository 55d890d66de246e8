import logging

from fastapi import HTTPException

from github_stats.exceptions import GitHubPermissionError
from github_stats.exceptions import GitHubStatsError
from github_stats.exceptions import IdentityMismatchError
from github_stats.exceptions import InvalidRangeError
from github_stats.exceptions import NotFoundError
from github_stats.exceptions import TransportError


logger = logging.getLogger(__name__)


def to_http_exception(exc: GitHubStatsError) -> HTTPException:
    """Translate a library failure into the HTTP error returned to clients."""

    logger.warning("GitHub request failed: %s", exc)
    if isinstance(exc, InvalidRangeError):
        return HTTPException(status_code=400, detail=str(exc))
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, (GitHubPermissionError, IdentityMismatchError)):
        return HTTPException(status_code=403, detail=str(exc))
    if isinstance(exc, TransportError) and exc.status_code == 401:
        return HTTPException(status_code=401, detail="GitHub token is invalid")
    return HTTPException(status_code=502, detail="GitHub API request failed")
