from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials
from fastapi.security import HTTPBearer

from github_stats.settings import Settings


bearer_scheme = HTTPBearer(auto_error=False)


def extract_bearer_token(
    credentials: HTTPAuthorizationCredentials | None,
    fallback_token: str | None = None,
) -> str:
    """Extract and validate a Bearer token from authorization credentials.

    When no Authorization header is sent, `fallback_token` (the configured
    `GITHUB_TOKEN`) is used instead.

    Raises:
        HTTPException: If credentials are missing, malformed, or empty.
    """

    if credentials is None:
        if fallback_token and fallback_token.strip():
            return fallback_token.strip()
        raise HTTPException(
            status_code=401,
            detail="Authorization Bearer token is required",
        )

    if credentials.scheme.lower() != "bearer" or not credentials.credentials.strip():
        raise HTTPException(
            status_code=401,
            detail="Authorization Bearer token is required",
        )

    return credentials.credentials.strip()


def resolve_github_token(credentials: HTTPAuthorizationCredentials | None) -> str:
    return extract_bearer_token(credentials, Settings().github_token)
