from datetime import date

from fastapi import APIRouter
from fastapi import Query
from fastapi import Response
from fastapi import Security
from fastapi.security import HTTPAuthorizationCredentials

from github_stats.api.errors import to_http_exception
from github_stats.api.schemas.calendar import ContributionCalendar
from github_stats.core.security import bearer_scheme
from github_stats.core.security import resolve_github_token
from github_stats.exceptions import GitHubStatsError
from github_stats.services.calendar_service import fetch_contribution_calendar
from github_stats.services.calendar_service import fetch_viewer_calendar
from github_stats.views.heatmap import HeatmapView


router = APIRouter()


@router.get("/")
async def root() -> dict[str, str]:
    """Return a basic service greeting."""

    return {"message": "Hello World"}


@router.get("/health/live")
def health_live() -> dict[str, str]:
    """Return liveness probe response for health checks."""

    return {"status": "ok"}


@router.get("/heatmap/me")
async def get_authenticated_user_heatmap(
    from_date: date | None = Query(default=None, alias="from"),
    to_date: date | None = Query(default=None, alias="to"),
    credentials: HTTPAuthorizationCredentials | None = Security(bearer_scheme),
) -> dict[str, object]:
    """Return the contribution calendar of the token's own GitHub account."""

    token = resolve_github_token(credentials)

    try:
        username, calendar = await fetch_viewer_calendar(token, from_date, to_date)
    except GitHubStatsError as exc:
        raise to_http_exception(exc) from exc

    return {"username": username, **calendar.model_dump()}


@router.get("/users/{username}/calendar")
async def get_user_calendar(
    username: str,
    from_date: date | None = Query(default=None, alias="from"),
    to_date: date | None = Query(default=None, alias="to"),
    credentials: HTTPAuthorizationCredentials | None = Security(bearer_scheme),
) -> ContributionCalendar:
    """Return the normalized contribution calendar of `username`."""

    token = resolve_github_token(credentials)

    try:
        return await fetch_contribution_calendar(username, token, from_date, to_date)
    except GitHubStatsError as exc:
        raise to_http_exception(exc) from exc


@router.get("/users/{username}/heatmap.svg")
async def get_user_heatmap_svg(
    username: str,
    from_date: date | None = Query(default=None, alias="from"),
    to_date: date | None = Query(default=None, alias="to"),
    year_label: str | None = None,
    total_label: str | None = None,
    credentials: HTTPAuthorizationCredentials | None = Security(bearer_scheme),
) -> Response:
    """Render the calendar as SVG; data problems show up inside the image."""

    token = resolve_github_token(credentials)
    view = await HeatmapView.load(
        username=username,
        token=token,
        start=from_date,
        end=to_date,
        year_label=year_label,
        total_label=total_label,
    )
    return Response(content=view.render_svg(), media_type="image/svg+xml")
