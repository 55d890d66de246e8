import logging
from datetime import date
from datetime import datetime
from datetime import time
from datetime import UTC

from github_stats.api.schemas.calendar import ContributionCalendar
from github_stats.api.schemas.calendar import ContributionDay
from github_stats.api.schemas.calendar import ContributionWeek
from github_stats.clients.github_client import GraphQLExecutor
from github_stats.clients.github_client import fetch_viewer_login
from github_stats.clients.github_client import open_client
from github_stats.clients.queries import CONTRIBUTION_CALENDAR_QUERY
from github_stats.clients.validation import RawContributionCalendar
from github_stats.clients.validation import parse_model
from github_stats.clients.validation import raise_for_graphql_errors
from github_stats.clients.validation import require_object
from github_stats.exceptions import InvalidRangeError


logger = logging.getLogger(__name__)

END_OF_DAY = time(23, 59, 59)


def contribution_level(count: int) -> int:
    """Map daily contribution count to a heatmap level in range 0..4."""

    if count <= 0:
        return 0
    if count <= 2:
        return 1
    if count <= 5:
        return 2
    if count <= 10:
        return 3
    return 4


def map_calendar(raw: RawContributionCalendar) -> ContributionCalendar:
    """Build the normalized calendar and its total in a single pass."""

    total = 0
    weeks: list[ContributionWeek] = []
    for raw_week in raw.weeks:
        days: list[ContributionDay] = []
        for raw_day in raw_week.contribution_days:
            count = raw_day.contribution_count
            total += count
            days.append(
                ContributionDay(
                    date=raw_day.date,
                    count=count,
                    level=contribution_level(count),
                    color=raw_day.color,
                )
            )
        weeks.append(ContributionWeek(days=tuple(days)))

    return ContributionCalendar(weeks=tuple(weeks), total=total)


def _as_utc(value: date | datetime, end_of_day: bool) -> datetime:
    # datetime is a date subclass, so it has to be checked first.
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)
    return datetime.combine(value, END_OF_DAY if end_of_day else time.min, tzinfo=UTC)


def one_year_before(moment: datetime) -> datetime:
    try:
        return moment.replace(year=moment.year - 1)
    except ValueError:
        # Feb 29 has no counterpart in the previous year.
        return moment.replace(year=moment.year - 1, day=28)


def resolve_date_range(
    start: date | datetime | None = None,
    end: date | datetime | None = None,
    now: datetime | None = None,
) -> tuple[datetime, datetime]:
    """Resolve the calendar window, defaulting to the year ending now.

    Raises:
        InvalidRangeError: If `start` is after `end`. Equal bounds are allowed.
    """

    if end is None:
        resolved_end = _as_utc(now or datetime.now(UTC), end_of_day=True)
    else:
        resolved_end = _as_utc(end, end_of_day=True)

    if start is None:
        resolved_start = one_year_before(resolved_end)
    else:
        resolved_start = _as_utc(start, end_of_day=False)

    if resolved_start > resolved_end:
        raise InvalidRangeError("Start date must be before or equal to end date")

    return resolved_start, resolved_end


def _format_datetime(value: datetime) -> str:
    return value.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


async def fetch_contribution_calendar(
    username: str,
    token: str,
    start: date | datetime | None = None,
    end: date | datetime | None = None,
    *,
    client: GraphQLExecutor | None = None,
) -> ContributionCalendar:
    """Fetch and normalize a user's contribution calendar.

    The whole range is fetched with one GraphQL request; GitHub returns every
    week of the window in a single response.

    Raises:
        InvalidRangeError: If `start` is after `end`; no request is made.
        NotFoundError: If the user or its calendar is absent.
        GitHubPermissionError: If the token lacks access.
        GraphQLError: For other errors reported by GitHub.
    """

    from_moment, to_moment = resolve_date_range(start, end)
    variables = {
        "login": username,
        "from": _format_datetime(from_moment),
        "to": _format_datetime(to_moment),
    }
    logger.debug(
        "Fetching contribution calendar for %s from %s to %s",
        username,
        variables["from"],
        variables["to"],
    )

    not_found = f'User "{username}" not found or has no contribution data.'
    async with open_client(token, client) as graphql:
        payload = await graphql.execute(CONTRIBUTION_CALENDAR_QUERY, variables)

    data = raise_for_graphql_errors(payload)
    user = require_object(data, "user", not_found=not_found)
    collection = require_object(user, "contributionsCollection", not_found=not_found)
    raw_calendar = require_object(
        collection, "contributionCalendar", not_found=not_found
    )
    calendar = map_calendar(
        parse_model(RawContributionCalendar, raw_calendar, "contribution calendar")
    )

    logger.debug("Found %d contributions for %s", calendar.total, username)
    return calendar


async def fetch_viewer_calendar(
    token: str,
    start: date | datetime | None = None,
    end: date | datetime | None = None,
    *,
    client: GraphQLExecutor | None = None,
) -> tuple[str, ContributionCalendar]:
    """Fetch the calendar of the account the token belongs to."""

    resolve_date_range(start, end)

    async with open_client(token, client) as graphql:
        login = await fetch_viewer_login(graphql)
        calendar = await fetch_contribution_calendar(
            login, token, start, end, client=graphql
        )
    return login, calendar
