import logging

import pytest
from fastapi.testclient import TestClient

from github_stats.api.schemas.calendar import ContributionCalendar
from github_stats.api.schemas.calendar import ContributionDay
from github_stats.api.schemas.calendar import ContributionWeek
from github_stats.api.schemas.languages import LanguageStats
from github_stats.api.schemas.languages import LanguageStatsResult
from github_stats.api.schemas.languages import RepoCounts
from github_stats.exceptions import GitHubPermissionError
from github_stats.exceptions import IdentityMismatchError
from github_stats.exceptions import NotFoundError
from github_stats.exceptions import TransportError
from github_stats.main import create_app


AUTH = {"Authorization": "Bearer secret"}

CALENDAR = ContributionCalendar(
    weeks=(
        ContributionWeek(
            days=(
                ContributionDay(date="2026-02-19", count=2, level=1),
                ContributionDay(date="2026-02-20", count=7, level=3),
            )
        ),
    ),
    total=9,
)


@pytest.fixture
def client() -> TestClient:
    return TestClient(create_app())


def test_read_root_returns_hello_world(client: TestClient) -> None:
    response = client.get("/")

    assert response.status_code == 200
    assert response.json() == {"message": "Hello World"}


def test_health_live(client: TestClient) -> None:
    response = client.get("/health/live")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_calendar_requires_token(client: TestClient) -> None:
    response = client.get("/users/octocat/calendar")

    assert response.status_code == 401
    assert response.json() == {"detail": "Authorization Bearer token is required"}


def test_calendar_falls_back_to_configured_token(
    monkeypatch: pytest.MonkeyPatch, client: TestClient
) -> None:
    seen_tokens: list[str] = []

    async def fake_fetch(username, token, start=None, end=None):
        seen_tokens.append(token)
        return CALENDAR

    monkeypatch.setenv("GITHUB_TOKEN", "from-env")
    monkeypatch.setattr(
        "github_stats.api.routes.heatmap.fetch_contribution_calendar", fake_fetch
    )

    response = client.get("/users/octocat/calendar")

    assert response.status_code == 200
    assert seen_tokens == ["from-env"]


def test_get_user_calendar(monkeypatch: pytest.MonkeyPatch, client: TestClient) -> None:
    async def fake_fetch(username, token, start=None, end=None):
        assert username == "octocat"
        assert token == "secret"
        assert start.isoformat() == "2026-02-01"
        assert end.isoformat() == "2026-02-28"
        return CALENDAR

    monkeypatch.setattr(
        "github_stats.api.routes.heatmap.fetch_contribution_calendar", fake_fetch
    )

    response = client.get(
        "/users/octocat/calendar?from=2026-02-01&to=2026-02-28", headers=AUTH
    )

    assert response.status_code == 200
    assert response.json() == {
        "weeks": [
            {
                "days": [
                    {"date": "2026-02-19", "count": 2, "level": 1, "color": None},
                    {"date": "2026-02-20", "count": 7, "level": 3, "color": None},
                ]
            }
        ],
        "total": 9,
    }


def test_calendar_rejects_invalid_date_range(client: TestClient) -> None:
    response = client.get(
        "/users/octocat/calendar?from=2026-02-22&to=2026-02-21", headers=AUTH
    )

    assert response.status_code == 400
    assert response.json() == {
        "detail": "Start date must be before or equal to end date"
    }


def test_calendar_for_unknown_user_returns_404(
    monkeypatch: pytest.MonkeyPatch, client: TestClient
) -> None:
    async def fake_fetch(username, token, start=None, end=None):
        raise NotFoundError(f'User "{username}" not found or has no contribution data.')

    monkeypatch.setattr(
        "github_stats.api.routes.heatmap.fetch_contribution_calendar", fake_fetch
    )

    response = client.get("/users/ghost/calendar", headers=AUTH)

    assert response.status_code == 404


def test_route_failure_is_logged_once_as_warning(
    monkeypatch: pytest.MonkeyPatch, client: TestClient, caplog
) -> None:
    async def fake_fetch(username, token, start=None, end=None):
        raise NotFoundError(f'User "{username}" not found.')

    monkeypatch.setattr(
        "github_stats.api.routes.heatmap.fetch_contribution_calendar", fake_fetch
    )
    caplog.set_level(logging.DEBUG, logger="github_stats")

    client.get("/users/ghost/calendar", headers=AUTH)

    failures = [
        record
        for record in caplog.records
        if record.name.startswith("github_stats") and "ghost" in record.getMessage()
    ]
    assert [record.levelno for record in failures] == [logging.WARNING]


def test_authenticated_user_heatmap(
    monkeypatch: pytest.MonkeyPatch, client: TestClient
) -> None:
    async def fake_fetch_viewer(token, start=None, end=None):
        assert token == "secret"
        return "octocat", CALENDAR

    monkeypatch.setattr(
        "github_stats.api.routes.heatmap.fetch_viewer_calendar", fake_fetch_viewer
    )

    response = client.get("/heatmap/me", headers=AUTH)

    assert response.status_code == 200
    assert response.json()["username"] == "octocat"
    assert response.json()["total"] == 9


def test_invalid_github_token_returns_401(
    monkeypatch: pytest.MonkeyPatch, client: TestClient
) -> None:
    async def fake_fetch_viewer(token, start=None, end=None):
        raise TransportError("GitHub API responded with HTTP 401", status_code=401)

    monkeypatch.setattr(
        "github_stats.api.routes.heatmap.fetch_viewer_calendar", fake_fetch_viewer
    )

    response = client.get("/heatmap/me", headers=AUTH)

    assert response.status_code == 401
    assert response.json() == {"detail": "GitHub token is invalid"}


def test_upstream_failure_returns_502(
    monkeypatch: pytest.MonkeyPatch, client: TestClient
) -> None:
    async def fake_fetch_viewer(token, start=None, end=None):
        raise TransportError("GitHub API request failed")

    monkeypatch.setattr(
        "github_stats.api.routes.heatmap.fetch_viewer_calendar", fake_fetch_viewer
    )

    response = client.get("/heatmap/me", headers=AUTH)

    assert response.status_code == 502
    assert response.json() == {"detail": "GitHub API request failed"}


def test_get_user_languages(monkeypatch: pytest.MonkeyPatch, client: TestClient) -> None:
    async def fake_stats(username, token, *, include_forks, include_private):
        assert (include_forks, include_private) == (True, False)
        return LanguageStatsResult(
            languages=(
                LanguageStats(
                    name="Python", bytes=75, repo_count=2, percentage=75.0, color="#3572A5"
                ),
                LanguageStats(name="Shell", bytes=25, repo_count=1, percentage=25.0),
            ),
            total_bytes=100,
            total_repos=2,
            repo_counts=RepoCounts(total=3, public=3, forks=1, non_forks=2),
            filtered_repo_counts=RepoCounts(total=2, public=2, non_forks=2),
        )

    monkeypatch.setattr(
        "github_stats.api.routes.languages.fetch_language_stats", fake_stats
    )

    response = client.get("/users/octocat/languages?include_forks=true", headers=AUTH)

    assert response.status_code == 200
    body = response.json()
    assert [language["name"] for language in body["languages"]] == ["Python", "Shell"]
    assert body["total_bytes"] == 100
    assert body["repo_counts"]["forks"] == 1
    assert body["filtered_repo_counts"]["total"] == 2
    assert body["rate_limit"] is None


@pytest.mark.parametrize(
    ("error", "status_code"),
    [
        (GitHubPermissionError("Forbidden"), 403),
        (IdentityMismatchError("token belongs to someone else"), 403),
        (NotFoundError('User "ghost" not found.'), 404),
    ],
)
def test_language_errors_map_to_status(
    monkeypatch: pytest.MonkeyPatch,
    client: TestClient,
    error: Exception,
    status_code: int,
) -> None:
    async def fake_stats(username, token, *, include_forks, include_private):
        raise error

    monkeypatch.setattr(
        "github_stats.api.routes.languages.fetch_language_stats", fake_stats
    )

    response = client.get("/users/octocat/languages", headers=AUTH)

    assert response.status_code == status_code
    assert response.json() == {"detail": str(error)}


def test_get_user_top_languages(
    monkeypatch: pytest.MonkeyPatch, client: TestClient
) -> None:
    async def fake_top(username, token, limit, *, include_forks, include_private):
        assert limit == 1
        return [LanguageStats(name="Python", bytes=75, repo_count=2, percentage=75.0)]

    monkeypatch.setattr(
        "github_stats.api.routes.languages.get_top_languages", fake_top
    )

    response = client.get("/users/octocat/languages/top?limit=1", headers=AUTH)

    assert response.status_code == 200
    assert [language["name"] for language in response.json()] == ["Python"]


def test_heatmap_svg_renders_calendar(
    monkeypatch: pytest.MonkeyPatch, client: TestClient
) -> None:
    async def fake_fetch(username, token, start=None, end=None, *, client=None):
        return CALENDAR

    monkeypatch.setattr(
        "github_stats.views.heatmap.fetch_contribution_calendar", fake_fetch
    )

    response = client.get("/users/octocat/heatmap.svg?year_label=2026", headers=AUTH)

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("image/svg+xml")
    assert 'data-date="2026-02-20"' in response.text
    assert "2026" in response.text


def test_heatmap_svg_renders_error_inline(
    monkeypatch: pytest.MonkeyPatch, client: TestClient
) -> None:
    async def fake_fetch(username, token, start=None, end=None, *, client=None):
        raise NotFoundError(f'User "{username}" not found or has no contribution data.')

    monkeypatch.setattr(
        "github_stats.views.heatmap.fetch_contribution_calendar", fake_fetch
    )

    response = client.get("/users/ghost/heatmap.svg", headers=AUTH)

    assert response.status_code == 200
    assert "not found or has no contribution data" in response.text
