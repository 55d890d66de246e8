from collections.abc import Mapping
from typing import Any

import pytest


class FakeGraphQLClient:
    """Stand-in transport replaying canned GraphQL envelopes in order."""

    def __init__(self, responses: list[Any]) -> None:
        self.responses = list(responses)
        self.calls: list[tuple[str, dict[str, Any]]] = []

    async def execute(
        self, query: str, variables: Mapping[str, Any] | None = None
    ) -> Any:
        self.calls.append((query, dict(variables or {})))
        if not self.responses:
            raise AssertionError("unexpected GraphQL request")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def build_repo(
    name: str,
    *,
    owner: str | None = "octocat",
    is_fork: bool = False,
    is_private: bool = False,
    languages: tuple[tuple[str, int, str | None], ...] = (),
    has_more_languages: bool = False,
    languages_cursor: str | None = None,
) -> dict[str, Any]:
    return {
        "name": name,
        "owner": {"login": owner} if owner else None,
        "isFork": is_fork,
        "isPrivate": is_private,
        "languages": {
            "pageInfo": {
                "hasNextPage": has_more_languages,
                "endCursor": languages_cursor,
            },
            "edges": [
                {"size": size, "node": {"name": language, "color": color}}
                for language, size, color in languages
            ],
        },
    }


def build_page(
    nodes: list[dict[str, Any]],
    *,
    has_next_page: bool = False,
    end_cursor: str | None = None,
    owner_field: str = "user",
    remaining: int = 4999,
) -> dict[str, Any]:
    owner: dict[str, Any] = {
        "repositories": {
            "pageInfo": {"hasNextPage": has_next_page, "endCursor": end_cursor},
            "nodes": nodes,
        }
    }
    if owner_field == "viewer":
        owner["login"] = "octocat"
    return {
        "data": {
            owner_field: owner,
            "rateLimit": {
                "cost": 1,
                "remaining": remaining,
                "resetAt": "2026-02-20T12:00:00Z",
            },
        }
    }


def build_languages_page(
    languages: tuple[tuple[str, int, str | None], ...],
    *,
    has_next_page: bool = False,
    end_cursor: str | None = None,
) -> dict[str, Any]:
    return {
        "data": {
            "repository": {
                "languages": {
                    "pageInfo": {
                        "hasNextPage": has_next_page,
                        "endCursor": end_cursor,
                    },
                    "edges": [
                        {"size": size, "node": {"name": language, "color": color}}
                        for language, size, color in languages
                    ],
                }
            }
        }
    }


@pytest.fixture
def make_client() -> type[FakeGraphQLClient]:
    return FakeGraphQLClient


@pytest.fixture
def make_repo():
    return build_repo


@pytest.fixture
def make_page():
    return build_page


@pytest.fixture
def make_languages_page():
    return build_languages_page


@pytest.fixture(autouse=True)
def no_configured_token(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
