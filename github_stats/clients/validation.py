"""Classification and validation of raw GitHub GraphQL responses.

Raw JSON never leaves this module: callers get either the `data` object of
an error-free envelope or a pydantic wire model built from a nested field.
"""

from collections.abc import Mapping
from typing import Any
from typing import TypeVar

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import ValidationError
from pydantic.alias_generators import to_camel

from github_stats.exceptions import DataShapeError
from github_stats.exceptions import GitHubPermissionError
from github_stats.exceptions import GraphQLError
from github_stats.exceptions import NotFoundError


ModelT = TypeVar("ModelT", bound=BaseModel)


class WireModel(BaseModel):
    """Base for models mirroring GitHub's camelCase GraphQL fields."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PageInfo(WireModel):
    has_next_page: bool
    end_cursor: str | None = None


class LanguageNode(WireModel):
    name: str
    color: str | None = None


class LanguageEdge(WireModel):
    size: int = Field(ge=0)
    node: LanguageNode


class LanguageConnection(WireModel):
    page_info: PageInfo | None = None
    edges: list[LanguageEdge] = Field(default_factory=list)

    @property
    def has_more(self) -> bool:
        return self.page_info is not None and self.page_info.has_next_page


class RepositoryOwner(WireModel):
    login: str


class RawRepository(WireModel):
    """Repository node as returned by a repositories page."""

    name: str
    owner: RepositoryOwner | None = None
    is_fork: bool
    is_private: bool
    languages: LanguageConnection = Field(default_factory=LanguageConnection)

    @property
    def identifier(self) -> str:
        if self.owner is not None and self.owner.login:
            return f"{self.owner.login}/{self.name}"
        return self.name


class RepositoryConnection(WireModel):
    page_info: PageInfo
    # GitHub can return null for nodes the token cannot resolve.
    nodes: list[RawRepository | None]


class RateLimit(WireModel):
    cost: int
    remaining: int
    reset_at: str


class RawContributionDay(WireModel):
    date: str
    contribution_count: int = Field(ge=0)
    color: str | None = None


class RawContributionWeek(WireModel):
    contribution_days: list[RawContributionDay]


class RawContributionCalendar(WireModel):
    weeks: list[RawContributionWeek] = Field(default_factory=list)


def raise_for_graphql_errors(payload: Any) -> Mapping[str, Any]:
    """Return the `data` object of a GraphQL envelope.

    A non-empty `errors` list takes precedence over any partial `data`.

    Raises:
        GitHubPermissionError: If the first error is a scope/access problem.
        NotFoundError: If the first error says the queried entity is absent.
        GraphQLError: For any other reported error.
        DataShapeError: If the envelope or its `data` object is malformed.
    """

    if not isinstance(payload, Mapping):
        raise DataShapeError("GitHub GraphQL response is invalid")

    errors = payload.get("errors")
    if isinstance(errors, list) and errors:
        first = errors[0]
        if isinstance(first, Mapping):
            message = str(first.get("message") or "GitHub GraphQL returned errors")
            error_type = str(first.get("type") or "").upper()
        else:
            message = str(first)
            error_type = ""

        if "forbidden" in message.lower() or error_type == "FORBIDDEN":
            raise GitHubPermissionError(message)
        if error_type == "NOT_FOUND":
            raise NotFoundError(message)
        raise GraphQLError(message)

    data = payload.get("data")
    if not isinstance(data, Mapping):
        raise DataShapeError("GitHub GraphQL data is missing")
    return data


def require_object(
    parent: Mapping[str, Any],
    key: str,
    not_found: str | None = None,
) -> Mapping[str, Any]:
    """Return the nested object `parent[key]`.

    When `not_found` is given, an absent value means the queried entity does
    not exist and raises `NotFoundError` with that message; otherwise the
    absence is a malformed response and raises `DataShapeError`.
    """

    value = parent.get(key)
    if value is None:
        if not_found is not None:
            raise NotFoundError(not_found)
        raise DataShapeError(f"GitHub response field '{key}' is missing")
    if not isinstance(value, Mapping):
        raise DataShapeError(f"GitHub response field '{key}' is invalid")
    return value


def parse_model(model: type[ModelT], raw: Any, what: str) -> ModelT:
    """Validate nested response JSON into a wire model."""

    try:
        return model.model_validate(raw)
    except ValidationError as exc:
        raise DataShapeError(f"GitHub {what} has an unexpected shape") from exc
