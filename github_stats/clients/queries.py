REPOSITORY_PAGE_SIZE = 100
LANGUAGE_PAGE_SIZE = 20
LANGUAGE_SUBPAGE_SIZE = 100


VIEWER_LOGIN_QUERY = """
query {
  viewer {
    login
  }
}
"""


CONTRIBUTION_CALENDAR_QUERY = """
query($login: String!, $from: DateTime!, $to: DateTime!) {
  user(login: $login) {
    contributionsCollection(from: $from, to: $to) {
      contributionCalendar {
        weeks {
          contributionDays {
            date
            contributionCount
            color
          }
        }
      }
    }
  }
}
"""


_REPOSITORY_CONNECTION = """
repositories(
  first: $first
  after: $cursor
  ownerAffiliations: OWNER
  privacy: $privacy
) {
  pageInfo {
    hasNextPage
    endCursor
  }
  nodes {
    name
    owner { login }
    isFork
    isPrivate
    languages(first: $languageFirst, orderBy: { field: SIZE, direction: DESC }) {
      pageInfo {
        hasNextPage
        endCursor
      }
      edges {
        size
        node {
          name
          color
        }
      }
    }
  }
}
"""

_RATE_LIMIT = """
rateLimit {
  cost
  remaining
  resetAt
}
"""

USER_REPOSITORIES_QUERY = (
    "query($login: String!, $first: Int!, $cursor: String, "
    "$privacy: RepositoryPrivacy, $languageFirst: Int!) {\n"
    "user(login: $login) {\n"
    + _REPOSITORY_CONNECTION
    + "}\n"
    + _RATE_LIMIT
    + "}\n"
)

VIEWER_REPOSITORIES_QUERY = (
    "query($first: Int!, $cursor: String, "
    "$privacy: RepositoryPrivacy, $languageFirst: Int!) {\n"
    "viewer {\n"
    "login\n"
    + _REPOSITORY_CONNECTION
    + "}\n"
    + _RATE_LIMIT
    + "}\n"
)


REPOSITORY_LANGUAGES_QUERY = """
query($owner: String!, $name: String!, $first: Int!, $cursor: String) {
  repository(owner: $owner, name: $name) {
    languages(
      first: $first
      after: $cursor
      orderBy: { field: SIZE, direction: DESC }
    ) {
      pageInfo {
        hasNextPage
        endCursor
      }
      edges {
        size
        node {
          name
          color
        }
      }
    }
  }
}
"""
