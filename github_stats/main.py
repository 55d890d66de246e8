from fastapi import FastAPI

from github_stats.api.routes.heatmap import router as heatmap_router
from github_stats.api.routes.languages import router as languages_router
from github_stats.core.observability import configure_logging
from github_stats.core.observability import init_sentry
from github_stats.settings import Settings


def create_app() -> FastAPI:
    """Create the FastAPI application with logging, Sentry and routes."""

    settings = Settings()
    configure_logging(settings)
    init_sentry(settings)

    app = FastAPI(title="github-stats")
    app.include_router(heatmap_router)
    app.include_router(languages_router)
    return app


app = create_app()
