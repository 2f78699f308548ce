import logging
import logging.config
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from polysite.config import SiteSettings
from polysite.models.website import WebsiteModel
from polysite.routers.site import RequestRenderer, TemplateDataFactory
from polysite.services.builder import build_from_settings
from polysite.services.renderer import render

logging.config.dictConfig(
    {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "format": '{"time": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", "message": "%(message)s"}',
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "json",
            },
        },
        "root": {"level": "INFO", "handlers": ["console"]},
    }
)

logger = logging.getLogger(__name__)

DEFAULT_RATE_LIMIT = "120/minute"


def create_app(
    model: WebsiteModel,
    make_template_data: Optional[TemplateDataFactory] = None,
    rate_limit: Optional[str] = DEFAULT_RATE_LIMIT,
) -> FastAPI:
    """Return an application serving every page and pass-through asset of *model*.

    Each application carries its own rate limiter; pass ``rate_limit=None``
    to disable limiting.
    """
    app = FastAPI(
        title="polysite",
        description="Serves a multilingual website assembled from translated fragments.",
        version="1.0.0",
        docs_url=None,
        redoc_url=None,
    )

    # Rate-limiting state
    app.state.limiter = Limiter(
        key_func=get_remote_address,
        default_limits=[rate_limit] if rate_limit else [],
        enabled=rate_limit is not None,
    )
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled exception for %s", request.url)
        return JSONResponse(status_code=500, content={"detail": "An unexpected error occurred."})

    @app.get("/healthz", summary="Health check", include_in_schema=False)
    async def healthz() -> dict:
        return {"pages": len(model.dynamic), "static": len(model.static)}

    render(model, RequestRenderer(app, model.content_root, make_template_data))
    logger.info("Serving %d pages and %d pass-through entries", len(model.dynamic), len(model.static))
    return app


def get_app() -> FastAPI:
    """Application factory for ``uvicorn --factory polysite.main:get_app``."""
    settings = SiteSettings()
    logging.getLogger().setLevel(settings.log_level)
    return create_app(build_from_settings(settings), rate_limit=settings.rate_limit)
