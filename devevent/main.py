import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from devevent.config import get_settings
from devevent.controllers.bookings import router as bookings_router
from devevent.controllers.events import router as events_router
from devevent.controllers.health import router as health_router
from devevent.errors import register_exception_handlers
from devevent.lifespan import lifespan
from devevent.middleware import HTTPLogMiddleware

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s"


def create_app() -> FastAPI:
    """Build the application.

    Reads settings eagerly, so a missing ``DATABASE_URL`` or ``BASE_URL``
    fails here rather than on the first request.
    """
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.site.log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )

    app = FastAPI(title="DevEvent API", version="1.0.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors.origins,
        allow_origin_regex=settings.cors.origins_regex or None,
        allow_credentials=settings.cors.allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if settings.debug.request:
        logging.getLogger("devevent.http").setLevel(logging.DEBUG)
        app.add_middleware(HTTPLogMiddleware)

    register_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(events_router)
    app.include_router(bookings_router)
    return app
