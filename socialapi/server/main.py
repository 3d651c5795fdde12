"""FastAPI application entry points.

One package, three services: ``auth_app``, ``post_app`` and ``tweet_app``
each own their database and routers. Run one with e.g.
``uvicorn socialapi.server.main:post_app``.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from socialapi.db import DATABASES
from socialapi.server.errors import register_exception_handlers
from socialapi.server.routers import auth, comments, health, posts, tweets, users
from socialapi.server.settings import settings
from socialapi.services.user_service import user_service

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)

SERVICES = {
    "auth": {
        "title": "Auth Service",
        "description": "Registration, login, JWT issuing and user lookups",
        "routers": [auth.router, users.router],
    },
    "post": {
        "title": "Post Service",
        "description": "Posts, threaded comments and likes",
        "routers": [posts.router, comments.router],
    },
    "tweet": {
        "title": "Tweet Service",
        "description": "Tweets, tweet comments and tweet likes",
        "routers": [tweets.router],
    },
}


def create_app(service: str) -> FastAPI:
    """Build the ASGI app for ``service`` (``auth``, ``post`` or ``tweet``)."""
    if service not in SERVICES:
        raise ValueError(f"Unknown service {service!r}; expected one of {sorted(SERVICES)}")

    config = SERVICES[service]
    database = DATABASES[service]

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting %s...", config["title"])
        if settings.DATABASE_AUTO_CREATE:
            database.create_all()
            logger.info("%s database schema ensured", service)

        yield

        logger.info("Shutting down %s...", config["title"])
        if service == "post":
            user_service.shutdown()

    app = FastAPI(
        title=config["title"],
        description=config["description"],
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.service_name = service
    app.state.service_title = config["title"]
    app.state.database = database

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(health.router)
    for router in config["routers"]:
        app.include_router(router)

    @app.get("/")
    def root():
        """Welcome message with API info."""
        return {
            "message": f"{config['title']} API",
            "version": "1.0.0",
            "docs": "/docs",
        }

    return app


auth_app = create_app("auth")
post_app = create_app("post")
tweet_app = create_app("tweet")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        f"socialapi.server.main:{settings.SERVICE_NAME}_app",
        host=settings.SERVER_HOST,
        port=settings.SERVER_PORT,
        reload=True
    )
