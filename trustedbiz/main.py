# Main application file



import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import SQLAlchemyError

from trustedbiz.database import Database
from trustedbiz.core.rate_limiter import limiter
from trustedbiz.core.config import settings
from trustedbiz.routers import (
    auth,
    profile,
    businesses,
    reviews,
    search,
    home,
    admin,
    admin_reviews,
    admin_users,
)


# LOGGING CONFIGURATION

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(message)s",
)

logger = logging.getLogger("trustedbiz")


# DATABASE LIFECYCLE

@asynccontextmanager
async def lifespan(app: FastAPI):
    database: Database = app.state.database
    database.connect()

    if settings.AUTO_CREATE_TABLES:
        database.create_tables()

    logger.info("Database pool ready")

    yield

    database.dispose()
    logger.info("Database pool drained")


def create_app(database: Database | None = None) -> FastAPI:

    # APP INIT

    app = FastAPI(
        title="Trusted Businesses API",
        description="Business directory with reviews, search and admin moderation",
        version="1.0.0",
        debug=settings.DEBUG,
        lifespan=lifespan,
    )

    app.state.database = database or Database.from_settings()


    # CORS (Token-based auth)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=False,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Authorization", "Content-Type"],
    )


    # RATE LIMITING

    app.state.limiter = limiter
    app.add_exception_handler(
        RateLimitExceeded,
        _rate_limit_exceeded_handler
    )


    # INTERNAL ERRORS

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError):
        logger.exception(f"Database error on {request.method} {request.url.path}")
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )


    # REQUEST LOGGING MIDDLEWARE

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start_time = time.time()

        response = await call_next(request)

        duration = round((time.time() - start_time) * 1000, 2)

        logger.info(
            f"{request.method} {request.url.path} "
            f"Status: {response.status_code} "
            f"Time: {duration}ms"
        )

        return response


    # ROUTERS

    app.include_router(auth.router)
    app.include_router(profile.router)
    app.include_router(businesses.router)
    app.include_router(reviews.router)
    app.include_router(search.router)
    app.include_router(home.router)
    app.include_router(admin.router)
    app.include_router(admin_reviews.router)
    app.include_router(admin_users.router)


    # ROOT

    @app.get("/")
    def root():
        logger.info("Health check endpoint called")
        return {"message": "Trusted Businesses API is running"}

    return app


app = create_app()
