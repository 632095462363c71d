"""
Digital Menu API.

Restaurant owners sign in with emailed one-time codes and manage restaurants,
categories and dishes; customers read the public menu of a restaurant.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import HTTPException as FastAPIHTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from digital_menu.core.config import settings
from digital_menu.core.database import Database
from digital_menu.core.errors import AppError, InternalError
from digital_menu.routes.auth import router as auth_router
from digital_menu.routes.categories import router as categories_router
from digital_menu.routes.dishes import router as dishes_router
from digital_menu.routes.restaurants import router as restaurants_router
from digital_menu.services.email_service import EmailService

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def create_app(database: Optional[Database] = None) -> FastAPI:
    """
    Build the application around a database handle.

    Without one, a Database is created from DATABASE_URL. The handle lives on
    app.state for the lifetime of the app and is disposed on shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        logger.info("Starting Digital Menu API...")
        app.state.database.init_db()
        logger.info("Database tables created successfully.")

        if settings.is_production and not EmailService(settings).dispatch_enabled:
            logger.warning(
                "Verification emails are disabled in production: codes are "
                "returned in API responses. Set SEND_VERIFICATION_CODE and RESEND_API_KEY."
            )

        yield

        # Shutdown
        logger.info("Shutting down Digital Menu API...")
        app.state.database.dispose()

    app = FastAPI(
        title="Digital Menu API",
        description="Restaurant menus with passwordless sign-in",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.database = database or Database(settings.DATABASE_URL)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Standardize error responses to {"message": "..."}
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": exc.message, "code": exc.code},
        )

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError):
        logger.error(f"Database error on {request.method} {request.url.path}: {exc}")
        error = InternalError()
        return JSONResponse(
            status_code=error.status_code,
            content={"message": error.message, "code": error.code},
        )

    @app.exception_handler(FastAPIHTTPException)
    async def custom_http_exception_handler(request: Request, exc: FastAPIHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"message": exc.detail})

    # Include routers
    app.include_router(auth_router)
    app.include_router(restaurants_router)
    app.include_router(categories_router)
    app.include_router(dishes_router)

    @app.get("/health")
    def health_check():
        return {
            "status": "ok",
            "service": "digital-menu",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "digital_menu.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=True
    )
