from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy.exc import SQLAlchemyError

from core.config import settings
from core.database import initialize_db, db_manager
from core.logging_config import setup_logging
from core.exceptions import (
    APIException,
    api_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    sqlalchemy_exception_handler,
)
from routes.review import router as review_router
from routes.admin_reviews import router as admin_reviews_router


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings.LOG_LEVEL)
    initialize_db(settings.SQLALCHEMY_DATABASE_URI, settings.ENVIRONMENT == "local")
    logger.info("Reviews service started")
    yield
    await db_manager.dispose()
    logger.info("Reviews service stopped")


def create_app() -> FastAPI:
    app = FastAPI(
        title="Reviews API",
        description="Product reviews, helpful votes, reports and moderation",
        lifespan=lifespan,
    )

    # APIException subclasses HTTPException, so it must be registered first
    app.add_exception_handler(APIException, api_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, sqlalchemy_exception_handler)

    app.include_router(review_router)
    app.include_router(admin_reviews_router)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app


app = create_app()
