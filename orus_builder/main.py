import logging
import time
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy import text
from alembic.config import Config
from alembic import command
from orus_builder.core.config import settings
from orus_builder.core.errors import OrusError, describe_exception, error_envelope
from orus_builder.core.logging import configure_logging
from orus_builder.core.registry import ServiceRegistry
from orus_builder.api.routes import router as api_router
from orus_builder.db.session import engine

configure_logging()
log = logging.getLogger(__name__)


def wait_for_database(max_retries: int = 30, retry_delay: float = 1.0) -> None:
    """Wait for the database to accept connections."""
    for attempt in range(max_retries):
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            log.info("Database connection successful")
            return
        except Exception as e:
            if attempt < max_retries - 1:
                log.warning("Database not ready, retrying in %s seconds (attempt %d/%d): %s",
                            retry_delay, attempt + 1, max_retries, e)
                time.sleep(retry_delay)
            else:
                log.error("Database connection failed after %d attempts", max_retries)
                raise


def run_migrations() -> None:
    """Run Alembic migrations to head."""
    try:
        log.info("Running database migrations...")
        command.upgrade(Config("alembic.ini"), "head")
        log.info("Database migrations completed successfully")
    except Exception as e:
        log.error("Database migration failed: %s", e, exc_info=True)
        raise


@asynccontextmanager
async def lifespan(app: FastAPI):
    log.info("Starting API server...", extra={"stage": "startup"})
    try:
        wait_for_database()
        run_migrations()
        log.info("API server startup complete", extra={"stage": "startup"})
    except Exception as e:
        log.error("API startup failed: %s", e, exc_info=True, extra={"stage": "startup"})
        raise
    yield
    log.info("Shutting down API server...", extra={"stage": "shutdown"})


app = FastAPI(
    title=settings.app_name,
    version="0.1.0",
    lifespan=lifespan
)
app.state.services = ServiceRegistry.default()
app.include_router(api_router, prefix="/api")


@app.exception_handler(OrusError)
async def orus_error_handler(request: Request, exc: OrusError):
    log.warning("%s: %s", exc.code, exc, extra={"stage": request.url.path})
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_envelope()))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    envelope = error_envelope("VALIDATION_ERROR", {"errors": jsonable_encoder(exc.errors())})
    return JSONResponse(status_code=422, content=envelope)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    log.exception("Unhandled error", extra={"stage": request.url.path})
    return JSONResponse(status_code=500, content=error_envelope("INTERNAL_ERROR", {"error": describe_exception(exc)}))


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("orus_builder.main:app", host=settings.api_host, port=settings.port)
