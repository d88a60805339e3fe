# =======================================================================================
# doorcheck/main.py - FastAPI Application Entry Point
# =======================================================================================
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import Config
from .api.routes.doorcheck import router as doorcheck_router
from .api.routes.checkins import router as checkins_router
from .api.routes.members import router as members_router
from .database import DatabaseManager
from .logging_config import setup_logging
from .models.schemas import HealthResponse
from .services.doorcheck_service import DoorcheckService
from .utils.exceptions import DoorcheckError

logger = logging.getLogger(__name__)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"ok": False, "error": message})


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(DoorcheckError)
    async def doorcheck_error_handler(request: Request, exc: DoorcheckError):
        return _error(exc.status_code, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        detail = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
        return _error(400, f"Invalid request: {detail}")

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError):
        logger.error("Database error on %s %s", request.method, request.url.path, exc_info=exc)
        return _error(500, "Database error")


def create_app(config: Optional[Config] = None, engine: Optional[Engine] = None) -> FastAPI:
    config = config or Config.from_env()
    setup_logging(config)
    db = DatabaseManager(config, engine=engine)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if config.DB_CREATE_TABLES:
            db.create_tables()
        if not config.DOOR_API_KEY:
            logger.warning("DOOR_API_KEY is not set; door requests will be rejected")
        logger.info("Door check-in API started")
        yield
        db.dispose()

    app = FastAPI(
        title="Door Check-in API",
        version="1.0.0",
        description="Admission decisions and audit trail for event door scans",
        debug=config.API_DEBUG,
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.db = db
    app.state.doorcheck_service = DoorcheckService()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Routers
    app.include_router(doorcheck_router, prefix="/api", tags=["doorcheck"])
    app.include_router(checkins_router, prefix="/api", tags=["checkins"])
    app.include_router(members_router, prefix="/api", tags=["members"])

    @app.get("/api/health", response_model=HealthResponse, tags=["health"])
    def api_health():
        try:
            db.fetch_one("SELECT 1")
            return HealthResponse(status="ok", database=True, message=None)
        except Exception as e:
            logger.error("Health check failed: %s", e)
            return HealthResponse(status="error", database=False, message=str(e))

    return app

