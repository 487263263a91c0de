from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import uvicorn
import logging

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from config import settings, configure_logging
from core.exceptions import AppException
from models.common import HealthCheckResponse
from routes import (
    auth_router,
    pruebas_router,
    products_router,
    categories_router,
    tags_router,
    libraries_router,
    media_router,
    users_router,
)
from database.db import create_tables, engine, get_database_url
from routes.crud_router import handle_service_exception

logger = logging.getLogger(__name__)

# Configurar logging una sola vez al inicio
configure_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Maneja el ciclo de vida de la aplicación."""
    logger.info(f"Base de datos: {get_database_url()}")
    try:
        create_tables()
    except SQLAlchemyError as e:
        logger.warning(f"No se pudieron crear tablas en la base de datos: {e}")
    yield


app = FastAPI(
    title=settings.app_name,
    description=(
        "API CRUD genérica con paginación, filtros avanzados saneados, "
        "soft delete y permisos por rol."
    ),
    version=settings.app_version,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    debug=settings.debug_mode
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["*"],
)


@app.exception_handler(AppException)
async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Errores de la aplicación lanzados fuera de un handler (p. ej. en dependencias de auth)."""
    http = handle_service_exception(exc)
    return JSONResponse(status_code=http.status_code, content={"detail": http.detail}, headers=http.headers)


@app.get("/")
async def root():
    """Endpoint raíz con información de la API."""
    return {
        "message": settings.app_name,
        "version": settings.app_version,
        "status": "active",
        "environment": "production" if settings.is_production else "development",
        "docs": "/docs",
        "redoc": "/redoc"
    }


app.include_router(auth_router)
app.include_router(users_router)
app.include_router(pruebas_router)
app.include_router(products_router)
app.include_router(categories_router)
app.include_router(tags_router)
app.include_router(libraries_router)
app.include_router(media_router)


@app.get("/health", response_model=HealthCheckResponse)
def health_check():
    """Health check endpoint con verificación de base de datos."""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        db_status = "connected"
    except SQLAlchemyError as e:
        logger.error(f"Health check: Error de conexión a BD: {e}")
        db_status = "disconnected"

    return HealthCheckResponse(
        status="healthy" if db_status == "connected" else "unhealthy",
        service=settings.app_name,
        version=settings.app_version,
        database=db_status,
        environment="production" if settings.is_production else "development",
    )


if __name__ == "__main__":
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=8000,
        log_level=settings.log_level.lower()
    )
