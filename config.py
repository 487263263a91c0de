"""
Configuración centralizada de la aplicación usando pydantic-settings.

Todas las variables se leen del entorno (o de un archivo .env) y quedan
tipadas y validadas en una única instancia global `settings`.
"""
import secrets
import logging
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator


logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Configuración de la aplicación cargada desde variables de entorno."""

    # Database
    database_url: str = Field(
        default="sqlite:///./crud_scaffold.db",
        description="URL de conexión a la base de datos"
    )

    # JWT Configuration
    jwt_secret_key: str = Field(
        default="",
        validate_default=True,
        description="Clave secreta para firmar tokens JWT (OBLIGATORIO en producción)"
    )
    jwt_algorithm: str = Field(
        default="HS256",
        description="Algoritmo para firmar JWT"
    )
    jwt_access_minutes: int = Field(
        default=60,
        ge=1,
        le=1440,
        description="Tiempo de expiración del token en minutos"
    )
    jwt_issuer: str = Field(
        default="CrudScaffoldAPI",
        description="Emisor del token JWT"
    )
    jwt_audience: str = Field(
        default="CrudScaffoldClient",
        description="Audiencia del token JWT"
    )

    # CORS Configuration
    cors_allowed_origins: str = Field(
        default="http://localhost,http://localhost:3000,http://localhost:5173,http://localhost:8000",
        description="Orígenes permitidos para CORS, separados por coma"
    )

    # Application
    app_name: str = Field(
        default="CRUD Scaffold API",
        description="Nombre de la aplicación"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Versión de la aplicación"
    )
    debug_mode: bool = Field(
        default=False,
        description="Modo debug (solo para desarrollo)"
    )

    # Paginación y filtros
    default_items_per_page: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Elementos por página cuando no se indica itemsPerPage"
    )
    max_items_per_page: int = Field(
        default=100,
        ge=1,
        le=1000,
        description="Máximo de elementos por página permitido en la API"
    )
    unpaged_safety_limit: int = Field(
        default=100,
        ge=1,
        le=1000,
        description="Límite aplicado a los listados solicitados sin parámetro page"
    )
    max_filter_depth: int = Field(
        default=5,
        ge=1,
        le=20,
        description="Profundidad máxima de anidamiento en filtros avanzados"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Nivel de logging (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    # Timezone
    timezone: str = Field(
        default="America/Bogota",
        description="Zona horaria de la aplicación (formato IANA)"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("jwt_secret_key")
    @classmethod
    def validate_jwt_secret_key(cls, v: str) -> str:
        """Genera una clave temporal si JWT_SECRET_KEY falta o es muy corta."""
        if not v or len(v) < 32:
            logger.warning(
                "JWT_SECRET_KEY no configurado o muy corto. "
                "Se generó una clave temporal; los tokens no sobreviven a un reinicio."
            )
            return secrets.token_urlsafe(48)
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Valida que el nivel de logging sea válido."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            logger.warning(
                f"Nivel de log '{v}' no válido. Usando 'INFO'. "
                f"Niveles válidos: {valid_levels}"
            )
            return "INFO"
        return v_upper

    @property
    def cors_origins_list(self) -> list[str]:
        """Devuelve la lista de orígenes CORS permitidos."""
        return [origin.strip() for origin in self.cors_allowed_origins.split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        return not self.debug_mode

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


# Instancia global de configuración
settings = Settings()


def configure_logging():
    """Configura el sistema de logging de la aplicación."""
    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format=log_format,
        handlers=[
            logging.StreamHandler(),
        ]
    )

    # Reducir verbosidad de librerías externas
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    logger.info(f"Logging configurado en nivel {settings.log_level}")
    logger.info(f"Aplicación: {settings.app_name} v{settings.app_version}")
