"""
Utilidades para manejo de fechas y zonas horarias.

Las columnas DateTime se guardan en hora local sin zona (naive). Todo
valor que llega con zona se convierte antes de compararlo o guardarlo.
"""
from datetime import datetime
from zoneinfo import ZoneInfo
from config import settings


def get_local_timezone() -> ZoneInfo:
    """Zona horaria configurada (`settings.timezone`)."""
    return ZoneInfo(settings.timezone)


def get_local_now() -> datetime:
    """
    Obtiene la fecha y hora actual en la zona horaria local configurada.

    Returns:
        datetime: Fecha y hora actual con zona horaria.
    """
    return datetime.now(get_local_timezone())


def local_naive_now() -> datetime:
    """Hora local actual sin zona, tal como se guarda en la base de datos."""
    return get_local_now().replace(tzinfo=None)


def to_naive_local(dt: datetime) -> datetime:
    """
    Convierte un datetime con zona a hora local naive. Un datetime naive
    se asume ya en hora local y se devuelve sin cambios.
    """
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(get_local_timezone()).replace(tzinfo=None)
