"""
Utilidades del sistema.
"""
from .datetime_utils import get_local_now, get_local_timezone, local_naive_now, to_naive_local

__all__ = ["get_local_now", "get_local_timezone", "local_naive_now", "to_naive_local"]
