"""
Contexto por petición.

Cada petición recibe su propio `RequestContext` (nunca un singleton) donde
los repositorios anotan las operaciones realizadas. Al terminar la petición
se registra un resumen y el contexto se limpia.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Generator, Optional
from uuid import uuid4

logger = logging.getLogger(__name__)


@dataclass
class ActivityEntry:
    action: str
    entity: str
    entity_id: Optional[str] = None
    details: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.utcnow)


class RequestContext:
    """Registro de actividad de una petición."""

    def __init__(self, request_id: Optional[str] = None):
        self.request_id = request_id or str(uuid4())
        self._actions: list[ActivityEntry] = []

    def push(
        self,
        action: str,
        entity: str,
        entity_id: Optional[str] = None,
        **details: Any,
    ) -> ActivityEntry:
        entry = ActivityEntry(action=action, entity=entity, entity_id=entity_id, details=details)
        self._actions.append(entry)
        return entry

    def get(self) -> list[ActivityEntry]:
        return list(self._actions)

    def clean(self) -> None:
        self._actions = []

    def summary(self) -> str:
        return ", ".join(
            f"{entry.action}:{entry.entity}" + (f"({entry.entity_id})" if entry.entity_id else "")
            for entry in self._actions
        )


def get_request_context() -> Generator[RequestContext, None, None]:
    """Dependencia de FastAPI: un contexto nuevo por petición."""
    context = RequestContext()
    try:
        yield context
    finally:
        if context.get():
            logger.debug(f"Actividad de la petición {context.request_id}: {context.summary()}")
        context.clean()
