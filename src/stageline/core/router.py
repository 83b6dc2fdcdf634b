# src/stageline/core/router.py
"""
Roteador de eventos do pipeline.

Este módulo define o `EventRouter`, um dispatcher publish/subscribe síncrono
indexado por nome de evento, acrescido do canal reservado ``@all`` que recebe
todas as emissões (inclusive ``@error`` e ``@end``).

Responsabilidades do módulo:
    - Registrar listeners preservando a ordem de registro
    - Manter o mapa de presença de handlers (evento -> quantidade)
    - Publicar eventos de forma síncrona, até a conclusão de todos os listeners

Decisões arquiteturais:
    - Inscrições são aceitas apenas antes do início da run (append-only)
    - ``@all`` é notificado antes dos listeners específicos do evento
    - O roteador não captura exceções: a política de erro pertence ao
      controlador de ciclo de vida

Invariantes:
    - Após o início da run, o conjunto de listeners é imutável
    - A ordem de entrega é a ordem de registro
    - Um publish retorna apenas após todos os listeners concluírem

Limites explícitos:
    - Não valida transições nem nomes reservados
    - Não constrói contextos de chamada
    - Não registra trace

Este módulo existe para garantir entrega determinística de eventos
e, com isso, um trace determinístico para cadeias síncronas de emit.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Sequence

from .events import ALL
from .exceptions import SubscriptionClosedError
from .types import RunState

# Listener: (trace_node, *args) -> None
Listener = Callable[..., Any]


class EventRouter:
    """Dispatcher síncrono de eventos com canal ``@all``."""

    def __init__(self, state: RunState) -> None:
        self._state = state
        self._listeners: Dict[str, List[Listener]] = {}

    def ensure_open(self, event: str) -> None:
        """Falha se a run já iniciou (inscrições são congeladas)."""
        if self._state.started:
            raise SubscriptionClosedError(
                "Can not add handlers after pipeline started",
                details={"event": event, "status": self._state.status.value},
            )

    def subscribe(self, event: str, listener: Listener) -> None:
        self.ensure_open(event)
        self._listeners.setdefault(event, []).append(listener)

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, ()))

    def has_listeners(self, event: str) -> bool:
        return self.listener_count(event) > 0

    def publish(self, event: str, node: Any, payload: Sequence[Any]) -> None:
        """
        Entrega `event` ao canal ``@all`` e depois aos seus listeners.

        Listeners de ``@all`` recebem `(node, event, *payload)`; listeners do
        evento recebem `(node, *payload)`.
        """
        # Cópia: um listener pode provocar novos publishes aninhados.
        for listener in list(self._listeners.get(ALL, ())):
            listener(node, event, *payload)
        for listener in list(self._listeners.get(event, ())):
            listener(node, *payload)
