# src/stageline/core/events.py
"""
Nomes reservados de eventos do Stageline.

Este módulo concentra a convenção de nomes reservados utilizada pelo
engine: qualquer evento iniciado pelo prefixo sentinela ``@`` pertence ao
próprio pipeline e não pode ser emitido por código de usuário.

Eventos internos:
    - ``@error`` → observação de falhas recuperáveis
    - ``@end``   → encerramento do pipeline (sempre emitido)
    - ``@all``   → canal que recebe todas as emissões

Decisões arquiteturais:
    - A validação de nomes reservados ocorre em um único guard
      (`ensure_not_reserved`), nunca em checagens de prefixo espalhadas
    - Nomes de eventos são strings não vazias

Limites explícitos:
    - Não valida transições
    - Não despacha eventos
"""

from __future__ import annotations

from typing import Any, FrozenSet

from .exceptions import InvalidEventNameError, ReservedEventError


RESERVED_PREFIX = "@"

ERROR = "@error"
END = "@end"
ALL = "@all"

INTERNAL_EVENTS: FrozenSet[str] = frozenset({ERROR, END, ALL})


def is_reserved(event: str) -> bool:
    return event.startswith(RESERVED_PREFIX)


def ensure_event_name(event: Any) -> str:
    """Valida que `event` é uma string não vazia e a retorna."""
    if not isinstance(event, str) or not event:
        raise InvalidEventNameError(
            "Event name must be a non-empty string",
            details={"received": type(event).__name__},
        )
    return event


def ensure_not_reserved(event: Any) -> str:
    """
    Guard único para nomes de eventos emitidos por código de usuário.

    Raises:
        InvalidEventNameError: Se o nome não for uma string não vazia.
        ReservedEventError: Se o nome iniciar com o prefixo reservado.
    """
    ensure_event_name(event)
    if is_reserved(event):
        raise ReservedEventError(
            "Event names starting with @ are reseved",
            details={"event": event},
        )
    return event
