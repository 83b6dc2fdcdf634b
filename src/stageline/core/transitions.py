# src/stageline/core/transitions.py
"""
Tabela de transições do pipeline.

Este módulo normaliza o grafo de transições opcional informado pelo usuário
em conjuntos de consulta rápida, validando sua estrutura no momento da
construção do pipeline.

O grafo é um mapa `evento -> eventos seguintes permitidos`. Quando presente:
    - suas chaves são os únicos eventos de entrada válidos
    - cada estágio só pode emitir os eventos listados para ele
    - o universo de eventos inscritíveis é chaves ∪ valores ∪ eventos internos

Quando ausente, qualquer evento pode iniciar o pipeline ou ser emitido a
partir de qualquer estágio.

Decisões arquiteturais:
    - A normalização ocorre uma única vez (construção), nunca durante a run
    - O grafo informado pelo usuário nunca é mutado
    - Erros estruturais são tratados como falhas fatais de configuração

Invariantes:
    - Todos os nomes do grafo são strings não vazias
    - Os eventos internos (``@error``, ``@end``, ``@all``) são sempre conhecidos

Limites explícitos:
    - Não despacha eventos
    - Não interage com trace ou contexto
    - Não decide o que acontece com uma violação (apenas responde)

Este módulo existe para garantir transições explícitas
e verificáveis entre estágios.
"""

from __future__ import annotations

from typing import Dict, FrozenSet, Iterable, Mapping, Optional, Set, Tuple

from .events import INTERNAL_EVENTS
from .exceptions import TransitionGraphError


def _normalize_targets(source: str, targets: Iterable[str]) -> FrozenSet[str]:
    if isinstance(targets, (str, bytes)):
        raise TransitionGraphError(
            f'Transitions for "{source}" must be a collection of event names, not a string',
            details={"event": source},
        )
    try:
        normalized = frozenset(targets)
    except TypeError:
        raise TransitionGraphError(
            f'Transitions for "{source}" must be a collection of event names',
            details={"event": source, "received": type(targets).__name__},
        ) from None

    for target in normalized:
        if not isinstance(target, str) or not target:
            raise TransitionGraphError(
                f'Transition target of "{source}" must be a non-empty string',
                details={"event": source, "received": repr(target)},
            )
    return normalized


class TransitionTable:
    """
    Tabela de consulta de transições normalizada.

    Args:
        transitions: Mapa opcional `evento -> iterável de eventos seguintes`.

    Raises:
        TransitionGraphError: Se o grafo não for um mapa, se algum nome não for
            uma string não vazia ou se algum valor for uma string isolada.
    """

    def __init__(self, transitions: Optional[Mapping[str, Iterable[str]]] = None) -> None:
        self._graph: Optional[Dict[str, FrozenSet[str]]] = None
        known: Set[str] = set(INTERNAL_EVENTS)

        if transitions is not None:
            if not isinstance(transitions, Mapping):
                raise TransitionGraphError(
                    "Transitions must be a mapping of event -> next events",
                    details={"received": type(transitions).__name__},
                )
            graph: Dict[str, FrozenSet[str]] = {}
            for source, targets in transitions.items():
                if not isinstance(source, str) or not source:
                    raise TransitionGraphError(
                        "Transition source must be a non-empty string",
                        details={"received": repr(source)},
                    )
                graph[source] = _normalize_targets(source, targets)
                known.add(source)
                known.update(graph[source])
            self._graph = graph

        self._known: FrozenSet[str] = frozenset(known)

    @property
    def configured(self) -> bool:
        return self._graph is not None

    @property
    def entries(self) -> Tuple[str, ...]:
        """Eventos de entrada declarados, na ordem do grafo (vazio sem grafo)."""
        return tuple(self._graph or ())

    def is_valid_entry(self, event: str) -> bool:
        if self._graph is None:
            return True
        return event in self._graph

    def is_valid_transition(self, source: str, target: str) -> bool:
        if self._graph is None:
            return True
        allowed = self._graph.get(source)
        return allowed is not None and target in allowed

    def is_known_event(self, event: str) -> bool:
        # Sem grafo, qualquer evento é inscritível.
        if self._graph is None:
            return True
        return event in self._known
