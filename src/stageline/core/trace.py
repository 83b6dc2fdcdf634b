# src/stageline/core/trace.py
"""
Construtor de trace hierárquico do pipeline.

Este módulo registra, durante a run, uma árvore de nós que espelha a
causalidade das emissões: os filhos de um nó são exatamente os eventos
emitidos a partir das invocações de handler daquele nó, na ordem de emissão.

Estrutura de um nó:
    - event   → nome do evento emitido
    - payload → lista de valores emitidos com o evento
    - routes  → nós filhos (emissões causadas por este nó)
    - time    → milissegundos decorridos desde o início da run

Decisões arquiteturais:
    - O relógio é uma dependência injetável (`Callable[[], float]`, segundos)
      para que testes possam fixar o tempo
    - ``@error`` e ``@end`` são registrados como nós comuns, sob o nó em que
      `end()` foi chamado
    - `dump()` retorna uma cópia rasa da lista raiz

Invariantes:
    - A lista raiz contém exatamente um nó: o evento de entrada
    - A ordem dos filhos é a ordem de emissão
    - O tempo registrado é sempre um inteiro não negativo para relógios monotônicos

Limites explícitos:
    - Não despacha eventos
    - Não valida transições
    - Não persiste o trace

Este módulo existe para permitir inspeção posterior e testes
determinísticos da sequência exata de eventos de uma run.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

Clock = Callable[[], float]


@dataclass
class TraceNode:
    """Nó do trace de execução."""

    event: str
    payload: List[Any] = field(default_factory=list)
    routes: List["TraceNode"] = field(default_factory=list)
    time: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """
        Converte o nó (e sua subárvore) em dicionários simples.

        O payload é copiado raso: os valores emitidos não são clonados.
        """
        return {
            "event": self.event,
            "payload": list(self.payload),
            "routes": [child.to_dict() for child in self.routes],
            "time": self.time,
        }


def trace_to_dicts(nodes: Iterable[TraceNode]) -> List[Dict[str, Any]]:
    return [node.to_dict() for node in nodes]


def _ms_between(start: float, end: float) -> int:
    return int((end - start) * 1000)


class TraceBuilder:
    """
    Registra nós de trace com tempo relativo ao início da run.

    Args:
        clock: Relógio em segundos. Default: `time.monotonic`.
    """

    def __init__(self, clock: Optional[Clock] = None) -> None:
        self._clock: Clock = time.monotonic if clock is None else clock
        self._roots: List[TraceNode] = []
        self._started_at: Optional[float] = None

    @property
    def started_at(self) -> Optional[float]:
        return self._started_at

    @property
    def roots(self) -> List[TraceNode]:
        return list(self._roots)

    def begin(self) -> None:
        """Registra o timestamp de início da run."""
        self._started_at = self._clock()

    def elapsed_ms(self) -> int:
        if self._started_at is None:
            return 0
        return _ms_between(self._started_at, self._clock())

    def append(
        self,
        parent: Optional[TraceNode],
        event: str,
        payload: Sequence[Any] = (),
    ) -> TraceNode:
        """
        Cria um nó para `event` e o anexa aos filhos de `parent`.

        Com `parent=None` o nó é anexado à lista raiz.
        """
        node = TraceNode(event=event, payload=list(payload), time=self.elapsed_ms())
        siblings = self._roots if parent is None else parent.routes
        siblings.append(node)
        return node

    def dump(self) -> List[TraceNode]:
        return list(self._roots)
