# src/stageline/core/types.py
"""
Tipos canônicos do engine do Stageline.

Este módulo define as estruturas e enums que padronizam a comunicação entre
o controlador de ciclo de vida, o roteador de eventos e a fábrica de
contextos de chamada.

Componentes principais:
    - RunStatus → estados do pipeline (NOT_STARTED, RUNNING, ENDED)
    - RunState  → estado mutável explícito de uma run
    - Failure   → falha recuperável de um handler, representada como valor

Princípios fundamentais:
    - Todo estado mutável do engine vive em `RunState`
    - Falhas recuperáveis são valores, não fluxo de controle por exceção
    - Nenhuma lógica de execução vive neste módulo

Limites explícitos:
    - Não despacha eventos
    - Não registra trace
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class RunStatus(str, Enum):
    """
    Estados do ciclo de vida de um pipeline.

    Transições válidas:
        - NOT_STARTED → RUNNING (em `start()`)
        - RUNNING → ENDED (na primeira chamada de `end()`)

    Invariantes:
        - Um pipeline nunca retorna a um estado anterior
        - Inscrições (`on`) só são aceitas em NOT_STARTED
    """
    NOT_STARTED = "not_started"
    RUNNING = "running"
    ENDED = "ended"


@dataclass
class RunState:
    """
    Estado mutável de uma run, compartilhado entre controlador e roteador.

    Campos:
    - status: estado corrente do ciclo de vida
    - fatal: erro fatal em propagação (se houver); dispatchers aninhados
      o relançam em vez de convertê-lo em `end(error)`
    """

    status: RunStatus = RunStatus.NOT_STARTED
    fatal: Optional[BaseException] = None

    @property
    def started(self) -> bool:
        return self.status is not RunStatus.NOT_STARTED

    @property
    def ended(self) -> bool:
        return self.status is RunStatus.ENDED


@dataclass(frozen=True)
class Failure:
    """Falha recuperável capturada na invocação de um handler ordinário."""

    event: str
    error: Exception
