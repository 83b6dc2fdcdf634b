# src/stageline/core/exceptions.py
"""
Stageline — Exceções canônicas do engine.

Este módulo define as exceções tipadas levantadas pelo engine quando a API
do pipeline é utilizada de forma incorreta (erros de validação).

Objetivo:
- Permitir que observadores de ``@error`` distingam "uso incorreto da API"
  de "falha da lógica de negócio" de um handler
- Evitar ValueError/RuntimeError genéricos em guardrails críticos

Regras:
- Toda exceção de validação herda de `PipelineError`
- Exceções carregam apenas dados estruturados (serializáveis) em `details`
- A mensagem é curta, estável e em inglês (faz parte do contrato observável)
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class PipelineError(Exception):
    """Base class para erros originados pelo próprio pipeline.

    Importante:
    - `is_pipeline_error` é sempre True, inclusive em subclasses
    - `details` nunca embute stack trace
    """

    is_pipeline_error = True

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = dict(details or {})

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Ciclo de vida
# ---------------------------------------------------------------------------

class AlreadyStartedError(PipelineError):
    """`start()` chamado em um pipeline que já iniciou."""


class SubscriptionClosedError(PipelineError):
    """`on()` chamado após o início do pipeline."""


# ---------------------------------------------------------------------------
# Grafo de transições
# ---------------------------------------------------------------------------

class TransitionGraphError(PipelineError):
    """Grafo de transições malformado (detectado na construção)."""


class InvalidEntryError(PipelineError):
    """Evento de entrada não declarado como chave do grafo."""


class InvalidTransitionError(PipelineError):
    """Transição não permitida a partir do evento corrente."""


class UnknownEventError(PipelineError):
    """Inscrição em evento fora do universo conhecido do grafo."""


# ---------------------------------------------------------------------------
# Nomes de eventos
# ---------------------------------------------------------------------------

class InvalidEventNameError(PipelineError):
    """Nome de evento vazio ou que não é string."""


class ReservedEventError(PipelineError):
    """Tentativa de emitir um evento com prefixo reservado (``@``)."""
