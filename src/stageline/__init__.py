# src/stageline/__init__.py
"""
Stageline — pipeline assíncrono de estágios orientado a eventos.

Um pipeline é um autômato finito sobre estágios nomeados ("eventos"): cada
handler pode emitir novos estágios, encerrar o pipeline ou falhar, enquanto
o engine registra um trace causal da execução e aplica um grafo de
transições opcional.

Arquitetura em alto nível:
    - core.pipeline → ciclo de vida, emit/end e política de erros
    - core.api      → convenções de chamada (implícita/explícita)
    - core.trace    → trace hierárquico para inspeção posterior
    - core.config   → configuração declarativa (YAML/JSON)

Limites explícitos:
    - Execução em um único processo
    - Sem estado persistido e sem retry
"""

from .core.api import CallMode, InternalAPI, StageAPI, current_api, stage
from .core.errors import ErrorPayload, describe_error, is_pipeline_error
from .core.events import ALL, END, ERROR
from .core.exceptions import (
    AlreadyStartedError,
    InvalidEntryError,
    InvalidEventNameError,
    InvalidTransitionError,
    PipelineError,
    ReservedEventError,
    SubscriptionClosedError,
    TransitionGraphError,
    UnknownEventError,
)
from .core.pipeline import Pipeline, PipelineOptions, create_pipeline
from .core.trace import TraceNode, trace_to_dicts
from .core.types import RunStatus

__version__ = "0.1.0"

__all__ = [
    "ALL",
    "END",
    "ERROR",
    "AlreadyStartedError",
    "CallMode",
    "ErrorPayload",
    "InternalAPI",
    "InvalidEntryError",
    "InvalidEventNameError",
    "InvalidTransitionError",
    "Pipeline",
    "PipelineError",
    "PipelineOptions",
    "ReservedEventError",
    "RunStatus",
    "StageAPI",
    "SubscriptionClosedError",
    "TraceNode",
    "TransitionGraphError",
    "UnknownEventError",
    "create_pipeline",
    "current_api",
    "describe_error",
    "is_pipeline_error",
    "stage",
    "trace_to_dicts",
]
