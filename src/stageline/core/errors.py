"""
Stageline — Canonical Error Payloads (v1)

Este módulo define a representação serializável de erros observados em
``@error``. Observadores usam `describe_error` para separar, de forma
determinística, "uso incorreto da API do pipeline" de "falha da lógica de
negócio" de um handler.

Regras:
- Erros do pipeline (`PipelineError`) usam o nome da classe como código estável
- Demais exceções são encapsuladas como HANDLER_ERROR, sem stack trace
- O payload é sempre serializável quando `details` também for
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional

from .exceptions import PipelineError


# ---------------------------------------------------------------------------
# Catálogo de códigos
# ---------------------------------------------------------------------------

HANDLER_ERROR = "HANDLER_ERROR"


@dataclass(frozen=True)
class ErrorPayload:
    """
    Payload canônico de erro de uma run.

    Campos:
    - type: código estável do erro (nome da classe para erros do pipeline)
    - message: mensagem curta e humana
    - details: dados estruturados relevantes para diagnóstico
    - hint: ação sugerida ao operador
    - pipeline_error: True quando o erro foi originado pelo próprio pipeline
    """

    type: str
    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    hint: Optional[str] = None
    pipeline_error: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def is_pipeline_error(exc: BaseException) -> bool:
    return bool(getattr(exc, "is_pipeline_error", False))


def describe_error(exc: BaseException) -> ErrorPayload:
    """Converte uma exceção observada em ``@error`` em `ErrorPayload`."""
    if isinstance(exc, PipelineError):
        return ErrorPayload(
            type=exc.__class__.__name__,
            message=exc.message,
            details=dict(exc.details),
            hint="Revise o uso da API do pipeline (transições, nomes reservados, ciclo de vida).",
            pipeline_error=True,
        )

    return ErrorPayload(
        type=HANDLER_ERROR,
        message=str(exc) or "Erro inesperado em handler",
        details={"exception_class": exc.__class__.__name__},
        hint="Verifique o log técnico do handler que falhou.",
        pipeline_error=False,
    )
