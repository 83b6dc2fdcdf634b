# src/stageline/core/api.py
"""
Fábrica de contextos de chamada dos handlers.

Este módulo constrói o objeto de API entregue a cada invocação de handler e
implementa as duas convenções de chamada suportadas pelo pipeline.

Convenções (`CallMode`, escolhida uma vez por pipeline):
    - IMPLICIT → o handler recebe apenas o payload; a API fica vinculada ao
      contexto de execução corrente e é lida via `stage` / `current_api()`
    - EXPLICIT → o handler recebe a API como primeiro argumento, seguida do
      payload; o receptor próprio do handler (ex.: `self` de um método
      vinculado) não é tocado

Superfícies de API:
    - StageAPI    → handlers ordinários: `context`, `emit`, `end`, `safe`
    - InternalAPI → handlers internos (``@error``, ``@end``, ``@all``):
      apenas `context`; não podem emitir nem reencerrar o pipeline

Decisões arquiteturais:
    - O vínculo implícito usa `contextvars`, portanto é herdado por tasks e
      callbacks do asyncio agendados de dentro do handler
    - Cada invocação recebe um objeto de API próprio, ligado ao nó de trace
      do evento tratado
    - A API não contém política de erro: delega ao controlador do pipeline

Limites explícitos:
    - Não valida transições
    - Não despacha eventos diretamente
"""

from __future__ import annotations

import functools
from contextlib import contextmanager
from contextvars import ContextVar
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Dict, Iterator, Mapping, Optional, Sequence, Union

from .exceptions import PipelineError

if TYPE_CHECKING:  # pragma: no cover
    from .pipeline import Pipeline
    from .trace import TraceNode


class CallMode(str, Enum):
    """Convenção de chamada de handlers."""
    IMPLICIT = "implicit"
    EXPLICIT = "explicit"


_current_api: ContextVar[Optional["BaseAPI"]] = ContextVar("stageline_current_api", default=None)


class BaseAPI:
    """Superfície comum a todas as APIs: leitura e merge do contexto."""

    __slots__ = ("_pipeline",)

    def __init__(self, pipeline: "Pipeline") -> None:
        self._pipeline = pipeline

    def context(self, data: Optional[Mapping[str, Any]] = None) -> Union[Dict[str, Any], "BaseAPI"]:
        """Sem argumento retorna um snapshot; com um mapa faz merge e retorna a API."""
        if data is None:
            return self._pipeline.context()
        self._pipeline.context(data)
        return self


class InternalAPI(BaseAPI):
    """API de handlers internos (``@error``, ``@end``, ``@all``)."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "InternalAPI()"


class StageAPI(BaseAPI):
    """API de handlers ordinários, ligada ao evento e ao nó de trace tratados."""

    __slots__ = ("_event", "_node")

    def __init__(self, pipeline: "Pipeline", event: str, node: "TraceNode") -> None:
        super().__init__(pipeline)
        self._event = event
        self._node = node

    @property
    def event(self) -> str:
        return self._event

    def emit(self, next_event: str, *payload: Any) -> "StageAPI":
        self._pipeline._emit(self._event, self._node, next_event, payload)
        return self

    def end(self, error: Optional[BaseException] = None) -> "StageAPI":
        self._pipeline._end(error, self._node)
        return self

    def safe(self, fn: Callable[..., Any]) -> Callable[..., Any]:
        """
        Envolve um callback para que exceções sejam roteadas via `end(error)`.

        Necessário para callbacks diferidos (timers, callbacks do loop), que
        executam fora do try/except do dispatcher. No modo implícito a API
        também é vinculada durante a execução do callback.
        """
        mode = self._pipeline.call_mode

        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                with bound(mode, self):
                    return fn(*args, **kwargs)
            except Exception as exc:
                self._pipeline._recover(exc, self._node)
            return None

        return wrapper

    def __repr__(self) -> str:
        return f"StageAPI(event={self._event!r})"


@contextmanager
def bound(mode: CallMode, api: BaseAPI) -> Iterator[None]:
    """Vincula `api` ao contexto corrente quando o modo é IMPLICIT."""
    if mode is not CallMode.IMPLICIT:
        yield
        return
    token = _current_api.set(api)
    try:
        yield
    finally:
        _current_api.reset(token)


def invoke(mode: CallMode, handler: Callable[..., Any], api: BaseAPI, payload: Sequence[Any]) -> Any:
    if mode is CallMode.EXPLICIT:
        return handler(api, *payload)
    return handler(*payload)


def current_api() -> BaseAPI:
    """Retorna a API vinculada ao handler em execução (modo IMPLICIT)."""
    api = _current_api.get()
    if api is None:
        raise PipelineError("No pipeline handler is running in this context")
    return api


class _StageProxy:
    """Acesso à API corrente por atributo: `stage.emit(...)`, `stage.end()`."""

    __slots__ = ()

    def __getattr__(self, name: str) -> Any:
        return getattr(current_api(), name)

    def __repr__(self) -> str:
        api = _current_api.get()
        return f"<stage proxy for {api!r}>"


stage = _StageProxy()
