# src/stageline/core/pipeline.py
"""
Controlador de ciclo de vida do pipeline.

Este módulo define o `Pipeline`, o autômato finito de estágios do Stageline.
Cada handler de estágio pode emitir novos eventos, encerrar o pipeline ou
falhar; o controlador registra o trace causal, aplica o grafo de transições
opcional e separa falhas recuperáveis de falhas fatais.

Ciclo de vida:
    - NOT_STARTED → inscrições (`on`) são aceitas
    - RUNNING     → após `start()`; handlers emitem e encerram
    - ENDED       → após o primeiro `end()`; emits são descartados com aviso

Política de erros:
    - Validação (uso incorreto da API): `PipelineError`, levantado no ponto
      de chamada
    - Recuperável: exceção de um handler ordinário, capturada como `Failure`
      e convertida em `end(error)` com o trace acumulado
    - Fatal: exceção em handler interno, ou `end(error)` sem nenhum listener
      de ``@error``; é registrada em log e propagada ao host

Decisões arquiteturais:
    - Todo estado mutável vive em `RunState`, compartilhado com o roteador
    - A entrega de eventos é síncrona: cadeias síncronas de emit produzem
      sempre a mesma árvore de trace
    - Não existe instância global: pipelines são construídos a partir de um
      valor explícito de configuração (`PipelineOptions`)
    - O dump entregue a ``@error``/``@end`` inclui o próprio nó terminal

Invariantes:
    - `start()` ocorre no máximo uma vez por instância
    - ``@error`` e ``@end`` são emitidos no máximo uma vez por run
    - ``@end`` sempre sucede ``@error`` em falhas recuperáveis

Limites explícitos:
    - Não faz retry nem backoff (uma falha encerra a run)
    - Não persiste estado nem trace
    - Não cancela continuações assíncronas em andamento

Este módulo existe para garantir execução previsível,
rastreável e sem falhas silenciosas de pipelines de estágios.
"""

from __future__ import annotations

import asyncio
import functools
import inspect
import json
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Set, Union

from .api import CallMode, InternalAPI, StageAPI, bound, invoke
from .context import ContextStore
from .events import END, ERROR, ensure_event_name, ensure_not_reserved, is_reserved
from .exceptions import (
    AlreadyStartedError,
    InvalidEntryError,
    InvalidTransitionError,
    PipelineError,
    UnknownEventError,
)
from .router import EventRouter, Listener
from .trace import Clock, TraceBuilder, TraceNode
from .transitions import TransitionTable
from .types import Failure, RunState, RunStatus

logger = logging.getLogger(__name__)

Handler = Callable[..., Any]


def _log_debug(*args: Any) -> None:
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(" ".join(str(arg) for arg in args))


def _serialize_payload(payload: Sequence[Any]) -> str:
    return json.dumps(list(payload), separators=(",", ":"), ensure_ascii=False, default=str)


@dataclass(frozen=True)
class PipelineOptions:
    """
    Configuração de construção de um pipeline (todos os campos opcionais).

    Campos:
    - debug: callback de diagnóstico `debug(*args)`; default: log em DEBUG
    - warn: callback de aviso `warn(*args)`; default: `debug("warning", *args)`
    - transitions: grafo `evento -> eventos seguintes permitidos`
    - call_mode: convenção de chamada dos handlers (default IMPLICIT)
    - clock: relógio em segundos usado pelo trace (default `time.monotonic`)
    """

    debug: Callable[..., Any] = _log_debug
    warn: Optional[Callable[..., Any]] = None
    transitions: Optional[Mapping[str, Iterable[str]]] = None
    call_mode: Union[CallMode, str] = CallMode.IMPLICIT
    clock: Optional[Clock] = None


class Pipeline:
    """
    Autômato de estágios com trace causal e transições validadas.

    Uso típico (modo implícito)::

        from stageline import Pipeline, stage

        def parse(raw):
            stage.emit("validate", raw.strip())

        Pipeline().on("parse", parse).on("validate", ...).start("parse", " x ")
    """

    def __init__(self, options: Optional[PipelineOptions] = None) -> None:
        opts = options if options is not None else PipelineOptions()
        self._debug = opts.debug
        self._warn = opts.warn if opts.warn is not None else functools.partial(opts.debug, "warning")
        self._mode = CallMode(opts.call_mode)

        self._transitions = TransitionTable(opts.transitions)
        self._state = RunState()
        self._router = EventRouter(self._state)
        self._trace = TraceBuilder(opts.clock)
        self._context = ContextStore()
        self._tasks: Set["asyncio.Task[Any]"] = set()

    # ------------------------------------------------------------------
    # Inspeção
    # ------------------------------------------------------------------
    @property
    def call_mode(self) -> CallMode:
        return self._mode

    @property
    def status(self) -> RunStatus:
        return self._state.status

    @property
    def started(self) -> bool:
        return self._state.started

    @property
    def ended(self) -> bool:
        return self._state.ended

    def trace(self) -> List[TraceNode]:
        """Cópia rasa da lista raiz do trace (vazia antes de `start()`)."""
        return self._trace.dump()

    def pending_tasks(self) -> List["asyncio.Task[Any]"]:
        """Tasks de handlers assíncronos ainda não concluídas."""
        return [task for task in self._tasks if not task.done()]

    # ------------------------------------------------------------------
    # API pública
    # ------------------------------------------------------------------
    def context(self, data: Optional[Mapping[str, Any]] = None) -> Union[Dict[str, Any], "Pipeline"]:
        """Sem argumento retorna um snapshot; com um mapa faz merge e retorna o pipeline."""
        if data is None:
            return self._context.snapshot()
        self._context.merge(data)
        return self

    def on(self, event: str, handler: Handler) -> "Pipeline":
        """
        Inscreve `handler` em `event`.

        Raises:
            SubscriptionClosedError: Se o pipeline já iniciou.
            UnknownEventError: Se houver grafo e `event` estiver fora dele.
            PipelineError: Se `handler` não for chamável.
        """
        self._router.ensure_open(event)
        ensure_event_name(event)
        if not self._transitions.is_known_event(event):
            raise UnknownEventError(
                f'Subscribing to event "{event}" not listed in transitions',
                details={"event": event},
            )
        if not callable(handler):
            raise PipelineError(
                f'Handler for "{event}" must be callable',
                details={"event": event, "received": type(handler).__name__},
            )

        if is_reserved(event):
            listener = self._internal_listener(event, handler)
        else:
            listener = self._stage_listener(event, handler)
        self._router.subscribe(event, listener)
        return self

    def start(self, event: str, *payload: Any) -> "Pipeline":
        """
        Inicia a run despachando o evento de entrada.

        Raises:
            AlreadyStartedError: Se `start()` já foi chamado com sucesso.
            ReservedEventError: Se `event` usar o prefixo reservado.
            InvalidEntryError: Se houver grafo e `event` não for uma de suas chaves.
        """
        if self._state.started:
            root = self._trace.roots[0]
            raise AlreadyStartedError(
                f'Pipeline has already started with "{root.event}" ({_serialize_payload(root.payload)})',
                details={"event": root.event, "status": self._state.status.value},
            )

        ensure_not_reserved(event)
        if not self._transitions.is_valid_entry(event):
            raise InvalidEntryError(
                f'Event "{event}" is not allowed entry point',
                details={"event": event, "entries": list(self._transitions.entries)},
            )

        self._trace.begin()
        node = self._trace.append(None, event, payload)
        self._state.status = RunStatus.RUNNING
        self._router.publish(event, node, payload)
        return self

    # ------------------------------------------------------------------
    # Operações acessadas via StageAPI
    # ------------------------------------------------------------------
    def _emit(self, source: str, node: TraceNode, next_event: str, payload: Sequence[Any]) -> None:
        if self._state.ended:
            self._warn("Skipping emit() call after pipeline ended:", next_event, *payload)
            return

        ensure_not_reserved(next_event)
        if not self._transitions.is_valid_transition(source, next_event):
            raise InvalidTransitionError(
                f'Not allowed transition "{source}" → "{next_event}"',
                details={"from": source, "to": next_event},
            )

        child = self._trace.append(node, next_event, payload)
        self._router.publish(next_event, child, payload)

    def _end(self, error: Optional[BaseException], node: TraceNode) -> None:
        if self._state.ended:
            self._warn("Skipping repeating end() call:", error if error is not None else "no error")
            return
        if error is not None and not isinstance(error, BaseException):
            raise PipelineError(
                "end() expects an exception instance or None",
                details={"received": type(error).__name__},
            )

        self._state.status = RunStatus.ENDED

        if error is not None:
            if not self._router.has_listeners(ERROR):
                logger.error('Pipeline crashed, listen to "@error" to prevent throwing')
                self._state.fatal = error
                raise error
            error_node = self._trace.append(node, ERROR, [error])
            self._router.publish(ERROR, error_node, (error, self._trace.dump()))

        end_node = self._trace.append(node, END)
        self._router.publish(END, end_node, (self._trace.dump(),))

    def _recover(self, error: Exception, node: TraceNode) -> None:
        """Converte uma falha recuperável em `end(error)`; falhas fatais seguem propagando."""
        if error is self._state.fatal:
            raise error
        self._end(error, node)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------
    def _stage_listener(self, event: str, handler: Handler) -> Listener:
        def listener(node: TraceNode, *payload: Any) -> None:
            self._debug("event", event, payload)
            failure = self._call_stage(event, handler, node, payload)
            if failure is not None:
                self._recover(failure.error, node)

        return listener

    def _call_stage(
        self,
        event: str,
        handler: Handler,
        node: TraceNode,
        payload: Sequence[Any],
    ) -> Optional[Failure]:
        api = StageAPI(self, event, node)
        try:
            with bound(self._mode, api):
                result = invoke(self._mode, handler, api, payload)
                if inspect.isawaitable(result):
                    self._schedule(result, event, node, internal=False)
        except Exception as exc:
            return Failure(event=event, error=exc)
        return None

    def _internal_listener(self, event: str, handler: Handler) -> Listener:
        def listener(node: TraceNode, *payload: Any) -> None:
            self._debug("event", event, payload)
            api = InternalAPI(self)
            try:
                with bound(self._mode, api):
                    result = invoke(self._mode, handler, api, payload)
                    if inspect.isawaitable(result):
                        self._schedule(result, event, node, internal=True)
            except Exception as exc:
                self._crash(event, exc)
                raise

        return listener

    def _crash(self, event: str, error: Exception) -> None:
        logger.error('Pipeline crashed, error in "%s" handler', event)
        self._state.fatal = error

    # ------------------------------------------------------------------
    # Handlers assíncronos
    # ------------------------------------------------------------------
    def _schedule(self, awaitable: Awaitable[Any], event: str, node: TraceNode, *, internal: bool) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            raise

        # A task herda o contexto corrente (inclusive a API implícita).
        task = loop.create_task(self._await_handler(awaitable, event, node, internal))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _await_handler(self, awaitable: Awaitable[Any], event: str, node: TraceNode, internal: bool) -> None:
        try:
            await awaitable
        except Exception as exc:
            if internal:
                self._crash(event, exc)
                raise
            self._recover(exc, node)

    def __repr__(self) -> str:
        return f"Pipeline(status={self._state.status.value!r}, call_mode={self._mode.value!r})"


def create_pipeline(**options: Any) -> Pipeline:
    """Constrói um `Pipeline` a partir dos campos de `PipelineOptions`."""
    return Pipeline(PipelineOptions(**options))
