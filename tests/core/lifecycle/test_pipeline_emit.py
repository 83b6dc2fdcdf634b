# tests/core/lifecycle/test_pipeline_emit.py
"""
Testes de emissão de eventos entre estágios.

Este módulo valida `emit()` a partir de handlers ordinários, garantindo que:
- sem grafo, qualquer evento pode ser emitido e vira filho do nó corrente
- transições fora do grafo e nomes reservados são roteados para ``@error``
- emissões após o encerramento são descartadas com aviso
- o contexto compartilhado acumula merges de estágios distintos
- ``@all`` observa todos os eventos, inclusive ``@error`` e ``@end``

Decisões arquiteturais:
    - Erros de validação levantados dentro de handlers seguem a política
      de falha recuperável (viram `end(error)`)

Limites explícitos:
    - Não valida handlers assíncronos (ver test_pipeline_async.py)
"""

from stageline import (
    CallMode,
    InvalidTransitionError,
    ReservedEventError,
    stage,
    trace_to_dicts,
)


def test_emit_without_graph_nests_child_node(make_pipeline):
    received = []
    pipeline = (
        make_pipeline()
        .on("s0", lambda: stage.emit("s1", "x"))
        .on("s1", lambda value: received.append(value))
        .start("s0")
    )

    assert received == ["x"]
    assert trace_to_dicts(pipeline.trace()) == [
        {
            "event": "s0",
            "payload": [],
            "time": 0,
            "routes": [{"event": "s1", "payload": ["x"], "routes": [], "time": 0}],
        }
    ]


def test_emit_chains_and_keeps_emission_order(make_pipeline):
    def s0(api):
        api.emit("s1", 1).emit("s2", 2)

    pipeline = make_pipeline(call_mode=CallMode.EXPLICIT).on("s0", s0).start("s0")

    routes = pipeline.trace()[0].routes
    assert [(node.event, node.payload) for node in routes] == [("s1", [1]), ("s2", [2])]


def test_disallowed_transition_is_routed_to_error(make_pipeline):
    errors = []
    ended = []
    pipeline = (
        make_pipeline(transitions={"s0": ["s1"], "s1": []})
        .on("s0", lambda: stage.emit("s2"))
        .on("@error", lambda err, trace: errors.append(err))
        .on("@end", lambda trace: ended.append(trace))
        .start("s0")
    )

    assert len(errors) == 1
    assert isinstance(errors[0], InvalidTransitionError)
    assert str(errors[0]) == 'Not allowed transition "s0" → "s2"'
    assert errors[0].details == {"from": "s0", "to": "s2"}
    assert len(ended) == 1
    assert [node.event for node in pipeline.trace()[0].routes] == ["@error", "@end"]


def test_allowed_transition_passes(make_pipeline):
    received = []
    (
        make_pipeline(transitions={"s0": ["s1"], "s1": []})
        .on("s0", lambda: stage.emit("s1", "ok"))
        .on("s1", lambda value: received.append(value))
        .start("s0")
    )
    assert received == ["ok"]


def test_reserved_emit_is_routed_to_error(make_pipeline):
    errors = []
    (
        make_pipeline()
        .on("s0", lambda: stage.emit("@whatever"))
        .on("@error", lambda err, trace: errors.append(err))
        .start("s0")
    )

    assert len(errors) == 1
    assert isinstance(errors[0], ReservedEventError)
    assert str(errors[0]) == "Event names starting with @ are reseved"


def test_emit_after_end_only_warns(make_pipeline, warn_recorder):
    dispatched = []

    def s0():
        stage.end()
        stage.emit("s1", 1, 2)

    pipeline = (
        make_pipeline()
        .on("s0", s0)
        .on("s1", lambda *args: dispatched.append(args))
        .start("s0")
    )

    assert dispatched == []
    assert warn_recorder.calls == [("Skipping emit() call after pipeline ended:", "s1", 1, 2)]
    assert [node.event for node in pipeline.trace()[0].routes] == ["@end"]


def test_context_merges_across_stages(make_pipeline):
    snapshots = []

    def s0():
        stage.context({"a": 1})
        stage.emit("s1")

    def s1():
        stage.context({"b": 2}).emit("s2")

    def s2():
        stage.context({"c": 3})
        stage.end()

    pipeline = (
        make_pipeline()
        .on("s0", s0)
        .on("s1", s1)
        .on("s2", s2)
        .on("@end", lambda trace: snapshots.append(stage.context()))
        .start("s0")
    )

    assert snapshots == [{"a": 1, "b": 2, "c": 3}]
    assert pipeline.context() == {"a": 1, "b": 2, "c": 3}


def test_pipeline_context_setter_chains_and_later_key_wins(make_pipeline):
    pipeline = make_pipeline()

    assert pipeline.context({"a": 1}).context({"a": 2, "b": 1}) is pipeline

    snapshot = pipeline.context()
    snapshot["a"] = 99
    assert pipeline.context() == {"a": 2, "b": 1}


def test_all_sees_every_event_in_order(make_pipeline):
    seen = []

    def s1():
        raise ValueError("boom")

    (
        make_pipeline()
        .on("@all", lambda event, *payload: seen.append("all:" + event))
        .on("s0", lambda: stage.emit("s1"))
        .on("s1", s1)
        .on("@error", lambda err, trace: seen.append("error"))
        .on("@end", lambda trace: seen.append("end"))
        .start("s0")
    )

    assert seen == ["all:s0", "all:s1", "all:@error", "error", "all:@end", "end"]


def test_all_receives_event_payloads(make_pipeline):
    seen = []
    error = ValueError("boom")

    def s0(value):
        stage.end(error)

    (
        make_pipeline()
        .on("@all", lambda event, *payload: seen.append((event, len(payload), payload[0])))
        .on("s0", s0)
        .on("@error", lambda err, trace: None)
        .start("s0", 5)
    )

    assert seen[0] == ("s0", 1, 5)
    assert seen[1] == ("@error", 2, error)
    assert seen[2][0:2] == ("@end", 1)
    assert [node.event for node in seen[2][2]] == ["s0"]
