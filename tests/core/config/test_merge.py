# tests/core/config/test_merge.py
"""
Testes da política de deep-merge de configuração.

Este módulo valida o comportamento da função `deep_merge`, responsável
por resolver a configuração final de um pipeline a partir de uma
configuração base (defaults) e de overrides explícitos.

Os testes asseguram que:
- valores escalares são sobrescritos corretamente
- dicionários são mesclados de forma recursiva
- listas (destinos de um estágio) são sobrescritas integralmente
- conflitos de tipo são detectados e rejeitados explicitamente
- objetos de entrada não são mutados durante o merge

Limites explícitos:
    - Não valida carregamento de arquivos
    - Não valida a conversão para `PipelineOptions`
"""

import pytest

try:
    from stageline.core.config.merge import deep_merge
    from stageline.core.config.errors import ConfigTypeConflictError
except Exception as e:  # noqa: BLE001
    deep_merge = None
    ConfigTypeConflictError = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing merge/errors modules. Implement:\n"
            "- src/stageline/core/config/merge.py (deep_merge)\n"
            "- src/stageline/core/config/errors.py (ConfigTypeConflictError)\n"
            f"Import error: {_IMPORT_ERR}"
        )


def test_merge_simple_override():
    _require_imports()
    base = {"pipeline": {"call_mode": "implicit"}}
    override = {"pipeline": {"call_mode": "explicit"}}

    out = deep_merge(base, override)

    assert out == {"pipeline": {"call_mode": "explicit"}}
    assert base == {"pipeline": {"call_mode": "implicit"}}
    assert override == {"pipeline": {"call_mode": "explicit"}}


def test_merge_nested_dicts_keeps_untouched_stages():
    _require_imports()
    base = {"pipeline": {"transitions": {"parse": ["validate"], "validate": ["store"]}}}
    override = {"pipeline": {"transitions": {"validate": ["reject"]}, "call_mode": "explicit"}}

    out = deep_merge(base, override)

    assert out["pipeline"]["transitions"] == {"parse": ["validate"], "validate": ["reject"]}
    assert out["pipeline"]["call_mode"] == "explicit"


def test_merge_lists_are_replaced_not_concatenated():
    """
    Verifica que listas de destinos são substituídas integralmente.

    Decisões arquiteturais:
        - Concatenar destinos tornaria impossível remover uma transição via override
    """
    _require_imports()
    base = {"transitions": {"validate": ["store", "reject"]}}
    override = {"transitions": {"validate": ["store"]}}

    out = deep_merge(base, override)

    assert out["transitions"]["validate"] == ["store"]
    out["transitions"]["validate"].append("x")
    assert override["transitions"]["validate"] == ["store"]


def test_merge_adds_new_keys():
    _require_imports()
    out = deep_merge({"a": 1}, {"b": {"c": 2}})
    assert out == {"a": 1, "b": {"c": 2}}


def test_merge_type_conflict_raises():
    _require_imports()
    base = {"pipeline": {"transitions": {"parse": ["validate"]}}}
    override = {"pipeline": "explicit"}

    with pytest.raises(ConfigTypeConflictError):
        deep_merge(base, override)


def test_merge_requires_dict_roots():
    _require_imports()
    with pytest.raises(ConfigTypeConflictError):
        deep_merge({"a": 1}, ["not", "a", "dict"])


def test_merge_conflict_reports_key_path():
    _require_imports()
    base = {"pipeline": {"transitions": {"store": ["audit"]}}}
    override = {"pipeline": {"transitions": {"store": "audit"}}}

    with pytest.raises(ConfigTypeConflictError) as exc:
        deep_merge(base, override)
    assert exc.value.path == "pipeline.transitions.store"


def test_merge_terminal_stage_accepts_targets_from_override():
    """Um estágio terminal (`store:` sem valor) pode ganhar destinos no override."""
    _require_imports()
    base = {"transitions": {"store": None}}

    out = deep_merge(base, {"transitions": {"store": ["audit"]}})
    assert out == {"transitions": {"store": ["audit"]}}

    out = deep_merge({"transitions": {"store": ["audit"]}}, {"transitions": {"store": None}})
    assert out == {"transitions": {"store": None}}
