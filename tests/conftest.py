# tests/conftest.py
"""
Fixtures compartilhados para testes do Stageline.

Este módulo define fixtures reutilizáveis que fornecem:
- relógio fixo para traces determinísticos
- gravadores de chamadas para callbacks `warn`/`debug`
- fábrica de pipelines já configurada com os itens acima
- YAML de configuração semelhante ao uso real

Decisões arquiteturais:
    - Fixtures são mantidas simples e explícitas
    - Imports do core são realizados de forma lazy para melhorar a clareza
      de erros durante falhas
    - O tempo é fixado em zero: asserts sobre o trace comparam `time == 0`

Invariantes:
    - Nenhuma fixture inicia pipeline
    - Nenhuma fixture realiza I/O

Limites explícitos:
    - Não substituir testes de integração
    - Não conter lógica condicional complexa
"""

import pytest


class CallRecorder:
    """Callback que registra cada chamada como uma tupla de argumentos."""

    def __init__(self):
        self.calls = []

    def __call__(self, *args):
        self.calls.append(args)

    def __len__(self):
        return len(self.calls)


# =====================================================
# Relógio e callbacks
# =====================================================

@pytest.fixture
def frozen_clock():
    """Relógio que sempre retorna 0.0 (todo nó de trace terá `time == 0`)."""
    return lambda: 0.0


@pytest.fixture
def warn_recorder() -> CallRecorder:
    return CallRecorder()


@pytest.fixture
def debug_recorder() -> CallRecorder:
    return CallRecorder()


@pytest.fixture
def make_pipeline(frozen_clock, warn_recorder):
    """
    Fixture factory de pipelines para testes.

    Retorna uma função que aceita os campos de `PipelineOptions` como
    keyword arguments. Por padrão, o relógio é fixo e `warn` grava as
    chamadas em `warn_recorder`.

    Usado por:
        - Testes de ciclo de vida (start, emit, end)
        - Testes de trace e de convenções de chamada
    """
    from stageline import create_pipeline

    def _make(**options):
        options.setdefault("clock", frozen_clock)
        options.setdefault("warn", warn_recorder)
        return create_pipeline(**options)

    return _make


# =====================================================
# Configuração
# =====================================================

@pytest.fixture
def project_like_config_defaults_yaml() -> str:
    """
    YAML de configuração padrão (defaults) semelhante ao uso real.

    Representa o conteúdo típico de um `pipeline.defaults.yaml`, base sobre a
    qual a configuração local é aplicada via deep-merge.
    """
    return """\
pipeline:
  call_mode: implicit
  transitions:
    parse: [validate]
    validate: [store, reject]
    store:
    reject:
"""


@pytest.fixture
def project_like_config_local_yaml() -> str:
    """YAML local (override) que troca o modo de chamada e reescreve um estágio."""
    return """\
pipeline:
  call_mode: explicit
  transitions:
    validate: [store]
"""
