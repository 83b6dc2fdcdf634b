# src/stageline/core/config/__init__.py
"""
Camada de configuração do Stageline.

Este pacote carrega, mescla e valida a configuração declarativa de
pipelines (grafo de transições e convenção de chamada), produzindo
`PipelineOptions`.

Princípios fundamentais:
    - Configuração é declarativa e explícita
    - Overrides locais nunca mutam os defaults
    - A mesma entrada sempre produz a mesma configuração final

Limites explícitos:
    - Não executa pipeline
    - Não representa callbacks em arquivo (informados em código)
"""

from .errors import (
    ConfigError,
    ConfigTypeConflictError,
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    InvalidConfigValueError,
    UnsupportedConfigFormatError,
)
from .loader import load_config, load_pipeline_options, options_from_config
from .merge import deep_merge

__all__ = [
    "ConfigError",
    "ConfigTypeConflictError",
    "DefaultsNotFoundError",
    "InvalidConfigRootTypeError",
    "InvalidConfigValueError",
    "UnsupportedConfigFormatError",
    "deep_merge",
    "load_config",
    "load_pipeline_options",
    "options_from_config",
]
