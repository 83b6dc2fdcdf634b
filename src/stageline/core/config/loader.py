# src/stageline/core/config/loader.py
"""
Loader de configuração de pipelines do Stageline.

Este módulo carrega, valida estruturalmente e resolve a configuração
declarativa de um pipeline, produzindo um `PipelineOptions` pronto para
construção.

A configuração é resolvida a partir de:
    - um arquivo de defaults (obrigatório)
    - um arquivo local de overrides (opcional)

Esquema (v1)::

    pipeline:
      call_mode: explicit        # implicit | explicit
      transitions:
        parse: [validate]
        validate: [store, reject]

Responsabilidades do módulo:
    - Carregar arquivos YAML ou JSON
    - Validar o tipo raiz e a seção ``pipeline``
    - Resolver a configuração final via deep-merge determinístico

Decisões arquiteturais:
    - Callbacks (`debug`, `warn`) e o relógio não são representáveis em
      arquivo: são informados como overrides explícitos em código
    - A validação do grafo em si pertence a `TransitionTable`

Limites explícitos:
    - Não constrói nem inicia pipelines
    - Não persiste configuração
"""

from pathlib import Path
from typing import Any, Dict, Mapping, Optional
import json

import yaml  # PyYAML

from stageline.core.api import CallMode
from stageline.core.pipeline import PipelineOptions

from .merge import deep_merge
from .errors import (
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    InvalidConfigValueError,
    UnsupportedConfigFormatError,
)

PIPELINE_SECTION = "pipeline"


def _load_file(path: Path) -> Dict[str, Any]:
    """
    Carrega um arquivo de configuração e valida sua estrutura básica.

    Arquivos vazios são interpretados como dicionários vazios.

    Raises:
        DefaultsNotFoundError: Se o arquivo não existir.
        UnsupportedConfigFormatError: Se o formato não for suportado.
        InvalidConfigRootTypeError: Se o conteúdo raiz não for um dicionário.
    """
    if not path.exists():
        raise DefaultsNotFoundError(f"Arquivo de defaults não encontrado: {path}", path=str(path))

    suffix = path.suffix.lower()

    if suffix in {".yaml", ".yml"}:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)

    elif suffix == ".json":
        with path.open("r", encoding="utf-8") as f:
            content = f.read()
        data = json.loads(content) if content.strip() else None

    else:
        raise UnsupportedConfigFormatError(f"Formato não suportado: {path.suffix}", path=str(path))

    if data is None:
        data = {}

    if not isinstance(data, dict):
        raise InvalidConfigRootTypeError(
            f"Config root deve ser dict, recebido: {type(data).__name__}",
            path=str(path),
        )

    return data


def load_config(
    *,
    defaults_path: str,
    local_path: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Carrega e resolve a configuração efetiva.

    Política de resolução:
        - O arquivo de defaults é obrigatório
        - O arquivo local é opcional; quando existe, tem prioridade
        - A resolução utiliza `deep_merge`

    Args:
        defaults_path (str): Caminho para o arquivo de configuração base.
        local_path (Optional[str]): Caminho opcional para overrides locais.

    Returns:
        Dict[str, Any]: Configuração final resolvida.
    """
    effective = _load_file(Path(defaults_path))

    if local_path is not None:
        local_file = Path(local_path)
        if local_file.exists():
            effective = deep_merge(effective, _load_file(local_file))

    return effective


def _read_call_mode(section: Mapping[str, Any]) -> CallMode:
    raw = section.get("call_mode", CallMode.IMPLICIT.value)
    try:
        return CallMode(raw)
    except ValueError:
        allowed = ", ".join(mode.value for mode in CallMode)
        raise InvalidConfigValueError(
            f"pipeline.call_mode inválido: {raw!r} (esperado: {allowed})",
            path="pipeline.call_mode",
        ) from None


def _read_transitions(section: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
    transitions = section.get("transitions")
    if transitions is None:
        return None
    if not isinstance(transitions, dict):
        raise InvalidConfigValueError(
            f"pipeline.transitions deve ser dict, recebido: {type(transitions).__name__}",
            path="pipeline.transitions",
        )
    # null em YAML (`stage:` sem valor) = estágio terminal, sem transições de saída
    return {source: [] if targets is None else targets for source, targets in transitions.items()}


def options_from_config(config: Mapping[str, Any], **overrides: Any) -> PipelineOptions:
    """
    Constrói `PipelineOptions` a partir da seção ``pipeline`` da configuração.

    Args:
        config: Configuração resolvida (ex.: retorno de `load_config`).
        **overrides: Campos de `PipelineOptions` informados em código
            (`debug`, `warn`, `clock`); prevalecem sobre o arquivo.

    Raises:
        InvalidConfigValueError: Se a seção ``pipeline`` for inválida.
    """
    section = config.get(PIPELINE_SECTION)
    if section is None:
        section = {}
    if not isinstance(section, dict):
        raise InvalidConfigValueError(
            f"Seção '{PIPELINE_SECTION}' deve ser dict, recebido: {type(section).__name__}",
            path=PIPELINE_SECTION,
        )

    fields: Dict[str, Any] = {
        "call_mode": _read_call_mode(section),
        "transitions": _read_transitions(section),
    }
    fields.update(overrides)
    return PipelineOptions(**fields)


def load_pipeline_options(
    *,
    defaults_path: str,
    local_path: Optional[str] = None,
    **overrides: Any,
) -> PipelineOptions:
    """Atalho: `load_config` seguido de `options_from_config`."""
    config = load_config(defaults_path=defaults_path, local_path=local_path)
    return options_from_config(config, **overrides)
