# src/stageline/core/config/merge.py
"""
Deep-merge de configuração de pipelines.

Resolve a configuração final a partir do arquivo de defaults e dos overrides
locais.

Política de merge (v1):
    - mapa + mapa → merge recursivo por chave
    - lista → substituída inteira (os destinos de um estágio são trocados,
      nunca concatenados, para que um override possa remover transições)
    - None de um lado (estágio terminal em YAML, ``store:``) → o override vence
    - demais escalares → o override vence
    - tipos incompatíveis → `ConfigTypeConflictError` com o caminho da chave

Invariantes:
    - Nenhum input é mutado
    - A mesma entrada sempre produz a mesma saída

Limites explícitos:
    - Não carrega arquivos
    - Não valida a seção ``pipeline`` (ver `loader.options_from_config`)
"""

from copy import deepcopy
from typing import Any, Dict, Mapping

from .errors import ConfigTypeConflictError


def _compatible(current: Any, value: Any) -> bool:
    if current is None or value is None:
        return True
    if isinstance(current, list) and isinstance(value, list):
        return True
    return type(current) is type(value)


def _merge_into(target: Dict[str, Any], override: Mapping[str, Any], prefix: str) -> None:
    for key, value in override.items():
        path = f"{prefix}.{key}" if prefix else str(key)
        current = target.get(key)

        if isinstance(current, dict) and isinstance(value, dict):
            _merge_into(current, value, path)
            continue
        if key in target and not _compatible(current, value):
            raise ConfigTypeConflictError(
                f"Conflito de tipo em '{path}': "
                f"{type(current).__name__} vs {type(value).__name__}",
                path=path,
            )
        target[key] = deepcopy(value)


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Combina `base` e `override` em um novo dicionário.

    Raises:
        ConfigTypeConflictError: Se alguma chave possuir tipos incompatíveis.
    """
    if not isinstance(base, dict) or not isinstance(override, dict):
        raise ConfigTypeConflictError(
            f"Deep-merge requer dicts no nível raiz, recebido: "
            f"{type(base).__name__} vs {type(override).__name__}"
        )

    result: Dict[str, Any] = deepcopy(base)
    _merge_into(result, override, "")
    return result
