# src/stageline/core/context.py
"""
Contexto compartilhado entre estágios do pipeline.

Este módulo define o `ContextStore`, o mapa chave-valor mutável que estágios
utilizam para compartilhar estado explícito ao longo de uma run.

Política de escrita:
    - merge raso: chaves novas são adicionadas, chaves existentes são
      sobrescritas (a última escrita vence)
    - não há semântica transacional

Política de leitura:
    - `snapshot()` retorna uma cópia; alterações nela não afetam o contexto

Invariantes:
    - O contexto vive enquanto a instância do pipeline existir
    - Handlers ordinários e internos enxergam o mesmo contexto

Limites explícitos:
    - Não faz deep-merge (ver `core.config.merge` para configuração)
    - Não persiste dados
    - Não registra eventos no trace
"""

from __future__ import annotations

from typing import Any, Dict, Mapping


class ContextStore:
    """Mapa chave-valor compartilhado, com merge raso e leitura por snapshot."""

    def __init__(self) -> None:
        self._data: Dict[str, Any] = {}

    def snapshot(self) -> Dict[str, Any]:
        return dict(self._data)

    def merge(self, data: Mapping[str, Any]) -> None:
        if not isinstance(data, Mapping):
            raise TypeError(
                f"Context data must be a mapping, received: {type(data).__name__}"
            )
        self._data.update(data)
