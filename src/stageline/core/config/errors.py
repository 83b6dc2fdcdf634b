# src/stageline/core/config/errors.py
"""
Exceções da camada de configuração do Stageline.

Toda falha de carregamento ou resolução de configuração herda de
`ConfigError` e informa onde ocorreu:
    - arquivo inexistente, formato ou raiz inválidos → caminho do arquivo
    - conflito de merge ou valor inválido → caminho da chave
      (ex.: ``pipeline.transitions.store``)

Invariantes:
    - `ConfigError` nunca é subclasse de `PipelineError`: configuração
      inválida não é uso incorreto da API em tempo de run

Limites explícitos:
    - Não realiza fallback ou recovery
"""

from typing import Optional


class ConfigError(Exception):
    """
    Base para erros de configuração.

    Args:
        message: Mensagem curta, direcionada ao usuário.
        path: Arquivo ou chave (notação com pontos) onde o erro ocorreu.
    """

    def __init__(self, message: str, *, path: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = path


class DefaultsNotFoundError(ConfigError):
    """O arquivo de defaults é obrigatório e não foi encontrado."""


class UnsupportedConfigFormatError(ConfigError):
    """Extensão fora de ``.yaml``, ``.yml`` e ``.json``."""


class InvalidConfigRootTypeError(ConfigError):
    """O conteúdo raiz do arquivo não é um mapa."""


class ConfigTypeConflictError(ConfigError):
    """
    Uma mesma chave possui tipos incompatíveis entre defaults e override.

    Exemplo:
        - base:     {"pipeline": {"transitions": {...}}}
        - override: {"pipeline": "explicit"}
    """


class InvalidConfigValueError(ConfigError):
    """A seção ``pipeline`` contém um valor inválido (ex.: `call_mode` desconhecido)."""
