"""
Exceções da camada de configuração do Deploy Handoff.

Erros de configuração são detectados antes de qualquer resolução de
artefato ou invocação de unidade: uma run com configuração inválida nunca
toca o artifact store nem a rede.

Invariantes:
    - Todas as exceções de configuração herdam de `ConfigError`
    - Nenhuma exceção daqui representa falha de resolução ou de unidade
"""


class ConfigError(Exception):
    """Exceção base para erros de configuração da run."""


class DefaultsNotFoundError(ConfigError):
    """
    Arquivo de configuração base (defaults) não encontrado.

    O arquivo de defaults é obrigatório: sem ele não há rede alvo, etapa
    upstream nem lista de unidades.
    """


class UnsupportedConfigFormatError(ConfigError):
    """
    Extensão de arquivo não suportada pelo loader.

    Formatos suportados (v1): YAML (.yaml, .yml) e JSON (.json). O formato
    nunca é inferido pelo conteúdo.
    """


class InvalidConfigRootTypeError(ConfigError):
    """O conteúdo raiz da configuração não é um mapa chave-valor."""


class ConfigTypeConflictError(ConfigError):
    """
    Conflito de tipos durante o deep-merge.

    Exemplo de conflito:
        - base:     {"run": {"network_id": 11155111}}
        - override: {"run": {"network_id": "sepolia"}}

    Nenhum merge parcial é produzido e nenhuma coerção é tentada.
    """


class ConfigValidationError(ConfigError):
    """
    A configuração não satisfaz a estrutura exigida pela run.

    Exemplos: `run.network_id` ausente, unidade sem `config_ref`,
    assinatura de leitura vazia em `upstream.shared_references`.
    """
