"""
Loader da configuração do orquestrador.

A configuração efetiva de uma run é resolvida a partir de:
    - um arquivo de defaults (obrigatório), tipicamente versionado
      (ex.: `deploy.sepolia.yaml`)
    - um arquivo local de overrides (opcional, ex.: `deploy.local.yaml`),
      usado para RPC privado, diretórios de saída ou parâmetros de ensaio

Formatos suportados (v1): YAML (.yaml, .yml) e JSON (.json), escolhidos
pela extensão do arquivo.

Invariantes:
    - O resultado é sempre um dicionário puro (`dict`)
    - Overrides nunca mutam os defaults
    - Override local ausente no disco é ignorado (é opcional)

Limites explícitos:
    - Validação estrutural da run fica em `schema.validate_run_config`
    - Não lê variáveis de ambiente
"""

import json
from pathlib import Path
from typing import Any, Callable, Dict, Optional, TextIO

import yaml  # PyYAML

from .errors import (
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    UnsupportedConfigFormatError,
)
from .merge import deep_merge


_PARSERS: Dict[str, Callable[[TextIO], Any]] = {
    ".yaml": yaml.safe_load,
    ".yml": yaml.safe_load,
    ".json": json.load,
}


def load_config_file(path: Path) -> Dict[str, Any]:
    """
    Lê um único arquivo de configuração; arquivo vazio vira `{}`.

    Raises:
        DefaultsNotFoundError: arquivo inexistente.
        UnsupportedConfigFormatError: extensão fora de `_PARSERS`.
        InvalidConfigRootTypeError: raiz não é um mapa.
    """
    if not path.is_file():
        raise DefaultsNotFoundError(f"Arquivo de configuração não encontrado: {path}")

    parser = _PARSERS.get(path.suffix.lower())
    if parser is None:
        raise UnsupportedConfigFormatError(
            f"Formato não suportado: {path.suffix or '<sem extensão>'} ({path.name})"
        )

    with path.open("r", encoding="utf-8") as fh:
        data = parser(fh)

    data = {} if data is None else data
    if not isinstance(data, dict):
        raise InvalidConfigRootTypeError(
            f"Raiz de {path.name} deve ser um mapa, recebido: {type(data).__name__}"
        )
    return data


def load_config(
    *,
    defaults_path: str,
    local_path: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Carrega e resolve a configuração efetiva da run.

    Args:
        defaults_path: arquivo base, obrigatório.
        local_path: overrides opcionais; quando o arquivo existe, tem
            prioridade via deep-merge.

    Raises:
        DefaultsNotFoundError, UnsupportedConfigFormatError,
        InvalidConfigRootTypeError, ConfigTypeConflictError
    """
    defaults = load_config_file(Path(defaults_path))

    if local_path is None or not Path(local_path).exists():
        return defaults

    return deep_merge(defaults, load_config_file(Path(local_path)))
