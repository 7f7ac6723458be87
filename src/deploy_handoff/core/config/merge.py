"""
Deep-merge de configuração da run (defaults + overrides locais).

Política de merge (v1):
    - mapa → merge recursivo por chave
    - lista → sobrescrita total (ex.: `units` local substitui a lista inteira)
    - escalar → sobrescrita direta
    - None em qualquer lado → "não declarado", nunca conflito
    - troca de tipo → ConfigTypeConflictError com o caminho pontuado da chave

Invariantes:
    - Nenhum input é mutado
    - A mesma entrada sempre produz a mesma saída
"""

from copy import deepcopy
from typing import Any, Dict

from .errors import ConfigTypeConflictError


def _kind(value: Any) -> str:
    return type(value).__name__


def _merge_at(path: str, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged: Dict[str, Any] = {k: deepcopy(v) for k, v in base.items()}

    for key, incoming in override.items():
        dotted = f"{path}.{key}" if path else str(key)
        current = merged.get(key)

        if isinstance(current, dict) and isinstance(incoming, dict):
            merged[key] = _merge_at(dotted, current, incoming)
        elif current is None or incoming is None or isinstance(incoming, list):
            merged[key] = deepcopy(incoming)
        elif type(current) is not type(incoming):
            raise ConfigTypeConflictError(
                f"Conflito de tipo em '{dotted}': {_kind(current)} vs {_kind(incoming)}"
            )
        else:
            merged[key] = deepcopy(incoming)

    return merged


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Combina `base` com `override`, retornando um novo dicionário.

    A lista de unidades nunca é mesclada elemento a elemento: declarar
    `units` no override redefine a sequência de invocação por completo.
    Trocar o tipo de uma chave (ex.: `run.network_id: 1` → `"sepolia"`)
    é conflito estrutural, nunca coerção.

    Raises:
        ConfigTypeConflictError: raiz não-mapa ou conflito de tipo em alguma chave.
    """
    if not isinstance(base, dict) or not isinstance(override, dict):
        raise ConfigTypeConflictError(
            f"Deep-merge requer mapas na raiz, recebido: {_kind(base)} vs {_kind(override)}"
        )
    return _merge_at("", base, override)
