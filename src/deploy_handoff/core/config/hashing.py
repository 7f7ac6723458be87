"""
Hash canônico da configuração efetiva da run.

O hash identifica os parâmetros que uma run consumiu e é registrado no
Manifest (`inputs.config_hash`). Duas runs com o mesmo hash invocaram as
mesmas unidades, na mesma ordem, contra a mesma etapa upstream.

Chaves que não alteram o que é implantado ficam fora do hash:
    - run.run_id     → identidade da execução, não da configuração
    - run.output_dir → destino dos relatórios locais
    - forge.rpc_url  → endpoint (frequentemente privado) do operador

Política (v1): JSON canônico (chaves ordenadas, separadores compactos,
UTF-8) → SHA-256 hexadecimal.
"""

import hashlib
import json
from typing import Any, Dict, Tuple

VOLATILE_KEYS: Tuple[Tuple[str, str], ...] = (
    ("run", "run_id"),
    ("run", "output_dir"),
    ("forge", "rpc_url"),
)


def _without_volatile(config: Dict[str, Any]) -> Dict[str, Any]:
    stripped = dict(config)
    for section, key in VOLATILE_KEYS:
        block = stripped.get(section)
        if isinstance(block, dict) and key in block:
            stripped[section] = {k: v for k, v in block.items() if k != key}
    return stripped


def canonical_config_json(config: Dict[str, Any]) -> str:
    return json.dumps(
        _without_volatile(config),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )


def compute_config_hash(config: Dict[str, Any]) -> str:
    """
    SHA-256 (64 caracteres hex) da configuração efetiva.

    Independe da ordem das chaves e das chaves voláteis listadas acima.

    Raises:
        TypeError: se `config` não for um dicionário.
    """
    if not isinstance(config, dict):
        raise TypeError(f"Config para hashing deve ser dict, recebido: {type(config).__name__}")
    return hashlib.sha256(canonical_config_json(config).encode("utf-8")).hexdigest()
