"""
EnvironmentContext — parâmetros explícitos de uma invocação de unidade.

Substitui a passagem de parâmetros por variáveis de ambiente globais do
processo: o orquestrador constrói um contexto por invocação e o entrega por
referência à unidade. Nada é escrito em `os.environ`.

Chaves canônicas (v1):
    - DEPLOY_CONFIG         → referência de configuração da unidade
    - DEPLOY_NETWORK_ID     → rede alvo da run
    - UPSTREAM_FACTORY      → endereço da factory upstream
    - UPSTREAM_PRIMARY      → endereço do componente primário upstream
    - SHARED_<NOME>         → endereços de referência compartilhada
    - PARAM_<NOME>          → parâmetros opacos (inteiros)
    - UNIT_<NOME>           → parâmetros próprios da unidade

Invariantes:
    - O contexto é imutável após construído
    - `as_env()` retorna sempre um dicionário novo (sem vazamento entre invocações)
    - Chaves reservadas herdadas do ambiente base são descartadas: só o
      orquestrador entrega parâmetros à unidade
    - Nomes distintos nunca compartilham uma chave (EnvKeyCollisionError)
    - Valores de dependência são copiados literalmente, nunca recalculados
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from deploy_handoff.core.artifacts.types import ResolvedDependency


ENV_CONFIG_REF = "DEPLOY_CONFIG"
ENV_NETWORK_ID = "DEPLOY_NETWORK_ID"
ENV_UPSTREAM_FACTORY = "UPSTREAM_FACTORY"
ENV_UPSTREAM_PRIMARY = "UPSTREAM_PRIMARY"

SHARED_PREFIX = "SHARED_"
PARAM_PREFIX = "PARAM_"
UNIT_PREFIX = "UNIT_"
UPSTREAM_PREFIX = "UPSTREAM_"

RESERVED_KEYS = (ENV_CONFIG_REF, ENV_NETWORK_ID)
RESERVED_PREFIXES = (UPSTREAM_PREFIX, SHARED_PREFIX, PARAM_PREFIX, UNIT_PREFIX)

_NON_IDENT_RE = re.compile(r"[^A-Za-z0-9]+")


def env_key(prefix: str, name: str) -> str:
    """`("SHARED_", "price-oracle")` → `"SHARED_PRICE_ORACLE"`."""
    return prefix + _NON_IDENT_RE.sub("_", name).strip("_").upper()


class EnvKeyCollisionError(ValueError):
    """Nomes distintos normalizam para a mesma chave de ambiente."""


def is_reserved_key(key: str) -> bool:
    return key in RESERVED_KEYS or key.startswith(RESERVED_PREFIXES)


def env_key_collisions(prefix: str, names: Iterable[str]) -> Dict[str, List[str]]:
    """Chaves produzidas por mais de um nome, ex.: `{"SHARED_PRICE_ORACLE": ["price-oracle", "price_oracle"]}`."""
    by_key: Dict[str, List[str]] = {}
    for name in names:
        by_key.setdefault(env_key(prefix, name), []).append(name)
    return {key: found for key, found in by_key.items() if len(found) > 1}


def _project(
    values: Dict[str, str],
    prefix: str,
    items: Mapping[str, Any],
    convert: Callable[[Any], str],
) -> None:
    collisions = env_key_collisions(prefix, items)
    if collisions:
        key, names = next(iter(collisions.items()))
        raise EnvKeyCollisionError(f"{key} would be set by {names}")
    for name, value in items.items():
        values[env_key(prefix, name)] = convert(value)


def _env_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, sort_keys=True, separators=(",", ":"))
    return str(value)


@dataclass(frozen=True)
class EnvironmentContext:
    """
    Contexto de uma única invocação de unidade.

    Campos:
        - unit_id: unidade destinatária
        - config_ref: referência (caminho) da configuração própria da unidade
        - dependency: dependência upstream resolvida (mesma instância para unidades irmãs)
        - params: parâmetros próprios da unidade (declarados na config da run)
        - values: projeção chave → string, derivada dos campos acima
    """

    unit_id: str
    config_ref: str
    dependency: ResolvedDependency
    params: Mapping[str, Any] = field(default_factory=dict)
    values: Mapping[str, str] = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "params", MappingProxyType(dict(self.params)))

        values: Dict[str, str] = {
            ENV_CONFIG_REF: str(self.config_ref),
            ENV_NETWORK_ID: str(self.dependency.network_id),
            ENV_UPSTREAM_FACTORY: self.dependency.factory_address,
            ENV_UPSTREAM_PRIMARY: self.dependency.primary_component_address,
        }
        _project(values, SHARED_PREFIX, self.dependency.shared_reference_addresses, str)
        _project(values, PARAM_PREFIX, self.dependency.opaque_parameter_ids, str)
        _project(values, UNIT_PREFIX, self.params, _env_value)

        object.__setattr__(self, "values", MappingProxyType(values))

    def get(self, key: str) -> str:
        if key not in self.values:
            raise KeyError(key)
        return self.values[key]

    def as_env(self, base: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
        """Dicionário novo para uso como `env` de subprocesso.

        `base` (ex.: cópia do ambiente do processo pai) perde as chaves
        reservadas e é sobreposto pelos valores do contexto.
        """
        env: Dict[str, str] = {k: v for k, v in (base or {}).items() if not is_reserved_key(k)}
        env.update(self.values)
        return env

    def snapshot(self) -> Dict[str, Any]:
        """Visão serializável registrada no StepRecord."""
        return {
            "config_ref": self.config_ref,
            "upstream_factory": self.dependency.factory_address,
            "upstream_primary": self.dependency.primary_component_address,
            "shared_reference_addresses": dict(self.dependency.shared_reference_addresses),
            "opaque_parameter_ids": dict(self.dependency.opaque_parameter_ids),
            "params": dict(self.params),
        }
