"""
Schema da configuração da run do orquestrador (v1).

Estrutura esperada:

    run:        network_id, artifacts_root, [run_id], [output_dir]
    upstream:   step_id, factory_component, primary_accessor,
                [shared_references], [opaque_parameters]
    units:      lista de {id, config_ref, [script], [broadcast], [params]}
    forge:      [rpc_url], [binary], [cast_binary]

Esta implementação não usa bibliotecas de validação externas: o schema é
pequeno e as mensagens de erro apontam diretamente para a chave inválida.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from deploy_handoff.core.units.environment import (
    PARAM_PREFIX,
    SHARED_PREFIX,
    UNIT_PREFIX,
    env_key_collisions,
)

from .errors import ConfigValidationError


def _is_non_empty_str(x: Any) -> bool:
    return isinstance(x, str) and bool(x.strip())


def _expect(cond: bool, msg: str) -> None:
    if not cond:
        raise ConfigValidationError(msg)


def _expect_int(value: Any, msg: str) -> int:
    _expect(isinstance(value, int) and not isinstance(value, bool), msg)
    return int(value)


def _signature_map(value: Any, where: str) -> Dict[str, str]:
    if value is None:
        return {}
    _expect(isinstance(value, dict), f"{where} must be a mapping")
    out: Dict[str, str] = {}
    for name, signature in value.items():
        _expect(_is_non_empty_str(name), f"{where} keys must be non-empty strings")
        _expect(_is_non_empty_str(signature), f"{where}.{name} must be a non-empty signature")
        out[str(name)] = str(signature)
    return out



def _expect_distinct_env_keys(prefix: str, names: Any, where: str) -> None:
    collisions = env_key_collisions(prefix, names)
    for key, found in collisions.items():
        _expect(False, f"{where}: names {found} all map to {key}")


@dataclass(frozen=True)
class UpstreamSpec:
    """Etapa upstream e leituras necessárias para derivar a dependência."""

    step_id: str
    factory_component: str
    primary_accessor: str
    shared_references: Mapping[str, str] = field(default_factory=dict)
    opaque_parameters: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class UnitSpec:
    """Declaração de uma unidade de deployment na run."""

    id: str
    config_ref: str
    script: Optional[str] = None
    broadcast: bool = False
    params: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ForgeSettings:
    rpc_url: Optional[str] = None
    binary: str = "forge"
    cast_binary: str = "cast"


@dataclass(frozen=True)
class RunConfig:
    """Configuração validada de uma run."""

    network_id: int
    artifacts_root: str
    upstream: UpstreamSpec
    units: Tuple[UnitSpec, ...]
    run_id: Optional[str] = None
    output_dir: Optional[str] = None
    forge: ForgeSettings = field(default_factory=ForgeSettings)


def validate_run_config(data: Any) -> RunConfig:
    """Valida e materializa a configuração da run.

    Raises:
        ConfigValidationError: na primeira violação estrutural encontrada.
    """
    _expect(isinstance(data, dict), "run config must be a mapping/dict")

    run = data.get("run")
    _expect(isinstance(run, dict), "run must be a mapping")
    network_id = _expect_int(run.get("network_id"), "run.network_id must be an integer chain id")
    _expect(network_id > 0, "run.network_id must be positive")
    artifacts_root = run.get("artifacts_root", "broadcast")
    _expect(_is_non_empty_str(artifacts_root), "run.artifacts_root must be a non-empty string")
    run_id = run.get("run_id")
    _expect(run_id is None or _is_non_empty_str(run_id), "run.run_id must be a non-empty string")
    output_dir = run.get("output_dir")
    _expect(output_dir is None or _is_non_empty_str(output_dir), "run.output_dir must be a non-empty string")

    upstream = data.get("upstream")
    _expect(isinstance(upstream, dict), "upstream must be a mapping")
    for key in ("step_id", "factory_component", "primary_accessor"):
        _expect(_is_non_empty_str(upstream.get(key)), f"upstream.{key} is required")

    upstream_spec = UpstreamSpec(
        step_id=upstream["step_id"],
        factory_component=upstream["factory_component"],
        primary_accessor=upstream["primary_accessor"],
        shared_references=_signature_map(upstream.get("shared_references"), "upstream.shared_references"),
        opaque_parameters=_signature_map(upstream.get("opaque_parameters"), "upstream.opaque_parameters"),
    )

    _expect_distinct_env_keys(SHARED_PREFIX, upstream_spec.shared_references, "upstream.shared_references")
    _expect_distinct_env_keys(PARAM_PREFIX, upstream_spec.opaque_parameters, "upstream.opaque_parameters")

    units = data.get("units")
    _expect(isinstance(units, list) and units, "units must be a non-empty list")

    seen: set[str] = set()
    unit_specs: List[UnitSpec] = []
    for i, u in enumerate(units):
        _expect(isinstance(u, dict), f"units[{i}] must be a mapping")
        uid = u.get("id")
        _expect(_is_non_empty_str(uid), f"units[{i}].id is required")
        _expect(uid not in seen, f"duplicate unit id: {uid}")
        seen.add(uid)

        _expect(_is_non_empty_str(u.get("config_ref")), f"units[{i}].config_ref is required")
        script = u.get("script")
        _expect(script is None or _is_non_empty_str(script), f"units[{i}].script must be a non-empty string")
        broadcast = u.get("broadcast", False)
        _expect(isinstance(broadcast, bool), f"units[{i}].broadcast must be boolean")
        params = u.get("params") or {}
        _expect(isinstance(params, dict), f"units[{i}].params must be a mapping")
        _expect(all(_is_non_empty_str(k) for k in params), f"units[{i}].params keys must be non-empty strings")
        _expect_distinct_env_keys(UNIT_PREFIX, params, f"units[{i}].params")

        unit_specs.append(
            UnitSpec(
                id=uid,
                config_ref=u["config_ref"],
                script=script,
                broadcast=broadcast,
                params=dict(params),
            )
        )

    forge = data.get("forge") or {}
    _expect(isinstance(forge, dict), "forge must be a mapping")
    rpc_url = forge.get("rpc_url")
    _expect(rpc_url is None or _is_non_empty_str(rpc_url), "forge.rpc_url must be a non-empty string")
    binary = forge.get("binary", "forge")
    cast_binary = forge.get("cast_binary", "cast")
    _expect(_is_non_empty_str(binary), "forge.binary must be a non-empty string")
    _expect(_is_non_empty_str(cast_binary), "forge.cast_binary must be a non-empty string")

    return RunConfig(
        network_id=network_id,
        artifacts_root=artifacts_root,
        upstream=upstream_spec,
        units=tuple(unit_specs),
        run_id=run_id,
        output_dir=output_dir,
        forge=ForgeSettings(rpc_url=rpc_url, binary=binary, cast_binary=cast_binary),
    )
