"""
Artifact Reader — parse de registros e extração de endereços/dependências.

Formato do registro (broadcast, v1):

    {
      "chain": 11155111,
      "timestamp": 1717000000,
      "transactions": [
        {"transactionType": "CREATE", "contractName": "Factory", "contractAddress": "0x..."},
        {"transactionType": "CALL", ...}
      ]
    }

Decisões arquiteturais:
    - Eventos de criação são entradas com `transactionType` CREATE ou CREATE2;
      demais tipos (CALL, ...) são ignorados
    - `sequence_index` é a posição da entrada em `transactions`
    - Seleção de endereço é last-match-wins: entre eventos com o mesmo nome,
      o de maior `sequence_index` é o que está em vigor (re-deploy sobrescreve)
    - `extract_dependency` é uma chamada de fronteira (leituras na rede via
      FactoryReader), não um parse local

Invariantes:
    - Registros estruturalmente inválidos nunca produzem DeploymentArtifact
    - Endereços são retornados exatamente como registrados/lidos
    - Endereço zero nunca é entregue a unidades dependentes
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from deploy_handoff.core.errors import (
    collaborator_call_failed,
    component_not_found,
    schema_error,
    store_unavailable,
    zero_address_resolved,
)
from deploy_handoff.core.exceptions import (
    CollaboratorCallFailed,
    ComponentNotFound,
    SchemaError,
    StoreUnavailable,
    ZeroAddressResolved,
)
from deploy_handoff.core.units.protocols import FactoryReader

from .store import DRY_RUN_SEGMENT
from .types import (
    CreationEvent,
    DeploymentArtifact,
    ProvenanceMode,
    ResolvedDependency,
    is_zero_address,
)


CREATION_TYPES = frozenset({"CREATE", "CREATE2"})

_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")


def is_address(value: Any) -> bool:
    return isinstance(value, str) and bool(_ADDRESS_RE.match(value))


@dataclass(frozen=True)
class DependencyAccessors:
    """Assinaturas de leitura usadas para derivar a dependência a partir da factory."""

    primary: str
    shared_references: Mapping[str, str] = field(default_factory=dict)
    opaque_parameters: Mapping[str, str] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Parse
# ---------------------------------------------------------------------------

def _schema(path: Path, problem: str, field_name: Optional[str] = None) -> SchemaError:
    return schema_error(path=str(path), problem=problem, field=field_name).as_exception(SchemaError)


def _parse_int(value: Any, *, path: Path, field_name: str) -> int:
    if isinstance(value, bool):
        raise _schema(path, f"{field_name} must be an integer", field_name)
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        s = value.strip()
        try:
            if s.lower().startswith("0x"):
                return int(s, 16)
            return int(s, 10)
        except ValueError:
            raise _schema(path, f"{field_name} is not a parsable integer: {value!r}", field_name) from None
    raise _schema(path, f"{field_name} must be an integer", field_name)


def _infer_provenance(path: Path) -> ProvenanceMode:
    if DRY_RUN_SEGMENT in path.parts:
        return ProvenanceMode.DRY_RUN
    return ProvenanceMode.REAL


def _infer_step_id(path: Path, provenance: ProvenanceMode) -> str:
    # <root>/<step>/<network>/[dry-run/]run-latest.json
    offset = 4 if provenance is ProvenanceMode.DRY_RUN else 3
    parts = path.parts
    if len(parts) >= offset:
        return parts[-offset]
    return path.stem


def parse_artifact(
    path: Union[str, Path],
    *,
    step_id: Optional[str] = None,
    provenance: Optional[ProvenanceMode] = None,
) -> DeploymentArtifact:
    """
    Parseia um registro persistido em DeploymentArtifact.

    Quando `step_id`/`provenance` não são informados, são inferidos do
    campo `step_id` do documento (se houver) ou do layout do caminho.

    Raises:
        StoreUnavailable: se o arquivo não puder ser lido.
        SchemaError: se o conteúdo for estruturalmente inválido.
    """
    p = Path(path)
    try:
        raw = p.read_text(encoding="utf-8")
    except OSError as e:
        raise store_unavailable(path=str(p), exc_message=str(e)).as_exception(StoreUnavailable) from e

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise _schema(p, f"invalid JSON ({e.msg} at line {e.lineno})") from None

    if not isinstance(data, dict):
        raise _schema(p, f"root must be an object, got {type(data).__name__}")

    for required in ("chain", "timestamp", "transactions"):
        if required not in data:
            raise _schema(p, f"missing required field '{required}'", required)

    network_id = _parse_int(data["chain"], path=p, field_name="chain")
    captured_at = _parse_int(data["timestamp"], path=p, field_name="timestamp")

    transactions = data["transactions"]
    if not isinstance(transactions, list):
        raise _schema(p, "transactions must be a list", "transactions")

    events: List[CreationEvent] = []
    for i, tx in enumerate(transactions):
        where = f"transactions[{i}]"
        if not isinstance(tx, dict):
            raise _schema(p, f"{where} must be an object", where)
        tx_type = tx.get("transactionType")
        if not isinstance(tx_type, str) or not tx_type:
            raise _schema(p, f"{where}.transactionType is required", f"{where}.transactionType")
        if tx_type not in CREATION_TYPES:
            continue

        name = tx.get("contractName")
        if not isinstance(name, str) or not name.strip():
            raise _schema(p, f"{where}.contractName is required for {tx_type}", f"{where}.contractName")
        address = tx.get("contractAddress")
        if not is_address(address):
            raise _schema(p, f"{where}.contractAddress is not a valid address: {address!r}", f"{where}.contractAddress")

        events.append(CreationEvent(component_name=name, address=address, sequence_index=i))

    mode = provenance or _infer_provenance(p)
    doc_step = data.get("step_id") if isinstance(data.get("step_id"), str) else None

    return DeploymentArtifact(
        step_id=step_id or doc_step or _infer_step_id(p, mode),
        network_id=network_id,
        provenance=mode,
        events=tuple(events),
        captured_at=captured_at,
        path=p,
    )


# ---------------------------------------------------------------------------
# Extração
# ---------------------------------------------------------------------------

def extract_address(artifact: DeploymentArtifact, component_name: str) -> str:
    """
    Retorna o endereço em vigor do componente (last-match-wins).

    Raises:
        ComponentNotFound: se nenhum evento de criação tem esse nome.
        SchemaError: se dois eventos distintos empatam no maior sequence_index.
        ZeroAddressResolved: se o evento vencedor registra o endereço zero.
    """
    path = str(artifact.path) if artifact.path is not None else artifact.step_id
    matches = [e for e in artifact.events if e.component_name == component_name]
    if not matches:
        raise component_not_found(
            component_name=component_name,
            path=path,
            available=artifact.component_names(),
        ).as_exception(ComponentNotFound)

    top = max(e.sequence_index for e in matches)
    winners = {e.address for e in matches if e.sequence_index == top}
    if len(winners) > 1:
        # empate sem regra de precedência: ambíguo, nunca escolhido arbitrariamente
        raise schema_error(
            path=path,
            problem=f"ambiguous creation events for '{component_name}' at sequence index {top}",
            field="sequence_index",
        ).as_exception(SchemaError)

    address = winners.pop()
    if is_zero_address(address):
        raise zero_address_resolved(field=component_name, source=path).as_exception(ZeroAddressResolved)
    return address


def _read_address(reader: FactoryReader, target: str, signature: str) -> str:
    try:
        value = reader.read_address(target, signature)
    except CollaboratorCallFailed:
        raise
    except Exception as e:
        raise collaborator_call_failed(target=target, signature=signature, reason=str(e) or e.__class__.__name__).as_exception(CollaboratorCallFailed) from e

    if not is_address(value):
        raise collaborator_call_failed(
            target=target, signature=signature, reason=f"not an address: {value!r}"
        ).as_exception(CollaboratorCallFailed)
    if is_zero_address(value):
        raise collaborator_call_failed(
            target=target, signature=signature, reason="returned the zero address"
        ).as_exception(CollaboratorCallFailed)
    return value


def _read_uint(reader: FactoryReader, target: str, signature: str) -> int:
    try:
        value = reader.read_uint(target, signature)
    except CollaboratorCallFailed:
        raise
    except Exception as e:
        raise collaborator_call_failed(target=target, signature=signature, reason=str(e) or e.__class__.__name__).as_exception(CollaboratorCallFailed) from e

    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise collaborator_call_failed(
            target=target, signature=signature, reason=f"not an unsigned integer: {value!r}"
        ).as_exception(CollaboratorCallFailed)
    return value


def extract_dependency(
    artifact: DeploymentArtifact,
    factory_address: str,
    *,
    reader: FactoryReader,
    accessors: DependencyAccessors,
) -> ResolvedDependency:
    """
    Deriva a ResolvedDependency lendo a factory upstream já implantada.

    Raises:
        CollaboratorCallFailed: se uma leitura falhar ou retornar zero/valor inválido
            onde um endereço real é obrigatório.
    """
    primary = _read_address(reader, factory_address, accessors.primary)

    shared: Dict[str, str] = {}
    for name, signature in accessors.shared_references.items():
        shared[name] = _read_address(reader, factory_address, signature)

    opaque: Dict[str, int] = {}
    for name, signature in accessors.opaque_parameters.items():
        opaque[name] = _read_uint(reader, factory_address, signature)

    return ResolvedDependency(
        network_id=artifact.network_id,
        factory_address=factory_address,
        primary_component_address=primary,
        shared_reference_addresses=shared,
        opaque_parameter_ids=opaque,
    )


def ensure_non_zero(dependency: ResolvedDependency) -> ResolvedDependency:
    """Gate de pré-handoff: factory, primário e referências compartilhadas não-zero."""
    checks = [
        ("factory_address", dependency.factory_address),
        ("primary_component_address", dependency.primary_component_address),
    ]
    checks.extend(
        (f"shared_reference_addresses.{name}", address)
        for name, address in dependency.shared_reference_addresses.items()
    )
    for field_name, address in checks:
        if not is_address(address) or is_zero_address(address):
            raise zero_address_resolved(
                field=field_name,
                source="resolved_dependency",
            ).as_exception(ZeroAddressResolved)
    return dependency
