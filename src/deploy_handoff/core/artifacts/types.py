"""
Tipos canônicos de artefatos de deployment.

Este módulo define as estruturas que representam o registro persistido
de uma etapa de deployment e os valores derivados dele.

Componentes principais:
    - ProvenanceMode     → origem do registro (real / dry-run)
    - ArtifactLocation   → caminho resolvido de um registro, com sua chave
    - ArtifactCandidates → candidatos encontrados para uma chave (sem parse)
    - CreationEvent      → evento de criação de componente
    - DeploymentArtifact → registro parseado e imutável
    - ResolvedDependency → endereços e parâmetros derivados para unidades dependentes

Invariantes:
    - DeploymentArtifact e ResolvedDependency são imutáveis
    - Mapeamentos expostos por ResolvedDependency são somente leitura
    - Endereços são preservados exatamente como registrados (sem normalização)

Limites explícitos:
    - Não lê filesystem
    - Não valida semântica de negócio dos componentes
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple


ZERO_ADDRESS = "0x" + "0" * 40


def is_zero_address(address: str) -> bool:
    """True quando o endereço hexadecimal representa o valor zero."""
    try:
        return int(address, 16) == 0
    except (TypeError, ValueError):
        return False


class ProvenanceMode(str, Enum):
    """
    Origem de um registro de deployment.

    Os modos são mutuamente exclusivos para uma mesma chave:
        - REAL: broadcast irreversível na rede
        - DRY_RUN: simulação local, nada foi transmitido
    """
    REAL = "real"
    DRY_RUN = "dry_run"


@dataclass(frozen=True)
class ArtifactLocation:
    """Registro localizado (ainda não parseado) para uma chave."""

    step_id: str
    network_id: int
    mode: ProvenanceMode
    path: Path


@dataclass(frozen=True)
class ArtifactCandidates:
    """
    Candidatos encontrados para (step_id, network_id).

    `real` e `dry_run` são os caminhos existentes, ou None quando ausentes.
    `probed` lista todos os caminhos verificados, existentes ou não.
    """

    step_id: str
    network_id: int
    real: Optional[Path] = None
    dry_run: Optional[Path] = None
    probed: Tuple[Path, ...] = ()
    history: Mapping[str, int] = field(default_factory=dict)

    def present(self) -> List[ArtifactLocation]:
        found: List[ArtifactLocation] = []
        if self.real is not None:
            found.append(ArtifactLocation(self.step_id, self.network_id, ProvenanceMode.REAL, self.real))
        if self.dry_run is not None:
            found.append(ArtifactLocation(self.step_id, self.network_id, ProvenanceMode.DRY_RUN, self.dry_run))
        return found

    @property
    def is_empty(self) -> bool:
        return self.real is None and self.dry_run is None


@dataclass(frozen=True)
class CreationEvent:
    """Criação de um componente registrada na posição `sequence_index`."""

    component_name: str
    address: str
    sequence_index: int


@dataclass(frozen=True)
class DeploymentArtifact:
    """
    Registro persistido de uma etapa de deployment (imutável).

    Campos:
        - step_id: etapa que produziu o registro
        - network_id: rede alvo (chain id) declarada no registro
        - provenance: modo de origem (real / dry-run)
        - events: eventos de criação, na ordem do registro
        - captured_at: timestamp do registro (unidade do produtor)
        - path: caminho de origem, para diagnóstico
    """

    step_id: str
    network_id: int
    provenance: ProvenanceMode
    events: Tuple[CreationEvent, ...]
    captured_at: int
    path: Optional[Path] = None

    def component_names(self) -> List[str]:
        return [e.component_name for e in self.events]


@dataclass(frozen=True)
class ResolvedDependency:
    """
    Dependência resolvida a partir do registro upstream.

    Derivada e não persistida como entrada: é recalculada a cada run.
    A mesma instância é entregue a todas as unidades de uma run, de modo que
    unidades irmãs observem exatamente os mesmos valores.
    """

    network_id: int
    factory_address: str
    primary_component_address: str
    shared_reference_addresses: Mapping[str, str] = field(default_factory=dict)
    opaque_parameter_ids: Mapping[str, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # cópia somente leitura
        object.__setattr__(
            self, "shared_reference_addresses", MappingProxyType(dict(self.shared_reference_addresses))
        )
        object.__setattr__(
            self, "opaque_parameter_ids", MappingProxyType(dict(self.opaque_parameter_ids))
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "network_id": self.network_id,
            "factory_address": self.factory_address,
            "primary_component_address": self.primary_component_address,
            "shared_reference_addresses": dict(self.shared_reference_addresses),
            "opaque_parameter_ids": dict(self.opaque_parameter_ids),
        }
