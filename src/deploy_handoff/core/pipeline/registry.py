"""
Registro estrutural de unidades de deployment.

Este módulo define o `UnitRegistry`, responsável por registrar unidades e
validar a integridade estrutural da run antes de qualquer invocação.

O registry garante que:
    - cada unidade possua um identificador válido
    - não existam identificadores duplicados
    - a ordem de declaração seja preservada (é a ordem de invocação)

Limites explícitos:
    - Não invoca unidades
    - Não paraleliza unidades independentes: a ordem é sempre sequencial
    - Não interage com RunContext ou Manifest
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

from deploy_handoff.core.units.protocols import DeploymentUnit


class DuplicateUnitIdError(ValueError):
    """
    Exceção levantada quando duas unidades compartilham o mesmo `id`.

    A duplicidade é tratada como erro fatal de configuração, detectado no
    registro, antes que qualquer unidade seja invocada.
    """


@dataclass
class UnitRegistry:
    """Registro canônico de unidades para validação estrutural pré-execução."""

    _units: Dict[str, DeploymentUnit] = field(default_factory=dict, init=False, repr=False)
    _order: List[str] = field(default_factory=list, init=False, repr=False)

    def add(self, unit: DeploymentUnit) -> None:
        unit_id = getattr(unit, "id", None)
        if not isinstance(unit_id, str) or not unit_id.strip():
            raise ValueError("unit.id must be a non-empty string")

        if unit_id in self._units:
            raise DuplicateUnitIdError(f"Duplicate unit id: {unit_id}")

        self._units[unit_id] = unit
        self._order.append(unit_id)

    def get(self, unit_id: str) -> DeploymentUnit:
        return self._units[unit_id]

    def list(self) -> List[DeploymentUnit]:
        return [self._units[uid] for uid in self._order]

    def __len__(self) -> int:
        return len(self._order)
