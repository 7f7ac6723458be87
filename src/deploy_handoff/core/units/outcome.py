"""Desfecho terminal de uma invocação de unidade de deployment."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional

from deploy_handoff.core.pipeline.types import StepStatus


@dataclass(frozen=True)
class UnitOutcome:
    """
    Resultado declarado por uma unidade.

    - SUCCESS: `component_handles` mapeia nome do componente → endereço criado
    - FAILED: `reason` carrega a causa bruta, repassada sem alteração
    """

    status: StepStatus
    component_handles: Mapping[str, str] = field(default_factory=dict)
    reason: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "component_handles", MappingProxyType(dict(self.component_handles)))

    @classmethod
    def success(cls, component_handles: Mapping[str, str]) -> "UnitOutcome":
        return cls(status=StepStatus.SUCCESS, component_handles=component_handles)

    @classmethod
    def failed(cls, reason: str) -> "UnitOutcome":
        return cls(status=StepStatus.FAILED, reason=reason)

    @property
    def ok(self) -> bool:
        return self.status == StepStatus.SUCCESS
