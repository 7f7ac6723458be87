"""
Tipos canônicos da run de orquestração do Deploy Handoff.

Este módulo define as estruturas e enums que padronizam a comunicação
entre unidades, orquestrador e camadas de rastreabilidade.

Componentes principais:
    - StepStatus → estado final de uma invocação de unidade (SUCCESS, FAILED)
    - StepRecord → registro imutável do desfecho de uma invocação

Princípios fundamentais:
    - Tipos são estáveis e serializáveis
    - Valores são projetados para persistência em Manifest e no resumo
    - Nenhuma lógica de execução vive neste módulo

Invariantes:
    - Enums possuem valores textuais canônicos
    - StepRecord é imutável e nunca é usado como entrada de resolução

Limites explícitos:
    - Não invoca unidades
    - Não decide políticas de execução
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional


class StepStatus(str, Enum):
    """
    Estados finais possíveis da invocação de uma unidade.

    Estados definidos:
        - SUCCESS: unidade concluída, componentes criados reportados
        - FAILED: unidade reportou falha (ou levantou exceção)

    Não existe estado SKIPPED: unidades posteriores a uma falha simplesmente
    não são invocadas e não produzem StepRecord.
    """
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class StepRecord:
    """
    Registro imutável do desfecho de uma unidade na run.

    Campos:
        - step_id: identificador da unidade
        - status: desfecho terminal
        - started_at / finished_at: timestamps UTC da invocação
        - component_handles: componentes criados (nome → endereço), vazio em falha
        - reason: causa bruta da falha, None em sucesso
        - params: parâmetros observados pela unidade (snapshot do EnvironmentContext)

    Limites explícitos:
        - Usado apenas para o resumo final e o Manifest
        - Nunca realimentado como entrada de resolução
    """
    step_id: str
    status: StepStatus
    started_at: datetime
    finished_at: datetime
    component_handles: Dict[str, str] = field(default_factory=dict)
    reason: Optional[str] = None
    params: Dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == StepStatus.SUCCESS

    def to_dict(self) -> Dict[str, Any]:
        return {
            "step_id": self.step_id,
            "status": self.status.value,
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat(),
            "component_handles": dict(self.component_handles),
            "reason": self.reason,
            "params": dict(self.params),
        }
