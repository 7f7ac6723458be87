"""
Deploy Handoff — Canonical Error Structures (v1)

Este módulo define o padrão canônico de erros do Deploy Handoff.
Erros são artefatos de domínio e fazem parte do contrato operacional
do orquestrador, devendo ser:

- explícitos
- serializáveis
- rastreáveis
- acionáveis

Deployments não são reversíveis: nenhuma decisão implícita é permitida.
Onde houver ambiguidade (ex.: registros real e dry-run coexistindo), o erro
carrega `decision_required=True` e a orientação de remediação.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional, Type

from .exceptions import HandoffException


# ---------------------------------------------------------------------------
# Payload canônico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class HandoffErrorPayload:
    """
    Payload canônico de erro do Deploy Handoff.

    Campos:
    - type: código estável do erro (não é texto livre)
    - message: mensagem curta, humana e objetiva
    - details: dados estruturados relevantes para diagnóstico
    - hint: ação sugerida ao operador (onde corrigir)
    - decision_required: indica que a run está bloqueada aguardando decisão humana
      (sem auto-correção, sem escolha silenciosa de modo).
    """

    type: str
    message: str
    details: Dict[str, Any]
    hint: Optional[str] = None
    decision_required: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Retorna representação serializável do erro."""
        return asdict(self)

    def as_exception(self, exc_type: Type[HandoffException]) -> HandoffException:
        """Materializa o payload como exceção tipada (mesmos campos)."""
        return exc_type(
            message=self.message,
            details=dict(self.details),
            hint=self.hint,
            decision_required=self.decision_required,
        )


def payload_from_exception(exc: HandoffException) -> HandoffErrorPayload:
    """Converte uma HandoffException no payload canônico.

    O código estável do erro é o nome da classe (ex.: `ModeConflict`).
    """
    return HandoffErrorPayload(
        type=exc.__class__.__name__,
        message=str(exc) or "Erro de resolução",
        details=dict(exc.details or {}),
        hint=exc.hint,
        decision_required=bool(exc.decision_required),
    )


# ---------------------------------------------------------------------------
# Catálogo canônico de tipos de erro (v1)
# ---------------------------------------------------------------------------

# Artifact store / resolução
STORE_UNAVAILABLE = "StoreUnavailable"
ARTIFACT_NOT_FOUND = "ArtifactNotFound"
MODE_CONFLICT = "ModeConflict"
SCHEMA_ERROR = "SchemaError"
COMPONENT_NOT_FOUND = "ComponentNotFound"
CHAIN_ID_MISMATCH = "ChainIdMismatch"
ZERO_ADDRESS_RESOLVED = "ZeroAddressResolved"

# Colaboradores
COLLABORATOR_CALL_FAILED = "CollaboratorCallFailed"
UNIT_DEPLOYMENT_FAILED = "UnitDeploymentFailed"

# Orquestrador
ORCHESTRATOR_EXECUTION_ERROR = "OrchestratorExecutionError"


# ---------------------------------------------------------------------------
# Helpers de fábrica
# ---------------------------------------------------------------------------

def artifact_not_found(
    *,
    step_id: str,
    network_id: int,
    probed_paths: List[str],
    hint: str = "Execute a etapa upstream nesta rede (real ou dry-run) antes de reexecutar o orquestrador.",
) -> HandoffErrorPayload:
    return HandoffErrorPayload(
        type=ARTIFACT_NOT_FOUND,
        message="Nenhum registro de deployment encontrado para a etapa upstream",
        details={
            "step_id": step_id,
            "network_id": network_id,
            "probed_paths": list(probed_paths),
        },
        hint=hint,
        decision_required=True,
    )


def mode_conflict(
    *,
    step_id: str,
    network_id: int,
    real_path: str,
    dry_run_path: str,
) -> HandoffErrorPayload:
    return HandoffErrorPayload(
        type=MODE_CONFLICT,
        message="Registros real e dry-run coexistem para a mesma etapa e rede",
        details={
            "step_id": step_id,
            "network_id": network_id,
            "real_path": real_path,
            "dry_run_path": dry_run_path,
            "remediation": {
                "real": f"Para resolver a partir do deployment real, remova {dry_run_path}",
                "dry_run": f"Para resolver a partir da simulação, remova {real_path}",
            },
        },
        hint="Remova um dos registros conforme o modo pretendido e reexecute. Nenhum modo é escolhido automaticamente.",
        decision_required=True,
    )


def store_unavailable(
    *,
    path: str,
    exc_message: str,
) -> HandoffErrorPayload:
    return HandoffErrorPayload(
        type=STORE_UNAVAILABLE,
        message="Artifact store não pôde ser enumerado",
        details={
            "path": path,
            "exc_message": exc_message,
        },
        hint="Verifique permissões e o valor de `run.artifacts_root`.",
        decision_required=False,
    )


def schema_error(
    *,
    path: str,
    problem: str,
    field: Optional[str] = None,
) -> HandoffErrorPayload:
    return HandoffErrorPayload(
        type=SCHEMA_ERROR,
        message=f"Registro de deployment inválido: {problem}",
        details={
            "path": path,
            "field": field,
            "problem": problem,
        },
        hint="O registro está corrompido ou não foi produzido por um broadcast; reexecute a etapa upstream.",
        decision_required=False,
    )


def component_not_found(
    *,
    component_name: str,
    path: str,
    available: List[str],
) -> HandoffErrorPayload:
    return HandoffErrorPayload(
        type=COMPONENT_NOT_FOUND,
        message=f"Componente '{component_name}' não foi criado pela etapa upstream",
        details={
            "component_name": component_name,
            "path": path,
            "available_components": sorted(set(available)),
        },
        hint="Ajuste `upstream.factory_component` para um dos componentes disponíveis.",
        decision_required=False,
    )


def collaborator_call_failed(
    *,
    target: str,
    signature: str,
    reason: str,
) -> HandoffErrorPayload:
    return HandoffErrorPayload(
        type=COLLABORATOR_CALL_FAILED,
        message=f"Leitura '{signature}' na factory falhou",
        details={
            "target": target,
            "signature": signature,
            "reason": reason,
        },
        hint="Verifique o RPC da rede e se a factory upstream está implantada e inicializada.",
        decision_required=False,
    )


def chain_id_mismatch(
    *,
    expected_network_id: int,
    artifact_network_id: int,
    path: str,
) -> HandoffErrorPayload:
    return HandoffErrorPayload(
        type=CHAIN_ID_MISMATCH,
        message="Registro upstream pertence a outra rede",
        details={
            "expected_network_id": expected_network_id,
            "artifact_network_id": artifact_network_id,
            "path": path,
        },
        hint="Verifique `run.network_id` e o diretório do registro upstream; resolução entre redes é proibida.",
        decision_required=False,
    )


def zero_address_resolved(
    *,
    field: str,
    source: str,
    hint: str = "Confirme que o componente upstream foi implantado e inicializado antes de reexecutar.",
) -> HandoffErrorPayload:
    return HandoffErrorPayload(
        type=ZERO_ADDRESS_RESOLVED,
        message="Endereço zero resolvido onde um endereço real é obrigatório",
        details={
            "field": field,
            "source": source,
        },
        hint=hint,
        decision_required=False,
    )


def unit_deployment_failed(
    *,
    unit_id: str,
    reason: str,
) -> HandoffErrorPayload:
    # `reason` é repassado sem alteração: o orquestrador não reinterpreta falhas da unidade.
    return HandoffErrorPayload(
        type=UNIT_DEPLOYMENT_FAILED,
        message=reason,
        details={
            "unit_id": unit_id,
        },
        hint="Corrija a causa na unidade e reexecute o orquestrador desde a resolução upstream. Unidades anteriores não são revertidas.",
        decision_required=False,
    )


def orchestrator_execution_error(
    *,
    state: Optional[str] = None,
    exc_type: Optional[str] = None,
    exc_message: Optional[str] = None,
    hint: str = "Verifique o manifest da run para diagnosticar a falha. Nenhum fallback é aplicado automaticamente.",
) -> HandoffErrorPayload:
    return HandoffErrorPayload(
        type=ORCHESTRATOR_EXECUTION_ERROR,
        message="Falha inesperada durante a execução do orquestrador",
        details={
            "state": state,
            "exc_type": exc_type,
            "exc_message": exc_message,
        },
        hint=hint,
        decision_required=False,
    )
