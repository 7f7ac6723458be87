"""
Orquestrador de etapas do Deploy Handoff.

Máquina de estados (v1):

    INIT → RESOLVE_UPSTREAM → INVOKE_UNIT(k) → RECORD_OUTCOME(k)
         → [há mais unidades? INVOKE_UNIT(k+1) : SUMMARIZE] → DONE

Qualquer erro leva a FAILED e a run termina: nenhuma unidade restante é
invocada, nenhuma unidade anterior é revertida, nada é reexecutado.

Regras:
- RESOLVE_UPSTREAM roda store → guard → reader uma única vez por run; a
  mesma ResolvedDependency (imutável) é entregue a todas as unidades.
- Cada unidade recebe um EnvironmentContext próprio, construído aqui; o
  ambiente do processo nunca é alterado.
- A espera pela unidade é bloqueante e sem timeout do orquestrador.
- A causa de falha de uma unidade é repassada sem alteração.
- Exceções são convertidas em HandoffErrorPayload (serializável e acionável);
  stack traces não são expostos no resultado.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from deploy_handoff.core.artifacts.guard import select
from deploy_handoff.core.artifacts.reader import (
    DependencyAccessors,
    ensure_non_zero,
    extract_address,
    extract_dependency,
    is_address,
    parse_artifact,
)
from deploy_handoff.core.artifacts.store import ArtifactStore
from deploy_handoff.core.artifacts.types import ArtifactLocation, ResolvedDependency, is_zero_address
from deploy_handoff.core.config.schema import UnitSpec, UpstreamSpec
from deploy_handoff.core.errors import (
    HandoffErrorPayload,
    chain_id_mismatch,
    orchestrator_execution_error,
    payload_from_exception,
    unit_deployment_failed,
)
from deploy_handoff.core.exceptions import ChainIdMismatch, HandoffException
from deploy_handoff.core.pipeline.context import DEPENDENCY_ARTIFACT_KEY, RunContext
from deploy_handoff.core.pipeline.registry import UnitRegistry
from deploy_handoff.core.pipeline.types import StepRecord, StepStatus
from deploy_handoff.core.traceability import manifest as mf
from deploy_handoff.core.units.environment import EnvironmentContext, EnvKeyCollisionError
from deploy_handoff.core.units.outcome import UnitOutcome
from deploy_handoff.core.units.protocols import DeploymentUnit, FactoryReader
from deploy_handoff.report.summary import SummaryReport, build_summary


ORCHESTRATOR_STEP_ID = "orchestrator"


class OrchestratorState(str, Enum):
    INIT = "init"
    RESOLVE_UPSTREAM = "resolve_upstream"
    INVOKE_UNIT = "invoke_unit"
    RECORD_OUTCOME = "record_outcome"
    SUMMARIZE = "summarize"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class PlannedUnit:
    """Unidade a invocar, com sua declaração (config_ref + params)."""

    spec: UnitSpec
    unit: DeploymentUnit

    def __post_init__(self) -> None:
        if getattr(self.unit, "id", None) != self.spec.id:
            raise ValueError(f"unit id '{getattr(self.unit, 'id', None)}' does not match spec id '{self.spec.id}'")

    @property
    def id(self) -> str:
        return self.spec.id


@dataclass(frozen=True)
class OrchestratorResult:
    """Resultado agregado de uma run do orquestrador."""

    state: OrchestratorState
    records: Tuple[StepRecord, ...] = ()
    upstream: Optional[ArtifactLocation] = None
    dependency: Optional[ResolvedDependency] = None
    summary: Optional[SummaryReport] = None
    error: Optional[Dict[str, Any]] = None
    transitions: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return self.state == OrchestratorState.DONE

    def record_for(self, step_id: str) -> StepRecord:
        for r in self.records:
            if r.step_id == step_id:
                return r
        raise KeyError(step_id)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Orchestrator:
    """Sequenciador de unidades com resolução upstream única e fail-fast."""

    def __init__(
        self,
        *,
        plan: Sequence[PlannedUnit],
        ctx: RunContext,
        store: ArtifactStore,
        reader: FactoryReader,
        upstream: UpstreamSpec,
        network_id: int,
        manifest: Optional[mf.RunManifest] = None,
        clock: Callable[[], datetime] = _utc_now,
    ):
        registry = UnitRegistry()
        for planned in plan:
            registry.add(planned.unit)

        self.plan: List[PlannedUnit] = list(plan)
        self.registry = registry
        self.ctx = ctx
        self.store = store
        self.reader = reader
        self.upstream = upstream
        self.network_id = network_id
        self.manifest = manifest
        self.clock = clock

        self._transitions: List[str] = []

    # ------------------------------------------------------------------
    # Estado
    # ------------------------------------------------------------------
    def _transition(self, state: OrchestratorState, **extra: Any) -> None:
        label = state.value
        if "unit" in extra:
            label = f"{label}:{extra['unit']}"
        self._transitions.append(label)
        self.ctx.log(step_id=ORCHESTRATOR_STEP_ID, level="info", message=f"state -> {label}", state=state.value, **extra)

    def _fail(
        self,
        error: HandoffErrorPayload,
        *,
        records: Sequence[StepRecord] = (),
        upstream: Optional[ArtifactLocation] = None,
        dependency: Optional[ResolvedDependency] = None,
    ) -> OrchestratorResult:
        self._transition(OrchestratorState.FAILED, error_type=error.type)
        self.ctx.log(
            step_id=ORCHESTRATOR_STEP_ID,
            level="error",
            message=error.message,
            error_type=error.type,
        )
        if self.manifest is not None:
            mf.run_finished(self.manifest, ts=self.clock(), status=OrchestratorState.FAILED.value, error=error.to_dict())

        return OrchestratorResult(
            state=OrchestratorState.FAILED,
            records=tuple(records),
            upstream=upstream,
            dependency=dependency,
            error=error.to_dict(),
            transitions=tuple(self._transitions),
        )

    # ------------------------------------------------------------------
    # RESOLVE_UPSTREAM
    # ------------------------------------------------------------------
    def resolve_upstream(self) -> Tuple[ArtifactLocation, ResolvedDependency]:
        """store → guard → reader; levanta HandoffException em qualquer violação."""
        up = self.upstream

        candidates = self.store.locate(up.step_id, self.network_id)
        location = select(candidates)
        artifact = parse_artifact(location.path, step_id=location.step_id, provenance=location.mode)

        if artifact.network_id != self.network_id:
            raise chain_id_mismatch(
                expected_network_id=self.network_id,
                artifact_network_id=artifact.network_id,
                path=str(location.path),
            ).as_exception(ChainIdMismatch)

        factory = extract_address(artifact, up.factory_component)
        dependency = extract_dependency(
            artifact,
            factory,
            reader=self.reader,
            accessors=DependencyAccessors(
                primary=up.primary_accessor,
                shared_references=up.shared_references,
                opaque_parameters=up.opaque_parameters,
            ),
        )
        return location, ensure_non_zero(dependency)

    # ------------------------------------------------------------------
    # INVOKE_UNIT / RECORD_OUTCOME
    # ------------------------------------------------------------------
    def _invoke(self, planned: PlannedUnit, env: EnvironmentContext) -> UnitOutcome:
        try:
            outcome = planned.unit.invoke(env)
        except Exception as e:
            # a causa é repassada como veio da unidade
            return UnitOutcome.failed(str(e) or e.__class__.__name__)

        if not isinstance(outcome, UnitOutcome):
            return UnitOutcome.failed(
                f"unit '{planned.id}' returned {type(outcome).__name__}, expected UnitOutcome"
            )

        invalid = sorted(
            name
            for name, address in outcome.component_handles.items()
            if not is_address(address) or is_zero_address(address)
        )
        if outcome.ok and invalid:
            return UnitOutcome.failed(
                f"unit '{planned.id}' reported invalid addresses for: {', '.join(invalid)}"
            )
        return outcome

    def run(self) -> OrchestratorResult:
        self._transitions = []
        self._transition(OrchestratorState.INIT, units=[p.id for p in self.plan])
        if self.manifest is not None:
            mf.add_event(
                self.manifest,
                event_type="run_started",
                ts=self.clock(),
                payload={"units": [p.id for p in self.plan]},
            )

        self._transition(OrchestratorState.RESOLVE_UPSTREAM, upstream_step_id=self.upstream.step_id)
        try:
            location, dependency = self.resolve_upstream()
        except HandoffException as e:
            return self._fail(payload_from_exception(e))
        except Exception as e:
            return self._fail(
                orchestrator_execution_error(
                    state=OrchestratorState.RESOLVE_UPSTREAM.value,
                    exc_type=e.__class__.__name__,
                    exc_message=str(e),
                )
            )

        self.ctx.set_artifact(DEPENDENCY_ARTIFACT_KEY, dependency)
        self.ctx.log(
            step_id=ORCHESTRATOR_STEP_ID,
            level="info",
            message="upstream resolved",
            path=str(location.path),
            provenance=location.mode.value,
        )
        if self.manifest is not None:
            mf.upstream_resolved(
                self.manifest,
                ts=self.clock(),
                path=str(location.path),
                provenance=location.mode.value,
                dependency=dependency.to_dict(),
            )

        records: List[StepRecord] = []
        for k, planned in enumerate(self.plan):
            self._transition(OrchestratorState.INVOKE_UNIT, unit=planned.id, index=k)

            try:
                env = EnvironmentContext(
                    unit_id=planned.id,
                    config_ref=planned.spec.config_ref,
                    dependency=dependency,
                    params=planned.spec.params,
                )
            except EnvKeyCollisionError as e:
                return self._fail(
                    orchestrator_execution_error(
                        state=OrchestratorState.INVOKE_UNIT.value,
                        exc_type=e.__class__.__name__,
                        exc_message=str(e),
                    ),
                    records=records,
                    upstream=location,
                    dependency=dependency,
                )
            started_at = self.clock()
            if self.manifest is not None:
                mf.step_started(self.manifest, step_id=planned.id, ts=started_at)

            outcome = self._invoke(planned, env)
            finished_at = self.clock()

            self._transition(OrchestratorState.RECORD_OUTCOME, unit=planned.id, status=outcome.status.value)
            record = StepRecord(
                step_id=planned.id,
                status=outcome.status,
                started_at=started_at,
                finished_at=finished_at,
                component_handles=dict(outcome.component_handles),
                reason=outcome.reason,
                params=env.snapshot(),
            )
            records.append(record)

            if record.status == StepStatus.FAILED:
                reason = record.reason or "unit reported failure without reason"
                if self.manifest is not None:
                    mf.step_failed(self.manifest, step_id=planned.id, ts=finished_at, error=reason)
                return self._fail(
                    unit_deployment_failed(unit_id=planned.id, reason=reason),
                    records=records,
                    upstream=location,
                    dependency=dependency,
                )

            if self.manifest is not None:
                mf.step_finished(self.manifest, step_id=planned.id, ts=finished_at, result=record.to_dict())
            self.ctx.log(
                step_id=planned.id,
                level="info",
                message="unit succeeded",
                components=sorted(record.component_handles),
            )
            if not record.component_handles:
                self.ctx.add_warning(step_id=planned.id, message="unit reported no created components")

        self._transition(OrchestratorState.SUMMARIZE)
        summary = build_summary(
            run_id=self.ctx.run_id,
            network_id=self.network_id,
            upstream=location,
            dependency=dependency,
            records=records,
            generated_at=self.clock(),
        )

        self._transition(OrchestratorState.DONE)
        if self.manifest is not None:
            mf.run_finished(self.manifest, ts=self.clock(), status=OrchestratorState.DONE.value)

        return OrchestratorResult(
            state=OrchestratorState.DONE,
            records=tuple(records),
            upstream=location,
            dependency=dependency,
            summary=summary,
            transitions=tuple(self._transitions),
        )
