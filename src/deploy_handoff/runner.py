"""
Ponto de entrada em uma chamada: configuração → run completa.

Fluxo:
    load_config → validate_run_config → ArtifactStore / FactoryReader /
    unidades → RunContext + Manifest → Orchestrator.run()
    → (output_dir) manifest.json, summary.md, summary.json

Caminhos relativos em `run.artifacts_root` e `run.output_dir` são
resolvidos a partir do diretório do arquivo de configuração.

Erros de configuração (`ConfigError`) são levantados antes de qualquer
resolução; erros de resolução e de unidades ficam no OrchestratorResult.
"""

from __future__ import annotations

import subprocess
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Dict, List, Mapping, Optional

from deploy_handoff import __version__
from deploy_handoff.core.artifacts.store import ArtifactStore
from deploy_handoff.core.config.errors import ConfigValidationError
from deploy_handoff.core.config.hashing import compute_config_hash
from deploy_handoff.core.config.loader import load_config
from deploy_handoff.core.config.schema import RunConfig, validate_run_config
from deploy_handoff.core.engine.orchestrator import Orchestrator, OrchestratorResult, PlannedUnit
from deploy_handoff.core.pipeline.context import RunContext
from deploy_handoff.core.traceability.manifest import create_manifest, save_manifest
from deploy_handoff.core.units.protocols import DeploymentUnit, FactoryReader
from deploy_handoff.forge.cast import CastFactoryReader
from deploy_handoff.forge.script import build_units
from deploy_handoff.report.summary import write_summary


MANIFEST_FILENAME = "manifest.json"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _resolve(base: Path, value: str) -> Path:
    p = Path(value)
    return p if p.is_absolute() else base / p


def _new_run_id(now: datetime) -> str:
    return f"run-{now.strftime('%Y%m%dT%H%M%SZ')}-{uuid.uuid4().hex[:8]}"


def plan_units(
    config: RunConfig,
    available: Mapping[str, DeploymentUnit],
) -> List[PlannedUnit]:
    """Associa cada unidade declarada à sua implementação, na ordem da config."""
    plan: List[PlannedUnit] = []
    for spec in config.units:
        unit = available.get(spec.id)
        if unit is None:
            raise ConfigValidationError(
                f"unit '{spec.id}' has no script and no in-process implementation"
            )
        plan.append(PlannedUnit(spec=spec, unit=unit))
    return plan


def run_from_config(
    config_path: str,
    *,
    local_path: Optional[str] = None,
    reader: Optional[FactoryReader] = None,
    units: Optional[Mapping[str, DeploymentUnit]] = None,
    runner: Callable[..., "subprocess.CompletedProcess[str]"] = subprocess.run,
    clock: Callable[[], datetime] = _utc_now,
) -> OrchestratorResult:
    """
    Executa uma run completa a partir de um arquivo de configuração.

    `units` complementa (e tem prioridade sobre) as unidades `forge script`
    materializadas a partir da configuração. `reader` substitui o
    `CastFactoryReader` padrão.

    Raises:
        ConfigError: configuração ausente, malformada ou incompleta.
    """
    base_dir = Path(config_path).resolve().parent
    data = load_config(defaults_path=config_path, local_path=local_path)
    config = validate_run_config(data)

    store = ArtifactStore(root=_resolve(base_dir, config.artifacts_root))

    if reader is None:
        reader = CastFactoryReader(
            rpc_url=config.forge.rpc_url,
            binary=config.forge.cast_binary,
            runner=runner,
        )

    available: Dict[str, DeploymentUnit] = dict(build_units(config, store, runner=runner, cwd=str(base_dir)))
    available.update(units or {})
    plan = plan_units(config, available)

    started_at = clock()
    run_id = config.run_id or _new_run_id(started_at)
    output_dir = _resolve(base_dir, config.output_dir) / run_id if config.output_dir else None

    ctx = RunContext(
        run_id=run_id,
        created_at=started_at,
        config=data,
        meta={"config_path": str(config_path), "output_dir": str(output_dir) if output_dir else None},
    )
    manifest = create_manifest(
        run_id=run_id,
        started_at=started_at,
        version=__version__,
        network_id=config.network_id,
        config_hash=compute_config_hash(data),
        upstream_step_id=config.upstream.step_id,
    )

    result = Orchestrator(
        plan=plan,
        ctx=ctx,
        store=store,
        reader=reader,
        upstream=config.upstream,
        network_id=config.network_id,
        manifest=manifest,
        clock=clock,
    ).run()

    if output_dir is not None:
        save_manifest(manifest, output_dir / MANIFEST_FILENAME)
        if result.summary is not None:
            write_summary(result.summary, output_dir)

    return result
