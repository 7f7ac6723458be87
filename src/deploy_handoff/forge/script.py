"""
Unidade de deployment baseada em `forge script` (Foundry).

Cada unidade executa um script Solidity como processo independente:

    forge script <script> [--rpc-url <url>] [--broadcast]

O ambiente do subprocesso é uma cópia do ambiente do processo pai sobreposta
pelos valores do EnvironmentContext; `os.environ` nunca é alterado.

Após sucesso, a unidade lê o próprio registro no store:

    <root>/<nome do script>/<network_id>/[dry-run/]run-latest.json

e reporta os componentes criados (last-match-wins por nome).

Invariantes:
    - Código de saída != 0 é falha, com a cauda da saída de erro como causa bruta
    - Um registro que não foi (re)escrito por esta invocação é falha: nunca se
      reporta o resultado de uma execução anterior
"""

from __future__ import annotations

import os
import re
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional

from deploy_handoff.core.artifacts.reader import extract_address, parse_artifact
from deploy_handoff.core.artifacts.store import ArtifactStore
from deploy_handoff.core.artifacts.types import ProvenanceMode
from deploy_handoff.core.config.schema import RunConfig
from deploy_handoff.core.units.environment import EnvironmentContext
from deploy_handoff.core.units.outcome import UnitOutcome


Runner = Callable[..., "subprocess.CompletedProcess[str]"]

STDERR_TAIL_LINES = 20

# `script/Deploy.s.sol:DeployScript` seleciona o contrato; o registro fica sob `Deploy.s.sol`
_CONTRACT_SUFFIX_RE = re.compile(r":[A-Za-z_$][A-Za-z0-9_$]*$")


def _tail(text: str, lines: int = STDERR_TAIL_LINES) -> str:
    return "\n".join(text.strip().splitlines()[-lines:])


def script_step_id(script: str) -> str:
    return Path(_CONTRACT_SUFFIX_RE.sub("", script)).name


def _mtime_ns(path: Path) -> Optional[int]:
    try:
        return path.stat().st_mtime_ns
    except FileNotFoundError:
        return None


@dataclass
class ForgeScriptUnit:
    """Unidade configurada por dados: script, modo e RPC; sem hierarquia de herança."""

    id: str
    script: str
    store: ArtifactStore
    broadcast: bool = False
    rpc_url: Optional[str] = None
    binary: str = "forge"
    cwd: Optional[str] = None
    runner: Runner = field(default=subprocess.run, repr=False)

    @property
    def mode(self) -> ProvenanceMode:
        return ProvenanceMode.REAL if self.broadcast else ProvenanceMode.DRY_RUN

    def command(self) -> List[str]:
        cmd = [self.binary, "script", self.script]
        if self.rpc_url:
            cmd += ["--rpc-url", self.rpc_url]
        if self.broadcast:
            cmd.append("--broadcast")
        return cmd

    def record_path(self, network_id: int) -> Path:
        return self.store.path_for(script_step_id(self.script), network_id, self.mode)

    def invoke(self, env: EnvironmentContext) -> UnitOutcome:
        record = self.record_path(env.dependency.network_id)
        before = _mtime_ns(record)

        completed = self.runner(  # noqa: S603
            self.command(),
            cwd=self.cwd,
            env=env.as_env(dict(os.environ)),
            text=True,
            capture_output=True,
            check=False,
        )
        if completed.returncode != 0:
            detail = _tail(completed.stderr or completed.stdout or "")
            return UnitOutcome.failed(detail or f"forge script exited with code {completed.returncode}")

        after = _mtime_ns(record)
        if after is None:
            return UnitOutcome.failed(f"forge script succeeded but wrote no record at {record}")
        if before is not None and after == before:
            return UnitOutcome.failed(f"record at {record} was not updated by this invocation")

        artifact = parse_artifact(record, provenance=self.mode)
        handles: Dict[str, str] = {}
        for name in dict.fromkeys(artifact.component_names()):
            handles[name] = extract_address(artifact, name)
        return UnitOutcome.success(handles)


def build_units(
    config: RunConfig,
    store: ArtifactStore,
    *,
    runner: Runner = subprocess.run,
    cwd: Optional[str] = None,
) -> Dict[str, ForgeScriptUnit]:
    """
    Materializa as unidades declaradas na configuração, por id e em ordem.

    Unidades sem `script` não podem ser materializadas aqui: devem ser
    fornecidas pelo chamador (ex.: `CallableUnit`).
    """
    units: Dict[str, ForgeScriptUnit] = {}
    for spec in config.units:
        if spec.script is None:
            continue
        units[spec.id] = ForgeScriptUnit(
            id=spec.id,
            script=spec.script,
            store=store,
            broadcast=spec.broadcast,
            rpc_url=config.forge.rpc_url,
            binary=config.forge.binary,
            cwd=cwd,
            runner=runner,
        )
    return units
