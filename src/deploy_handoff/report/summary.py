"""
Resumo final de uma run concluída.

O resumo é produzido apenas quando a run atinge DONE e enumera, por
unidade, os componentes criados com seus endereços, além dos endereços
upstream resolvidos para referência cruzada.

Duas saídas são geradas:
    - summary.md   → leitura humana (seções Markdown determinísticas)
    - summary.json → leitura por máquina, no mesmo layout de registro aceito
                     por `parse_artifact` (chain / timestamp / transactions)

Decisões arquiteturais:
    - Componentes com o mesmo nome em unidades diferentes aparecem todos em
      `transactions`; quem consumir o resumo via `extract_address` recebe o
      último (last-match-wins), coerente com a leitura de registros upstream
    - Endereços são preservados exatamente como reportados

Limites explícitos:
    - Não é produzido para runs com falha (o Manifest cobre esse caso)
    - Não consulta a rede
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Sequence, Tuple

from deploy_handoff.core.artifacts.types import ArtifactLocation, ResolvedDependency
from deploy_handoff.core.pipeline.types import StepRecord


SUMMARY_MD = "summary.md"
SUMMARY_JSON = "summary.json"


@dataclass(frozen=True)
class CreatedComponent:
    unit_id: str
    component_name: str
    address: str


@dataclass(frozen=True)
class SummaryReport:
    run_id: str
    network_id: int
    upstream: ArtifactLocation
    dependency: ResolvedDependency
    records: Tuple[StepRecord, ...]
    generated_at: datetime

    def created(self) -> List[CreatedComponent]:
        out: List[CreatedComponent] = []
        for r in self.records:
            for name, address in r.component_handles.items():
                out.append(CreatedComponent(unit_id=r.step_id, component_name=name, address=address))
        return out

    def to_artifact_dict(self) -> Dict[str, Any]:
        ts = self.generated_at
        if ts.tzinfo is None:
            ts = ts.replace(tzinfo=timezone.utc)
        return {
            "step_id": self.run_id,
            "chain": self.network_id,
            "timestamp": int(ts.timestamp()),
            "transactions": [
                {
                    "transactionType": "CREATE",
                    "contractName": c.component_name,
                    "contractAddress": c.address,
                    "unit": c.unit_id,
                }
                for c in self.created()
            ],
            "upstream": {
                "step_id": self.upstream.step_id,
                "path": str(self.upstream.path),
                "provenance": self.upstream.mode.value,
            },
            "resolved": self.dependency.to_dict(),
            "steps": [r.to_dict() for r in self.records],
        }

    def to_markdown(self) -> str:
        dep = self.dependency
        lines: List[str] = [
            f"# Deploy Handoff: run `{self.run_id}`",
            "",
            f"- network_id: `{self.network_id}`",
            f"- generated_at: `{self.generated_at.isoformat()}`",
            "",
            "## Upstream",
            "",
            f"- step_id: `{self.upstream.step_id}`",
            f"- provenance: `{self.upstream.mode.value}`",
            f"- path: `{self.upstream.path}`",
            "",
            "| name | value |",
            "|---|---|",
            f"| factory | `{dep.factory_address}` |",
            f"| primary | `{dep.primary_component_address}` |",
        ]
        for name, addr in dep.shared_reference_addresses.items():
            lines.append(f"| shared:{name} | `{addr}` |")
        for name, value in dep.opaque_parameter_ids.items():
            lines.append(f"| param:{name} | `{value}` |")

        lines += ["", "## Units", ""]
        for r in self.records:
            lines.append(f"### {r.step_id}")
            lines.append("")
            config_ref = r.params.get("config_ref")
            if config_ref:
                lines.append(f"- config_ref: `{config_ref}`")
            for k, v in (r.params.get("params") or {}).items():
                lines.append(f"- {k}: `{v}`")
            lines.append("")
            if r.component_handles:
                lines += ["| component | address |", "|---|---|"]
                for name, addr in r.component_handles.items():
                    lines.append(f"| {name} | `{addr}` |")
            else:
                lines.append("_no components reported_")
            lines.append("")

        return "\n".join(lines).rstrip() + "\n"


def build_summary(
    *,
    run_id: str,
    network_id: int,
    upstream: ArtifactLocation,
    dependency: ResolvedDependency,
    records: Sequence[StepRecord],
    generated_at: datetime,
) -> SummaryReport:
    return SummaryReport(
        run_id=run_id,
        network_id=network_id,
        upstream=upstream,
        dependency=dependency,
        records=tuple(records),
        generated_at=generated_at,
    )


def write_summary(report: SummaryReport, output_dir: Path) -> Dict[str, Path]:
    """Persiste summary.md e summary.json em `output_dir` (criado se necessário)."""
    output_dir.mkdir(parents=True, exist_ok=True)

    md_path = output_dir / SUMMARY_MD
    json_path = output_dir / SUMMARY_JSON

    md_path.write_text(report.to_markdown(), encoding="utf-8")
    json_path.write_text(
        json.dumps(report.to_artifact_dict(), ensure_ascii=False, indent=2, sort_keys=True),
        encoding="utf-8",
    )
    return {"markdown": md_path, "json": json_path}
