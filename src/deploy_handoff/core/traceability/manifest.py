"""
Manifest da run — rastreabilidade forense do orquestrador.

O Manifest consolida, de forma determinística e auditável:
    - metadados da run (run_id, started_at, versão, rede alvo)
    - entradas (hash da configuração, etapa upstream e registro resolvido)
    - estado incremental de cada unidade
    - Event Log ordenado de eventos explícitos

Como deployments não são reversíveis, o Manifest é a evidência de quais
unidades chegaram a executar quando uma run é interrompida.

Decisões arquiteturais:
    - UTC é o timezone canônico para todos os timestamps
    - O formato de persistência é JSON determinístico (chaves ordenadas)
    - Nenhum evento é emitido implicitamente
    - A ordem do Event Log é a ordem de chamada

Limites explícitos:
    - Não executa a run
    - Não decide políticas de execução
    - Não é usado como entrada de resolução
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional


def _ensure_tzaware_utc(dt: datetime) -> datetime:
    """Timestamps sem timezone são assumidos como UTC; os demais são convertidos."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _iso(dt: datetime) -> str:
    return _ensure_tzaware_utc(dt).isoformat()


def _ms_between(start: datetime, end: datetime) -> int:
    s = _ensure_tzaware_utc(start)
    e = _ensure_tzaware_utc(end)
    return max(0, int((e - s).total_seconds() * 1000))


@dataclass
class RunManifest:
    """
    Registro forense de uma run do orquestrador.

    Campos principais:
        - run: metadados da execução
        - inputs: configuração e upstream consumidos
        - steps: estado de cada unidade, indexado por step_id
        - events: Event Log ordenado
    """

    run: Dict[str, Any]
    inputs: Dict[str, Any]
    steps: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    events: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "run": dict(self.run),
            "inputs": dict(self.inputs),
            "steps": {k: dict(v) for k, v in self.steps.items()},
            "events": [dict(e) for e in self.events],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RunManifest":
        return cls(
            run=dict(data.get("run", {})),
            inputs=dict(data.get("inputs", {})),
            steps={k: dict(v) for k, v in (data.get("steps", {}) or {}).items()},
            events=[dict(e) for e in (data.get("events", []) or [])],
        )


def create_manifest(
    *,
    run_id: str,
    started_at: datetime,
    version: str,
    network_id: int,
    config_hash: str,
    upstream_step_id: str,
) -> RunManifest:
    """
    Cria o Manifest inicial de uma run.

    Esta função **não emite eventos**: o Event Log inicia vazio e só é
    preenchido por chamadas explícitas (`add_event`, `step_*`, `run_*`).
    """
    started_at = _ensure_tzaware_utc(started_at)

    return RunManifest(
        run={
            "run_id": run_id,
            "started_at": _iso(started_at),
            "version": version,
            "network_id": network_id,
            "status": "running",
        },
        inputs={
            "config_hash": config_hash,
            "upstream_step_id": upstream_step_id,
        },
    )


def add_event(
    manifest: RunManifest,
    *,
    event_type: str,
    ts: datetime,
    step_id: Optional[str] = None,
    payload: Optional[Dict[str, Any]] = None,
) -> None:
    """Adiciona exatamente um evento ao Event Log, preservando a ordem de chamada."""
    ev: Dict[str, Any] = {"event_type": event_type, "timestamp": _iso(ts)}
    if step_id is not None:
        ev["step_id"] = step_id
    if payload is not None:
        ev["payload"] = payload
    manifest.events.append(ev)


def upstream_resolved(
    manifest: RunManifest,
    *,
    ts: datetime,
    path: str,
    provenance: str,
    dependency: Dict[str, Any],
) -> None:
    """Registra o registro upstream aceito e a dependência derivada dele."""
    manifest.inputs["upstream_path"] = path
    manifest.inputs["upstream_provenance"] = provenance
    manifest.inputs["dependency"] = dict(dependency)
    add_event(
        manifest,
        event_type="upstream_resolved",
        ts=ts,
        payload={"path": path, "provenance": provenance},
    )


def step_started(manifest: RunManifest, *, step_id: str, ts: datetime) -> None:
    """Marca a unidade como `running` e registra `step_started`."""
    manifest.steps.setdefault(step_id, {})
    manifest.steps[step_id].update(
        {
            "step_id": step_id,
            "status": "running",
            "started_at": _iso(ts),
        }
    )
    add_event(manifest, event_type="step_started", ts=ts, step_id=step_id)


def step_finished(
    manifest: RunManifest,
    *,
    step_id: str,
    ts: datetime,
    result: Dict[str, Any],
) -> None:
    """
    Registra a conclusão bem-sucedida de uma unidade.

    `result` segue `StepRecord.to_dict()`: component_handles e params
    são copiados para o estado da unidade.
    """
    s = manifest.steps.setdefault(step_id, {"step_id": step_id})
    started_iso = s.get("started_at")
    started_dt = datetime.fromisoformat(started_iso) if started_iso else ts

    s.update(
        {
            "status": result.get("status", "success"),
            "finished_at": _iso(ts),
            "duration_ms": _ms_between(started_dt, ts),
            "component_handles": dict(result.get("component_handles", {}) or {}),
            "params": dict(result.get("params", {}) or {}),
        }
    )

    add_event(
        manifest,
        event_type="step_finished",
        ts=ts,
        step_id=step_id,
        payload={"status": s["status"], "duration_ms": s["duration_ms"]},
    )


def step_failed(
    manifest: RunManifest,
    *,
    step_id: str,
    ts: datetime,
    error: str,
) -> None:
    """Marca a unidade como `failed` com a causa bruta e registra `step_failed`."""
    s = manifest.steps.setdefault(step_id, {"step_id": step_id})
    s.update(
        {
            "status": "failed",
            "finished_at": _iso(ts),
            "error": error,
        }
    )
    add_event(manifest, event_type="step_failed", ts=ts, step_id=step_id, payload={"error": error})


def run_finished(
    manifest: RunManifest,
    *,
    ts: datetime,
    status: str,
    error: Optional[Dict[str, Any]] = None,
) -> None:
    """Fecha a run com o estado terminal (`done` ou `failed`)."""
    manifest.run["status"] = status
    manifest.run["finished_at"] = _iso(ts)
    payload: Dict[str, Any] = {"status": status}
    if error is not None:
        manifest.run["error"] = dict(error)
        payload["error_type"] = error.get("type")
    add_event(manifest, event_type="run_finished", ts=ts, payload=payload)


def save_manifest(manifest: RunManifest, path: Path) -> None:
    """Persiste o Manifest em JSON determinístico, criando diretórios intermediários."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(manifest.to_dict(), ensure_ascii=False, indent=2, sort_keys=True),
        encoding="utf-8",
    )


def load_manifest(path: Path) -> RunManifest:
    """Restaura um Manifest persistido (propaga erros de I/O e JSON)."""
    data = json.loads(path.read_text(encoding="utf-8"))
    return RunManifest.from_dict(data)
