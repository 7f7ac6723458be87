"""Artifact store — localização de registros persistidos de deployment (v1).

Layout canônico (relativo a `artifacts_root`):

- real:    <root>/<step_id>/<network_id>/run-latest.json
- dry-run: <root>/<step_id>/<network_id>/dry-run/run-latest.json

Histórico (produzido pelo broadcaster a cada execução):

- <root>/<step_id>/<network_id>/[dry-run/]run-<timestamp>.json

Decisões (v1):
- `locate` é uma sonda somente leitura: não parseia e não escolhe modo.
- Ausência é resultado normal (candidatos vazios), nunca exceção.
- `StoreUnavailable` apenas quando o filesystem não pode ser sondado.

Limites explícitos:
- Não trava o store: runs concorrentes sobre a mesma chave não são suportadas.
- Não usa o histórico para resolução (apenas diagnóstico).
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Dict, List, Union

from deploy_handoff.core.errors import store_unavailable
from deploy_handoff.core.exceptions import StoreUnavailable

from .types import ArtifactCandidates, ProvenanceMode


LATEST_FILENAME = "run-latest.json"
DRY_RUN_SEGMENT = "dry-run"

_HISTORY_RE = re.compile(r"^run-(\d+)\.json$")


class ArtifactStore:
    """Store canônica (v1) para localizar registros por (step, network, modo)."""

    def __init__(self, *, root: Union[str, Path]):
        self.root = Path(root)

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------
    def key_dir(self, step_id: str, network_id: int) -> Path:
        return self.root / step_id / str(network_id)

    def mode_dir(self, step_id: str, network_id: int, mode: ProvenanceMode) -> Path:
        base = self.key_dir(step_id, network_id)
        if mode is ProvenanceMode.DRY_RUN:
            return base / DRY_RUN_SEGMENT
        return base

    def path_for(self, step_id: str, network_id: int, mode: ProvenanceMode) -> Path:
        """Caminho determinístico do registro mais recente para o modo."""
        return self.mode_dir(step_id, network_id, mode) / LATEST_FILENAME

    # ------------------------------------------------------------------
    # Probe
    # ------------------------------------------------------------------
    def _exists(self, path: Path) -> bool:
        try:
            return path.is_file()
        except OSError as e:
            raise store_unavailable(path=str(path), exc_message=str(e)).as_exception(StoreUnavailable) from e

    def locate(self, step_id: str, network_id: int) -> ArtifactCandidates:
        """Retorna os candidatos existentes para a chave, sem parse.

        Raises:
            StoreUnavailable: se a raiz não é um diretório ou não pode ser sondada.
        """
        try:
            if self.root.exists() and not self.root.is_dir():
                raise store_unavailable(
                    path=str(self.root),
                    exc_message="artifacts_root is not a directory",
                ).as_exception(StoreUnavailable)
        except OSError as e:
            raise store_unavailable(path=str(self.root), exc_message=str(e)).as_exception(StoreUnavailable) from e

        real_path = self.path_for(step_id, network_id, ProvenanceMode.REAL)
        dry_path = self.path_for(step_id, network_id, ProvenanceMode.DRY_RUN)

        history: Dict[str, int] = {}
        for mode in (ProvenanceMode.REAL, ProvenanceMode.DRY_RUN):
            history[mode.value] = len(self.list_runs(step_id, network_id, mode))

        return ArtifactCandidates(
            step_id=step_id,
            network_id=network_id,
            real=real_path if self._exists(real_path) else None,
            dry_run=dry_path if self._exists(dry_path) else None,
            probed=(real_path, dry_path),
            history=history,
        )

    def list_runs(self, step_id: str, network_id: int, mode: ProvenanceMode) -> List[Path]:
        """Lista os registros históricos (run-<ts>.json), mais recente primeiro."""
        directory = self.mode_dir(step_id, network_id, mode)
        try:
            if not directory.is_dir():
                return []
            entries = []
            for p in directory.iterdir():
                m = _HISTORY_RE.match(p.name)
                if m and p.is_file():
                    entries.append((int(m.group(1)), p))
        except OSError as e:
            raise store_unavailable(path=str(directory), exc_message=str(e)).as_exception(StoreUnavailable) from e

        entries.sort(key=lambda item: item[0], reverse=True)
        return [p for _, p in entries]


__all__ = ["ArtifactStore", "LATEST_FILENAME", "DRY_RUN_SEGMENT"]
