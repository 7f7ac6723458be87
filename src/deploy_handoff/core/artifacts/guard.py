"""
Mode Guard — gate de pré-condição entre localização e parse.

Política (v1):
    - real e dry-run presentes → ModeConflict (com ambos os caminhos e remediação)
    - nenhum presente          → ArtifactNotFound (com os caminhos sondados)
    - exatamente um presente   → retorna sua localização

O guard opera apenas sobre candidatos: nenhum byte do registro é lido antes
que a ambiguidade seja descartada. Não existe preferência entre modos.
"""

from __future__ import annotations

from deploy_handoff.core.errors import artifact_not_found, mode_conflict
from deploy_handoff.core.exceptions import ArtifactNotFound, ModeConflict

from .types import ArtifactCandidates, ArtifactLocation


def select(candidates: ArtifactCandidates) -> ArtifactLocation:
    """
    Seleciona o único registro válido para a chave dos candidatos.

    Args:
        candidates (ArtifactCandidates): resultado de `ArtifactStore.locate`.

    Returns:
        ArtifactLocation: localização do registro único.

    Raises:
        ModeConflict: se registros real e dry-run coexistem.
        ArtifactNotFound: se nenhum registro existe.
    """
    if candidates.real is not None and candidates.dry_run is not None:
        payload = mode_conflict(
            step_id=candidates.step_id,
            network_id=candidates.network_id,
            real_path=str(candidates.real),
            dry_run_path=str(candidates.dry_run),
        )
        if candidates.history:
            payload.details["history"] = dict(candidates.history)
        raise payload.as_exception(ModeConflict)

    present = candidates.present()
    if not present:
        raise artifact_not_found(
            step_id=candidates.step_id,
            network_id=candidates.network_id,
            probed_paths=[str(p) for p in candidates.probed],
        ).as_exception(ArtifactNotFound)

    return present[0]
