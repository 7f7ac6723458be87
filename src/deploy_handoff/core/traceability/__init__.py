# src/deploy_handoff/core/traceability/__init__.py
"""
Pacote de rastreabilidade do Deploy Handoff — Manifest da run.

API pública exposta:
    - RunManifest       → estrutura do Manifest
    - create_manifest   → criação explícita do Manifest
    - add_event         → registro explícito no Event Log
    - upstream_resolved → registro upstream aceito + dependência
    - step_started      → início de invocação de unidade
    - step_finished     → conclusão bem-sucedida de unidade
    - step_failed       → falha de unidade
    - run_finished      → estado terminal da run
    - save_manifest     → persistência em JSON
    - load_manifest     → restauração determinística

Invariantes:
    - O Manifest inicia com `steps` e `events` vazios
    - Eventos nunca são reordenados
"""

from .manifest import (
    RunManifest,
    create_manifest,
    add_event,
    upstream_resolved,
    step_started,
    step_finished,
    step_failed,
    run_finished,
    save_manifest,
    load_manifest,
)

__all__ = [
    "RunManifest",
    "create_manifest",
    "add_event",
    "upstream_resolved",
    "step_started",
    "step_finished",
    "step_failed",
    "run_finished",
    "save_manifest",
    "load_manifest",
]
