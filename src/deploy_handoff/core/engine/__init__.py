# src/deploy_handoff/core/engine/__init__.py
"""
Engine do Deploy Handoff: o orquestrador de etapas.

- orchestrator → máquina de estados INIT → RESOLVE_UPSTREAM → INVOKE_UNIT(k)
  → RECORD_OUTCOME(k) → SUMMARIZE → DONE, com FAILED em qualquer erro.

Não existe planner: as unidades rodam na ordem declarada.
"""
