# tests/core/pipeline/test_run_context.py
"""
Testes do RunContext: valores intermediários, log estruturado e warnings.

Decisões arquiteturais:
    - O RunContext pertence ao orquestrador; unidades não o recebem
    - Eventos de log sempre carregam run_id e step_id
"""

import pytest

try:
    from deploy_handoff.core.pipeline.context import DEPENDENCY_ARTIFACT_KEY
except Exception as e:  # noqa: BLE001
    DEPENDENCY_ARTIFACT_KEY = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(f"Missing RunContext (core/pipeline/context.py). Import error: {_IMPORT_ERR}")


def test_artifacts_are_keyed_explicitly(dummy_ctx, resolved_dependency):
    _require_imports()
    assert not dummy_ctx.has_artifact(DEPENDENCY_ARTIFACT_KEY)
    with pytest.raises(KeyError):
        dummy_ctx.get_artifact(DEPENDENCY_ARTIFACT_KEY)

    dummy_ctx.set_artifact(DEPENDENCY_ARTIFACT_KEY, resolved_dependency)

    assert dummy_ctx.get_artifact(DEPENDENCY_ARTIFACT_KEY) is resolved_dependency


def test_log_events_carry_run_and_step_ids(dummy_ctx):
    _require_imports()
    dummy_ctx.log(step_id="orchestrator", level="info", message="state -> init", state="init")
    dummy_ctx.log(step_id="approver", level="error", message="boom")

    assert [e["step_id"] for e in dummy_ctx.events] == ["orchestrator", "approver"]
    assert all(e["run_id"] == "run-test-001" for e in dummy_ctx.events)
    assert dummy_ctx.events[0]["state"] == "init"
    assert dummy_ctx.events[1]["level"] == "error"
    assert "timestamp" in dummy_ctx.events[0]


def test_warnings_grouped_by_step(dummy_ctx):
    _require_imports()
    dummy_ctx.add_warning(step_id="approver", message="w1")
    dummy_ctx.add_warning(step_id="approver", message="w2")
    dummy_ctx.add_warning(step_id="curator", message="w3")

    assert dummy_ctx.warnings == {"approver": ["w1", "w2"], "curator": ["w3"]}


def test_events_can_be_filtered_by_step(dummy_ctx):
    _require_imports()
    dummy_ctx.log(step_id="orchestrator", level="info", message="a")
    dummy_ctx.log(step_id="approver", level="info", message="b")
    dummy_ctx.log(step_id="orchestrator", level="info", message="c")

    assert [e["message"] for e in dummy_ctx.events_for("orchestrator")] == ["a", "c"]
