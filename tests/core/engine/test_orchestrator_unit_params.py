# tests/core/engine/test_orchestrator_unit_params.py
"""
Testes de parâmetros próprios por unidade.

Cenário: "approver" configurado com 259200 segundos e "curator" com 86400;
após a run completa, cada StepRecord retém exatamente o seu valor.
"""

import pytest

try:
    from deploy_handoff.core.units.inprocess import CallableUnit
except Exception as e:  # noqa: BLE001
    CallableUnit = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(f"Missing in-process unit (core/units/inprocess.py). Import error: {_IMPORT_ERR}")


def test_distinct_unit_params_are_retained(upstream_record, make_orchestrator):
    _require_imports()
    observed = {}

    def unit(unit_id):
        def fn(env):
            observed[unit_id] = (env.get("UNIT_VOTING_PERIOD"), env.get("DEPLOY_CONFIG"))
            return {unit_id.capitalize(): "0x" + "1" * 40}

        return CallableUnit(unit_id, fn)

    result = make_orchestrator(
        [unit("approver"), unit("curator")],
        params={"approver": {"voting_period": 259200}, "curator": {"voting_period": 86400}},
    ).run()

    assert result.ok
    assert result.record_for("approver").params["params"] == {"voting_period": 259200}
    assert result.record_for("curator").params["params"] == {"voting_period": 86400}
    assert result.record_for("approver").params["config_ref"] == "config/approver.json"
    assert observed == {
        "approver": ("259200", "config/approver.json"),
        "curator": ("86400", "config/curator.json"),
    }
