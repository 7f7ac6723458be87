# tests/core/units/test_callable_unit.py
"""Testes do CallableUnit e da conformidade estrutural com DeploymentUnit."""

import pytest

try:
    from deploy_handoff.core.pipeline.types import StepStatus
    from deploy_handoff.core.units.environment import EnvironmentContext
    from deploy_handoff.core.units.inprocess import CallableUnit
    from deploy_handoff.core.units.outcome import UnitOutcome
    from deploy_handoff.core.units.protocols import DeploymentUnit, FactoryReader
except Exception as e:  # noqa: BLE001
    CallableUnit = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(f"Missing in-process unit (core/units/inprocess.py). Import error: {_IMPORT_ERR}")


def _env(dep):
    return EnvironmentContext(unit_id="u", config_ref="c", dependency=dep)


def test_mapping_result_becomes_success(resolved_dependency):
    _require_imports()
    unit = CallableUnit("u", lambda env: {"Approver": "0x" + "1" * 40})

    outcome = unit.invoke(_env(resolved_dependency))

    assert outcome.ok
    assert outcome.status == StepStatus.SUCCESS
    assert dict(outcome.component_handles) == {"Approver": "0x" + "1" * 40}


def test_explicit_outcome_is_passed_through(resolved_dependency):
    _require_imports()
    failed = UnitOutcome.failed("insufficient funds for gas")

    outcome = CallableUnit("u", lambda env: failed).invoke(_env(resolved_dependency))

    assert outcome is failed
    assert not outcome.ok


def test_unexpected_return_type_raises(resolved_dependency):
    _require_imports()
    with pytest.raises(TypeError):
        CallableUnit("u", lambda env: "0xabc").invoke(_env(resolved_dependency))


def test_protocol_conformance_is_structural():
    _require_imports()
    from tests._support import FakeFactoryReader

    assert isinstance(CallableUnit("u", lambda env: {}), DeploymentUnit)
    assert isinstance(FakeFactoryReader({}), FactoryReader)
