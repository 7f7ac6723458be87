# tests/core/pipeline/test_unit_registry.py
"""
Testes do UnitRegistry.

Invariantes:
    - Identificadores duplicados são erro fatal de configuração
    - A ordem de registro é a ordem de invocação
"""

import pytest

try:
    from deploy_handoff.core.pipeline.registry import DuplicateUnitIdError, UnitRegistry
    from deploy_handoff.core.units.inprocess import CallableUnit
except Exception as e:  # noqa: BLE001
    UnitRegistry = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(f"Missing UnitRegistry (core/pipeline/registry.py). Import error: {_IMPORT_ERR}")


def test_registry_preserves_declaration_order():
    _require_imports()
    reg = UnitRegistry()
    for uid in ("curator", "approver", "treasury"):
        reg.add(CallableUnit(uid, lambda env: {}))

    assert [u.id for u in reg.list()] == ["curator", "approver", "treasury"]
    assert len(reg) == 3
    assert reg.get("approver").id == "approver"


def test_duplicate_unit_id_raises():
    _require_imports()
    reg = UnitRegistry()
    reg.add(CallableUnit("approver", lambda env: {}))

    with pytest.raises(DuplicateUnitIdError):
        reg.add(CallableUnit("approver", lambda env: {}))


@pytest.mark.parametrize("bad_id", ["", "   ", None])
def test_invalid_unit_id_raises(bad_id):
    _require_imports()
    with pytest.raises(ValueError):
        UnitRegistry().add(CallableUnit(bad_id, lambda env: {}))
