# tests/core/config/test_config_merge.py
"""
Testes do deep-merge de configuração.

Invariantes:
    - dict + dict → merge recursivo
    - listas são substituídas (a sequência de unidades nunca é mesclada)
    - troca de tipo é conflito estrutural
    - entradas nunca são mutadas
"""

import copy

import pytest

try:
    from deploy_handoff.core.config.merge import deep_merge
    from deploy_handoff.core.config.errors import ConfigTypeConflictError
except Exception as e:  # noqa: BLE001
    deep_merge = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(f"Missing deep_merge (core/config/merge.py). Import error: {_IMPORT_ERR}")


def test_nested_dicts_are_merged():
    _require_imports()
    base = {"run": {"network_id": 1, "artifacts_root": "broadcast"}}
    override = {"run": {"output_dir": "out"}}

    assert deep_merge(base, override) == {
        "run": {"network_id": 1, "artifacts_root": "broadcast", "output_dir": "out"}
    }


def test_unit_list_is_replaced_not_merged():
    _require_imports()
    base = {"units": [{"id": "approver"}, {"id": "curator"}]}
    override = {"units": [{"id": "curator"}]}

    assert deep_merge(base, override)["units"] == [{"id": "curator"}]


def test_type_conflict_raises():
    _require_imports()
    with pytest.raises(ConfigTypeConflictError):
        deep_merge({"run": {"network_id": 1}}, {"run": {"network_id": "sepolia"}})


def test_none_is_treated_as_undeclared():
    _require_imports()
    assert deep_merge({"forge": {"rpc_url": None}}, {"forge": {"rpc_url": "http://x"}}) == {
        "forge": {"rpc_url": "http://x"}
    }


def test_inputs_are_not_mutated():
    _require_imports()
    base = {"run": {"network_id": 1}, "units": [{"id": "a"}]}
    override = {"run": {"output_dir": "out"}}
    base_copy, override_copy = copy.deepcopy(base), copy.deepcopy(override)

    out = deep_merge(base, override)
    out["run"]["network_id"] = 2

    assert base == base_copy
    assert override == override_copy


def test_type_conflict_names_the_dotted_key():
    _require_imports()
    with pytest.raises(ConfigTypeConflictError, match=r"run\.network_id"):
        deep_merge({"run": {"network_id": 1}}, {"run": {"network_id": "sepolia"}})
