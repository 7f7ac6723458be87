# tests/core/config/test_config_hashing.py
"""Testes do hash canônico da configuração (registrado no Manifest)."""

import pytest

try:
    from deploy_handoff.core.config.hashing import compute_config_hash
except Exception as e:  # noqa: BLE001
    compute_config_hash = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(f"Missing compute_config_hash (core/config/hashing.py). Import error: {_IMPORT_ERR}")


def test_hash_is_independent_of_key_order():
    _require_imports()
    a = {"run": {"network_id": 1, "artifacts_root": "broadcast"}, "units": []}
    b = {"units": [], "run": {"artifacts_root": "broadcast", "network_id": 1}}

    assert compute_config_hash(a) == compute_config_hash(b)
    assert len(compute_config_hash(a)) == 64


def test_hash_changes_with_values():
    _require_imports()
    a = {"units": [{"id": "approver", "params": {"voting_period": 259200}}]}
    b = {"units": [{"id": "approver", "params": {"voting_period": 86400}}]}

    assert compute_config_hash(a) != compute_config_hash(b)


def test_non_dict_raises_type_error():
    _require_imports()
    with pytest.raises(TypeError):
        compute_config_hash(["not", "a", "dict"])  # type: ignore[arg-type]


def test_operator_local_keys_do_not_change_hash():
    _require_imports()
    a = {"run": {"network_id": 1, "output_dir": "out-a", "run_id": "r1"}, "forge": {"binary": "forge"}}
    b = {
        "run": {"network_id": 1, "output_dir": "out-b", "run_id": "r2"},
        "forge": {"binary": "forge", "rpc_url": "http://127.0.0.1:8545"},
    }

    assert compute_config_hash(a) == compute_config_hash(b)
    assert a["run"]["run_id"] == "r1"
