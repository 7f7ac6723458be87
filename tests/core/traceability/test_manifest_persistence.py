# tests/core/traceability/test_manifest_persistence.py
"""Testes de persistência do Manifest (JSON determinístico)."""

from datetime import datetime, timezone

import pytest

try:
    from deploy_handoff.core.traceability import (
        create_manifest,
        load_manifest,
        save_manifest,
        step_started,
    )
except Exception as e:  # noqa: BLE001
    create_manifest = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(f"Missing manifest persistence API. Import error: {_IMPORT_ERR}")


def test_save_and_load_round_trip(tmp_path):
    _require_imports()
    ts = datetime(2026, 1, 16, tzinfo=timezone.utc)
    m = create_manifest(
        run_id="run-001",
        started_at=ts,
        version="0.1.0",
        network_id=11155111,
        config_hash="h",
        upstream_step_id="DeployFactory.s.sol",
    )
    step_started(m, step_id="approver", ts=ts)
    path = tmp_path / "nested" / "manifest.json"

    save_manifest(m, path)
    first = path.read_text(encoding="utf-8")
    save_manifest(load_manifest(path), path)

    assert load_manifest(path).to_dict() == m.to_dict()
    assert path.read_text(encoding="utf-8") == first
