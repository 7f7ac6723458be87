# tests/core/artifacts/test_extract_dependency.py
"""
Testes de extract_dependency e do gate ensure_non_zero.

extract_dependency é uma chamada de fronteira: as leituras passam pelo
FactoryReader (aqui, um fake em memória). Falhas de leitura, valores zero
e valores de tipo errado viram CollaboratorCallFailed.
"""

import pytest

from tests._support import (
    FACTORY_ADDR,
    GOVERNOR_ADDR,
    NETWORK_ID,
    ORACLE_ADDR,
    VOTING_TOKEN_ID,
    FakeFactoryReader,
    default_reader_values,
    tx,
    write_broadcast,
)

try:
    from deploy_handoff.core.artifacts.reader import (
        DependencyAccessors,
        ensure_non_zero,
        extract_dependency,
        parse_artifact,
    )
    from deploy_handoff.core.artifacts.types import ZERO_ADDRESS, ResolvedDependency
    from deploy_handoff.core.exceptions import CollaboratorCallFailed, ZeroAddressResolved
except Exception as e:  # noqa: BLE001
    extract_dependency = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(f"Missing extract_dependency (core/artifacts/reader.py). Import error: {_IMPORT_ERR}")


def _accessors():
    return DependencyAccessors(
        primary="governor()(address)",
        shared_references={"oracle": "oracle()(address)"},
        opaque_parameters={"voting_token_id": "votingTokenId()(uint256)"},
    )


@pytest.fixture
def artifact(broadcast_root):
    return parse_artifact(write_broadcast(broadcast_root, "1", NETWORK_ID, [tx("GovernanceFactory", FACTORY_ADDR)]))


def test_dependency_is_built_from_factory_reads(artifact):
    _require_imports()
    reader = FakeFactoryReader(default_reader_values())

    dep = extract_dependency(artifact, FACTORY_ADDR, reader=reader, accessors=_accessors())

    assert dep.network_id == NETWORK_ID
    assert dep.factory_address == FACTORY_ADDR
    assert dep.primary_component_address == GOVERNOR_ADDR
    assert dict(dep.shared_reference_addresses) == {"oracle": ORACLE_ADDR}
    assert dict(dep.opaque_parameter_ids) == {"voting_token_id": VOTING_TOKEN_ID}
    assert all(call[1] == FACTORY_ADDR for call in reader.calls)


def test_dependency_mappings_are_read_only(artifact):
    _require_imports()
    dep = extract_dependency(
        artifact, FACTORY_ADDR, reader=FakeFactoryReader(default_reader_values()), accessors=_accessors()
    )

    with pytest.raises(TypeError):
        dep.shared_reference_addresses["oracle"] = ZERO_ADDRESS  # type: ignore[index]


def test_failed_read_raises_collaborator_call_failed(artifact):
    _require_imports()
    values = default_reader_values()
    del values[(FACTORY_ADDR, "oracle()(address)")]

    with pytest.raises(CollaboratorCallFailed) as exc:
        extract_dependency(artifact, FACTORY_ADDR, reader=FakeFactoryReader(values), accessors=_accessors())

    assert exc.value.details["signature"] == "oracle()(address)"
    assert "execution reverted" in exc.value.details["reason"]


@pytest.mark.parametrize(
    "signature, value",
    [
        ("governor()(address)", ZERO_ADDRESS),
        ("oracle()(address)", "0x0"),
        ("oracle()(address)", "not-an-address"),
        ("votingTokenId()(uint256)", -1),
        ("votingTokenId()(uint256)", "42"),
    ],
)
def test_invalid_read_values_are_rejected(artifact, signature, value):
    _require_imports()
    values = default_reader_values()
    values[(FACTORY_ADDR, signature)] = value

    with pytest.raises(CollaboratorCallFailed) as exc:
        extract_dependency(artifact, FACTORY_ADDR, reader=FakeFactoryReader(values), accessors=_accessors())

    assert exc.value.details["target"] == FACTORY_ADDR


def test_zero_opaque_parameter_is_passed_through(artifact):
    """Parâmetros opacos não têm semântica no core: zero é um valor legítimo."""
    _require_imports()
    values = default_reader_values()
    values[(FACTORY_ADDR, "votingTokenId()(uint256)")] = 0

    dep = extract_dependency(artifact, FACTORY_ADDR, reader=FakeFactoryReader(values), accessors=_accessors())

    assert dep.opaque_parameter_ids["voting_token_id"] == 0


def test_ensure_non_zero_gate(resolved_dependency):
    _require_imports()
    assert ensure_non_zero(resolved_dependency) is resolved_dependency

    bad = ResolvedDependency(
        network_id=NETWORK_ID,
        factory_address=FACTORY_ADDR,
        primary_component_address=GOVERNOR_ADDR,
        shared_reference_addresses={"oracle": ZERO_ADDRESS},
    )
    with pytest.raises(ZeroAddressResolved) as exc:
        ensure_non_zero(bad)

    assert exc.value.details["field"] == "shared_reference_addresses.oracle"
