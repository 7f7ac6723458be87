# tests/conftest.py
"""
Fixtures compartilhados para testes do Deploy Handoff.

Este módulo define fixtures reutilizáveis que fornecem:
- um store de broadcast vazio sob `tmp_path`
- o registro real da etapa upstream com a factory implantada
- um FactoryReader em memória (sem rede, sem `cast`)
- contexto de execução controlado (RunContext)
- a declaração upstream canônica usada pelos cenários do orquestrador

Decisões arquiteturais:
    - Colaboradores externos são substituídos por fakes explícitos
      (ver `tests/_support.py`)
    - Imports do core são feitos de forma lazy dentro das fixtures, para
      que erros de import apareçam com contexto no teste que falha

Invariantes:
    - Nenhuma fixture acessa rede ou executa `forge`/`cast`
    - I/O de filesystem acontece apenas sob `tmp_path`
    - Todas as fixtures são determinísticas

Limites explícitos:
    - Não substitui testes de integração com Foundry
    - Não valida semântica de contratos implantados
"""

from datetime import datetime, timezone
from pathlib import Path

import pytest

from tests._support import (
    FACTORY_ADDR,
    GOVERNOR_ADDR,
    NETWORK_ID,
    ORACLE_ADDR,
    UPSTREAM_STEP,
    VOTING_TOKEN_ID,
    FakeFactoryReader,
    default_reader_values,
    tx,
    write_broadcast,
)


@pytest.fixture
def broadcast_root(tmp_path) -> Path:
    root = tmp_path / "broadcast"
    root.mkdir()
    return root


@pytest.fixture
def upstream_spec():
    """
    Declaração upstream usada pelos cenários do orquestrador.

    - factory: componente "GovernanceFactory" no registro da etapa upstream
    - primário: `governor()(address)`
    - referência compartilhada "oracle" e parâmetro opaco "voting_token_id"
    """
    from deploy_handoff.core.config.schema import UpstreamSpec

    return UpstreamSpec(
        step_id=UPSTREAM_STEP,
        factory_component="GovernanceFactory",
        primary_accessor="governor()(address)",
        shared_references={"oracle": "oracle()(address)"},
        opaque_parameters={"voting_token_id": "votingTokenId()(uint256)"},
    )


@pytest.fixture
def fake_reader() -> FakeFactoryReader:
    return FakeFactoryReader(default_reader_values())


@pytest.fixture
def upstream_record(broadcast_root) -> Path:
    """Registro real da etapa upstream: cria a factory e faz uma chamada de configuração."""
    return write_broadcast(
        broadcast_root,
        UPSTREAM_STEP,
        NETWORK_ID,
        [
            tx("GovernanceFactory", FACTORY_ADDR),
            {"transactionType": "CALL", "contractName": None, "contractAddress": FACTORY_ADDR},
        ],
    )


@pytest.fixture
def dummy_ctx():
    """RunContext determinístico (run_id e created_at fixos)."""
    from deploy_handoff.core.pipeline.context import RunContext

    return RunContext(
        run_id="run-test-001",
        created_at=datetime(2026, 1, 16, 0, 0, 0, tzinfo=timezone.utc),
        config={"run": {"network_id": NETWORK_ID}},
        meta={"source": "pytest"},
    )


@pytest.fixture
def resolved_dependency():
    from deploy_handoff.core.artifacts.types import ResolvedDependency

    return ResolvedDependency(
        network_id=NETWORK_ID,
        factory_address=FACTORY_ADDR,
        primary_component_address=GOVERNOR_ADDR,
        shared_reference_addresses={"oracle": ORACLE_ADDR},
        opaque_parameter_ids={"voting_token_id": VOTING_TOKEN_ID},
    )


@pytest.fixture
def make_orchestrator(broadcast_root, dummy_ctx, fake_reader, upstream_spec):
    """
    Fábrica de Orchestrator sobre o store de teste.

    Cada unidade recebe `config_ref = config/<id>.json`; `params` mapeia
    unit_id → parâmetros próprios da unidade.
    """
    from deploy_handoff.core.artifacts.store import ArtifactStore
    from deploy_handoff.core.config.schema import UnitSpec
    from deploy_handoff.core.engine.orchestrator import Orchestrator, PlannedUnit

    def _make(units, *, params=None, reader=None, manifest=None, network_id=NETWORK_ID, store=None):
        params = params or {}
        plan = [
            PlannedUnit(
                spec=UnitSpec(id=u.id, config_ref=f"config/{u.id}.json", params=params.get(u.id, {})),
                unit=u,
            )
            for u in units
        ]
        return Orchestrator(
            plan=plan,
            ctx=dummy_ctx,
            store=store or ArtifactStore(root=broadcast_root),
            reader=reader or fake_reader,
            upstream=upstream_spec,
            network_id=network_id,
            manifest=manifest,
        )

    return _make
