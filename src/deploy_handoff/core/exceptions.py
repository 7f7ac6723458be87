"""
Deploy Handoff — Canonical Exceptions (v1)

Este módulo define as exceções tipadas internas do Deploy Handoff.

Objetivo:
- Permitir que store, guard, reader e orquestrador levantem falhas semânticas tipadas
- Facilitar o mapeamento determinístico para HandoffErrorPayload
- Evitar ValueError/RuntimeError genéricos nos guardrails de resolução

Regras:
- Toda falha de resolução é fatal para a run (fail-fast, sem retry interno).
- Exceções devem carregar apenas dados estruturados (serializáveis).
- Caminhos candidatos são sempre incluídos em `details` quando existirem,
  para que o operador resolva a ambiguidade sem consultar o código.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class HandoffException(Exception):
    """Base class para exceções internas do Deploy Handoff.

    Importante:
    - Sempre carregar dados estruturados em `details`
    - Não embedar stack trace em payloads de erro
    - Mensagem deve ser curta e humana
    """

    message: str
    details: Dict[str, Any]
    hint: Optional[str] = None
    decision_required: bool = False

    def __str__(self) -> str:  # pragma: no cover
        return self.message


# ---------------------------------------------------------------------------
# Artifact store / resolução
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StoreUnavailable(HandoffException):
    """O artifact store não pôde ser enumerado (falha de I/O, não ausência)."""


@dataclass(frozen=True)
class ArtifactNotFound(HandoffException):
    """Nenhum registro (real ou dry-run) existe para a chave (step, network)."""


@dataclass(frozen=True)
class ModeConflict(HandoffException):
    """Registros real e dry-run coexistem para a mesma chave (step, network)."""


@dataclass(frozen=True)
class SchemaError(HandoffException):
    """Registro persistido estruturalmente inválido."""


@dataclass(frozen=True)
class ComponentNotFound(HandoffException):
    """Nenhum evento de criação com o nome de componente solicitado."""


@dataclass(frozen=True)
class ChainIdMismatch(HandoffException):
    """Registro resolvido pertence a outra rede que não a da run."""


@dataclass(frozen=True)
class ZeroAddressResolved(HandoffException):
    """Endereço resolvido é zero onde um endereço real é obrigatório."""


# ---------------------------------------------------------------------------
# Colaboradores externos
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CollaboratorCallFailed(HandoffException):
    """Leitura contra a factory implantada falhou ou retornou zero."""


@dataclass(frozen=True)
class UnitDeploymentFailed(HandoffException):
    """Falha reportada pela unidade de deployment (repassada sem alteração)."""
