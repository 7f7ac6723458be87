"""
Contratos dos colaboradores externos consumidos pelo core.

O core não implanta contratos nem transmite transações: ele apenas
consome duas fronteiras estreitas.

    - FactoryReader  → leituras puras (sem efeitos colaterais) contra a
                       factory upstream já implantada
    - DeploymentUnit → execução de uma unidade de deployment independente,
                       que bloqueia até um desfecho terminal

Conformidade é estrutural (duck typing, `@runtime_checkable`): nenhuma
herança é exigida das implementações.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from .environment import EnvironmentContext
from .outcome import UnitOutcome


@runtime_checkable
class FactoryReader(Protocol):
    """
    Interface de leitura exposta pela factory upstream implantada.

    `signature` segue a notação de assinatura com retorno
    (ex.: ``"governor()(address)"``).

    Implementações devem levantar exceção em falha de rede; o reader do
    core converte qualquer falha em `CollaboratorCallFailed`.
    """

    def read_address(self, target: str, signature: str) -> str:
        ...

    def read_uint(self, target: str, signature: str) -> int:
        ...


@runtime_checkable
class DeploymentUnit(Protocol):
    """
    Unidade de deployment invocável pelo orquestrador.

    Atributos obrigatórios:
        - id: identificador único e estável da unidade na run

    Invariantes:
        - `invoke` é chamado no máximo uma vez por run
        - `invoke` recebe o EnvironmentContext construído pelo orquestrador e
          não deve depender de estado global do processo
        - o retorno é sempre um `UnitOutcome` terminal (sucesso ou falha);
          exceções são tratadas pelo orquestrador como falha da unidade
    """

    id: str

    def invoke(self, env: EnvironmentContext) -> UnitOutcome:
        """Executa a unidade e bloqueia até o desfecho terminal."""
        ...
