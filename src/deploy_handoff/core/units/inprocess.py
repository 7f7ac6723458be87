"""Unidade em processo: delega a uma função Python.

Usada quando a unidade de deployment é exposta como chamada de biblioteca
(ou em testes). A função recebe o EnvironmentContext e retorna o mapeamento
de componentes criados ou um UnitOutcome explícito.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Mapping, Union

from .environment import EnvironmentContext
from .outcome import UnitOutcome


UnitFunction = Callable[[EnvironmentContext], Union[UnitOutcome, Mapping[str, str]]]


@dataclass
class CallableUnit:
    """Adapta uma função ao protocolo DeploymentUnit."""

    id: str
    fn: UnitFunction

    def invoke(self, env: EnvironmentContext) -> UnitOutcome:
        result = self.fn(env)
        if isinstance(result, UnitOutcome):
            return result
        if not isinstance(result, Mapping):
            raise TypeError(f"unit '{self.id}' must return UnitOutcome or a mapping of component handles")
        return UnitOutcome.success(result)
