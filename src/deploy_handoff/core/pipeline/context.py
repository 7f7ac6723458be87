"""
Contexto de execução de uma run do orquestrador.

O `RunContext` acompanha uma run do início ao fim: identidade da run,
configuração efetiva, valores intermediários por chave explícita, log
estruturado de eventos e warnings por unidade.

O RunContext é de uso exclusivo do orquestrador. Unidades de deployment
não o recebem: elas recebem um `EnvironmentContext` próprio, construído a
cada invocação.

Invariantes:
    - Valores intermediários são indexados por chave explícita
    - Todo evento carrega `run_id`, `step_id`, `level` e `timestamp`
    - Warnings são agrupados por `step_id`, na ordem de registro

Limites explícitos:
    - Não invoca unidades
    - Não persiste dados
    - Não registra eventos no Manifest
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List


# Chave da dependência upstream resolvida na run.
DEPENDENCY_ARTIFACT_KEY = "upstream.dependency"


@dataclass
class RunContext:
    run_id: str
    created_at: datetime
    config: Dict[str, Any]
    meta: Dict[str, Any] = field(default_factory=dict)

    _values: Dict[str, Any] = field(default_factory=dict, init=False, repr=False)
    events: List[Dict[str, Any]] = field(default_factory=list, init=False)
    warnings: Dict[str, List[str]] = field(default_factory=dict, init=False)

    def set_artifact(self, key: str, value: Any) -> None:
        self._values[key] = value

    def has_artifact(self, key: str) -> bool:
        return key in self._values

    def get_artifact(self, key: str) -> Any:
        try:
            return self._values[key]
        except KeyError:
            raise KeyError(f"{key} (run {self.run_id})") from None

    def log(self, *, step_id: str, level: str, message: str, **extra: Any) -> None:
        self.events.append(
            {
                **extra,
                "run_id": self.run_id,
                "step_id": step_id,
                "level": level,
                "message": message,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }
        )

    def events_for(self, step_id: str) -> List[Dict[str, Any]]:
        return [e for e in self.events if e["step_id"] == step_id]

    def add_warning(self, *, step_id: str, message: str) -> None:
        self.warnings.setdefault(step_id, []).append(message)
