# src/deploy_handoff/core/pipeline/__init__.py
"""
# Pipeline Core — Deploy Handoff

Este pacote define as **estruturas fundamentais** de uma run do orquestrador.

## Componentes

- **types**
  - `StepStatus`: estados finais de invocação de unidade
  - `StepRecord`: registro imutável do desfecho de uma unidade

- **context**
  - `RunContext`: contexto de execução da run (valores intermediários, logs, warnings)

- **registry**
  - `UnitRegistry`: validação estrutural, unicidade de `unit.id` e ordem de invocação

## Princípios Fundamentais

- Unidades **não conhecem** o orquestrador
- Unidades **não controlam** ordem de execução
- Dados fluem para unidades **apenas** via `EnvironmentContext`

## Limites Explícitos

- Não executa a run
- Não contém lógica de deployment
"""
