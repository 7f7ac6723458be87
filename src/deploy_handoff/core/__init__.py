# src/deploy_handoff/core/__init__.py
"""
Core do Deploy Handoff.

Reúne as responsabilidades essenciais do handoff entre etapas, independente
do ferramental de deployment concreto.

Componentes principais:
    - artifacts    → localização, seleção de modo e parse de registros
    - units        → EnvironmentContext, UnitOutcome e protocolos de colaboradores
    - engine       → orquestração sequencial e fail-fast
    - pipeline     → RunContext, StepRecord e registry de unidades
    - config       → resolução e validação da configuração
    - traceability → Manifest e Event Log

Princípios fundamentais:
    - Nenhuma decisão silenciosa: todo comportamento é explícito e testado
    - Nenhum estado global do processo é lido ou alterado

Limites explícitos:
    - Não executa `forge`/`cast` (ver `deploy_handoff.forge`)
    - Não depende de CLI ou serviços externos
"""
