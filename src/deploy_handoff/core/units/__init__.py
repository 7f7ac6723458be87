# src/deploy_handoff/core/units/__init__.py
"""
Fronteira com unidades de deployment e colaboradores externos.

Componentes principais:
    - protocols   → DeploymentUnit e FactoryReader (duck typing)
    - environment → EnvironmentContext, parâmetros explícitos por invocação
    - outcome     → UnitOutcome, desfecho terminal declarado pela unidade
    - inprocess   → CallableUnit, unidade em processo a partir de uma função

Princípios fundamentais:
    - Nenhum estado global do processo é usado para passar parâmetros
    - Unidades não conhecem o orquestrador nem umas às outras
    - Falhas da unidade são repassadas sem reinterpretação
"""
