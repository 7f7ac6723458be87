# src/deploy_handoff/__init__.py
"""
Deploy Handoff — handoff entre etapas de um deployment multi-etapa.

Cada etapa de deployment é uma unidade independente que persiste um
registro do que criou (arquivo de broadcast do Foundry). A etapa seguinte
localiza, valida e confia em exatamente um desses registros antes de
prosseguir de forma irreversível.

Princípios centrais:
    - Exatamente um registro upstream é aceito por run; ambiguidade é erro
    - Dados fluem explicitamente para cada unidade (EnvironmentContext)
    - Fail-fast: nenhuma unidade roda depois de uma falha
    - Rastreabilidade forense é um requisito de primeira classe

Arquitetura em alto nível:
    - core.artifacts    → store, mode guard e reader de registros
    - core.units        → contratos de unidade e de leitura na factory
    - core.engine       → orquestrador (máquina de estados)
    - core.config       → carregamento, merge, hashing e schema da run
    - core.traceability → Manifest e Event Log
    - forge             → colaboradores Foundry (`forge script`, `cast call`)
    - report            → resumo final (Markdown + JSON)
    - runner            → `run_from_config`, ponto de entrada em uma chamada

Limites explícitos:
    - Não implanta contratos por conta própria (delegado às unidades)
    - Não garante atomicidade entre etapas
    - Não suporta runs concorrentes sobre o mesmo store
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
