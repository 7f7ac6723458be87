# src/deploy_handoff/core/config/__init__.py

"""
Camada de configuração do Deploy Handoff.

Responsabilidades do pacote:
    - loader  → carregamento de defaults + overrides locais (YAML/JSON)
    - merge   → deep-merge determinístico
    - hashing → hash canônico registrado no Manifest
    - schema  → validação estrutural da run (RunConfig)

Invariantes:
    - A configuração final é um dicionário puro antes da validação
    - Conflitos estruturais são tratados como erro, nunca coerção

Limites explícitos:
    - Não resolve artefatos
    - Não invoca unidades
"""
