# src/deploy_handoff/core/artifacts/__init__.py
"""
Resolução de artefatos de deployment do Deploy Handoff.

Este pacote localiza, valida e interpreta o registro persistido de uma
etapa de deployment anterior, produzindo a dependência resolvida consumida
pelas unidades seguintes.

Componentes principais:
    - store  → localização por (step_id, network_id, modo) sem parse
    - guard  → gate fail-fast de ambiguidade de modo (real × dry-run)
    - reader → parse do registro, seleção last-match-wins e leitura da factory
    - types  → estruturas imutáveis (DeploymentArtifact, ResolvedDependency)

Ordem obrigatória:
    store.locate → guard.select → reader.parse_artifact → reader.extract_*

Invariantes:
    - Exatamente um registro é aceito por chave
    - Nenhum parse ocorre antes do guard
    - Nenhum endereço zero é entregue a unidades dependentes

Limites explícitos:
    - Não escreve no store
    - Não trava o store contra runs concorrentes
    - Não interpreta semântica de negócio dos componentes
"""
