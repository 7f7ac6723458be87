"""Relatórios de run: resumo Markdown e JSON (layout de registro de deployment)."""
