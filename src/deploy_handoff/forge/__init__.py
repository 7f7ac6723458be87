"""Colaboradores Foundry: leituras via `cast call` e unidades via `forge script`."""

from .cast import CastCallError, CastFactoryReader
from .script import ForgeScriptUnit, build_units, script_step_id

__all__ = ["CastCallError", "CastFactoryReader", "ForgeScriptUnit", "build_units", "script_step_id"]
