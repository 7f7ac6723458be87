"""Leituras na factory upstream via `cast call` (Foundry)."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass, field
from typing import Callable, List, Optional


Runner = Callable[..., "subprocess.CompletedProcess[str]"]


class CastCallError(RuntimeError):
    """`cast call` terminou com código diferente de zero."""


@dataclass
class CastFactoryReader:
    """
    FactoryReader concreto: cada leitura é um `cast call` bloqueante.

    Exemplo de comando:
        cast call 0xABC... "governor()(address)" --rpc-url https://...

    Falhas levantam `CastCallError`; o reader do core as converte em
    `CollaboratorCallFailed` com alvo e assinatura.
    """

    rpc_url: Optional[str] = None
    binary: str = "cast"
    runner: Runner = field(default=subprocess.run, repr=False)

    def _command(self, target: str, signature: str) -> List[str]:
        cmd = [self.binary, "call", target, signature]
        if self.rpc_url:
            cmd += ["--rpc-url", self.rpc_url]
        return cmd

    def _call(self, target: str, signature: str) -> str:
        completed = self.runner(  # noqa: S603
            self._command(target, signature),
            text=True,
            capture_output=True,
            check=False,
        )
        if completed.returncode != 0:
            detail = (completed.stderr or completed.stdout or "").strip()
            raise CastCallError(f"exit code {completed.returncode}: {detail}")

        out = (completed.stdout or "").strip()
        if not out:
            raise CastCallError("empty output")
        # `cast` pode anotar inteiros grandes: "259200 [2.592e5]"
        return out.split()[0]

    def read_address(self, target: str, signature: str) -> str:
        return self._call(target, signature)

    def read_uint(self, target: str, signature: str) -> int:
        raw = self._call(target, signature)
        try:
            return int(raw, 16) if raw.lower().startswith("0x") else int(raw, 10)
        except ValueError:
            raise CastCallError(f"not an integer: {raw!r}") from None
