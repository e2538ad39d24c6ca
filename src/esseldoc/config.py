"""Application configuration defaults."""

from __future__ import annotations

import shutil
from dataclasses import dataclass
from typing import Literal

SUPPORTED_DIALECT = "R"
DEFAULT_RSCRIPT = "Rscript"

Strategy = Literal["fallback", "cached"]
STRATEGIES: tuple[Strategy, ...] = ("fallback", "cached")


@dataclass(slots=True)
class AppConfig:
    dialect: str = SUPPORTED_DIALECT
    strategy: Strategy = "fallback"
    rscript: str = DEFAULT_RSCRIPT
    timeout: float = 2.0
    # Legacy behaviour: treat an empty argument list like a missing function
    empty_doc_is_missing: bool = False
    show_name: bool = False

    def __post_init__(self) -> None:
        if self.strategy not in STRATEGIES:
            raise ValueError(
                f"Unknown strategy {self.strategy!r}, expected one of {', '.join(STRATEGIES)}"
            )
        if self.timeout <= 0:
            raise ValueError(f"Timeout must be positive, got {self.timeout}")

    def resolve_rscript(self) -> str:
        """Return the full path of the Rscript executable when it is on PATH."""
        return shutil.which(self.rscript) or self.rscript
