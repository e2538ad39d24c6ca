"""Bounded argument-list queries against an R interpreter.

Each lookup runs a short script through `Rscript`, so only functions from
the base environment and installed packages (via `pkg::fun`) are visible.
Every failure mode, including a timeout, is reported as "not found".
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from dataclasses import dataclass

from esseldoc.config import AppConfig

LOGGER = logging.getLogger(__name__)

# Prints the deparsed header of `args(fun)` for the name given on the command
# line, or nothing when the name does not refer to a function.
ARGS_SCRIPT = r"""
nm <- commandArgs(trailingOnly = TRUE)[1]
parts <- strsplit(nm, ":::?")[[1]]
f <- tryCatch(
  if (length(parts) == 2) get(parts[2], envir = asNamespace(parts[1]), mode = "function")
  else get(nm, mode = "function"),
  error = function(e) NULL
)
if (!is.null(f)) {
  a <- args(f)
  if (is.null(a)) {
    cat("function ()")
  } else {
    d <- deparse(a)
    cat(trimws(d[-length(d)]), sep = " ")
  }
}
"""

FUNCTION_PREFIX = "function"


def format_args(header: str) -> str:
    """Turn `function (n, mean = 0) ` into `n, mean = 0`."""
    text = header.strip()
    if text.startswith(FUNCTION_PREFIX):
        text = text[len(FUNCTION_PREFIX) :].strip()
    if text.startswith("(") and text.endswith(")"):
        text = text[1:-1]
    return " ".join(text.split())


@dataclass(slots=True)
class LookupStats:
    queries: int = 0
    found: int = 0
    failed: int = 0


class RscriptSession:
    """Answers `lookup_args` queries by running Rscript with a timeout."""

    def __init__(self, config: AppConfig | None = None) -> None:
        self.config = config or AppConfig()
        self.stats = LookupStats()

    @property
    def executable(self) -> str:
        return self.config.resolve_rscript()

    def is_active(self) -> bool:
        return shutil.which(self.config.rscript) is not None

    def lookup_args(self, name: str) -> str | None:
        """Return the formatted argument list of `name`, or None."""
        self.stats.queries += 1
        command = [self.executable, "--vanilla", "-e", ARGS_SCRIPT, name]
        try:
            completed = subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=self.config.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired:
            LOGGER.warning("R did not answer within %ss for %s", self.config.timeout, name)
            self.stats.failed += 1
            return None
        except OSError as exc:
            LOGGER.warning("Unable to run %s: %s", self.executable, exc)
            self.stats.failed += 1
            return None

        if completed.returncode != 0:
            LOGGER.debug("Rscript exited with %s: %s", completed.returncode, completed.stderr.strip())
            self.stats.failed += 1
            return None

        output = completed.stdout.strip()
        if not output:
            return None

        self.stats.found += 1
        return format_args(output)
