"""Optional ``--profile`` support for the root command.

``cpu`` runs the command under :mod:`cProfile`; ``heap`` records allocations
with :mod:`tracemalloc`.  Either mode writes ``profile-<mode>.pprof`` in the
current directory when the command returns.
"""

from __future__ import annotations

import cProfile
import tracemalloc
from pathlib import Path
from typing import Optional

import structlog

from ..errors import ValidationError

__all__ = ["Profiler", "PROFILE_OUTPUT"]

log = structlog.get_logger()

PROFILE_OUTPUT = "profile-{mode}.pprof"


class Profiler:
    """Start/stop wrapper around the two profiling back-ends."""

    def __init__(self, mode: str = "none", directory: Optional[Path] = None) -> None:
        if mode not in ("none", "cpu", "heap"):
            raise ValidationError(f"unknown profile '{mode}'")
        self.mode = mode
        self.directory = directory or Path.cwd()
        self._cpu: Optional[cProfile.Profile] = None

    @property
    def output(self) -> Path:
        return self.directory / PROFILE_OUTPUT.format(mode=self.mode)

    def start(self) -> None:
        if self.mode == "cpu":
            self._cpu = cProfile.Profile()
            self._cpu.enable()
        elif self.mode == "heap":
            tracemalloc.start()

    def stop(self) -> None:
        """Stop profiling and write the report; a no-op for ``none``."""
        if self.mode == "cpu" and self._cpu is not None:
            self._cpu.disable()
            self._cpu.dump_stats(str(self.output))
            self._cpu = None
        elif self.mode == "heap" and tracemalloc.is_tracing():
            snapshot = tracemalloc.take_snapshot()
            tracemalloc.stop()
            snapshot.dump(str(self.output))
        else:
            return
        log.debug("profile written", mode=self.mode, path=str(self.output))
