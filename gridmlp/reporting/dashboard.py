"""Live, rank-ordered progress view shared by concurrent training runs."""

from __future__ import annotations

import copy
import logging
import math
import sys
import threading
from pathlib import Path
from typing import Dict, List, Protocol, Sequence, TextIO

from ..core.types import ProgressSnapshot, RunSpec, RunStatus
from ..utils import get_logger

logger = get_logger(__name__)

CURSOR_UP = "\x1b[{n}A"
CLEAR_LINE = "\r\x1b[K"


class Renderer(Protocol):
    """Receives the full, ordered dashboard on every redraw."""

    def render(self, lines: Sequence[str]) -> None:
        ...


class AnsiRenderer:
    """Redraw the dashboard in place using cursor-movement escapes."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self.stream = stream or sys.stdout
        self._drawn = 0

    def render(self, lines: Sequence[str]) -> None:
        parts: List[str] = []
        if self._drawn:
            parts.append(CURSOR_UP.format(n=self._drawn))
        for line in lines:
            parts.append(f"{CLEAR_LINE}{line}\n")
        self.stream.write("".join(parts))
        self.stream.flush()
        self._drawn = len(lines)


class LogRenderer:
    """Emit every redraw as plain log records for non-interactive output."""

    def __init__(self, log: logging.Logger | None = None, level: int = logging.INFO) -> None:
        self.log = log or logger
        self.level = level

    def render(self, lines: Sequence[str]) -> None:
        for line in lines:
            self.log.log(self.level, line.strip())


def make_renderer(stream: TextIO | None = None) -> Renderer:
    """Pick :class:`AnsiRenderer` for terminals, :class:`LogRenderer` otherwise."""

    stream = stream or sys.stdout
    isatty = getattr(stream, "isatty", None)
    if callable(isatty) and isatty():
        return AnsiRenderer(stream)
    return LogRenderer()


def _sort_key(snapshot: ProgressSnapshot) -> tuple[float, int]:
    error = snapshot.avg_error
    if math.isnan(error):
        error = math.inf
    return error, snapshot.spec.index


class Dashboard:
    """Track one :class:`ProgressSnapshot` per run and redraw on every change.

    Every update and every redraw happens under a single lock, so runs on
    different threads never interleave their output or their writes to the
    status file.  A redraw only reads snapshots.
    """

    def __init__(
        self,
        specs: Sequence[RunSpec],
        *,
        status_file: str | Path | None = None,
        renderer: Renderer | None = None,
    ) -> None:
        self._snapshots: Dict[int, ProgressSnapshot] = {
            spec.index: ProgressSnapshot(spec) for spec in specs
        }
        if len(self._snapshots) != len(specs):
            raise ValueError("Run indices must be unique")
        self.status_file = Path(status_file) if status_file is not None else None
        self.renderer = renderer if renderer is not None else make_renderer()
        self._lock = threading.Lock()
        self.redraws = 0

        self._hidden_width = max((len(str(s.hidden_size)) for s in specs), default=1)
        self._lr_width = max((len(f"{s.learning_rate:.3f}") for s in specs), default=5)
        self._epoch_width = max((len(str(s.total_epochs)) for s in specs), default=1)

    def __len__(self) -> int:
        return len(self._snapshots)

    # ------------------------------------------------------------------
    # Updates

    def start(self) -> None:
        """Draw the initial view with every run queued."""

        with self._lock:
            self._redraw()

    def report(self, index: int, epoch: int, error: float) -> None:
        with self._lock:
            self._snapshots[index].record(epoch, error)
            self._redraw()

    def finish(self, index: int, epochs_run: int, final_error: float, converged: bool) -> None:
        with self._lock:
            self._snapshots[index].finish(epochs_run, final_error, converged)
            self._redraw()

    # ------------------------------------------------------------------
    # Views

    def snapshot(self, index: int) -> ProgressSnapshot:
        with self._lock:
            return copy.copy(self._snapshots[index])

    def ordered(self) -> List[ProgressSnapshot]:
        with self._lock:
            return [copy.copy(s) for s in self._ordered()]

    def lines(self) -> List[str]:
        with self._lock:
            return self._lines()

    def format_line(self, rank: int, snapshot: ProgressSnapshot) -> str:
        spec = snapshot.spec
        model_id = (
            f"[{spec.hidden_size:<{self._hidden_width}d}"
            f"-{spec.learning_rate:<{self._lr_width}.3f}-{spec.variant}]"
        )
        ew = self._epoch_width
        if snapshot.status is RunStatus.QUEUED:
            return f"  [{rank:<2d}] {model_id} [QUEUED]    | Waiting to start..."
        if snapshot.status is RunStatus.RUNNING:
            percent = int(snapshot.epoch / spec.total_epochs * 100)
            return (
                f"  [{rank:<2d}] {model_id} [RUNNING]   | Epoch: {snapshot.epoch:<{ew}d} "
                f"({percent:3d}%) | Error: {snapshot.avg_error:.12f} "
                f"| Improvement: {snapshot.improvement:+.12f}"
            )
        return (
            f"  [{rank:<2d}] {model_id} [{snapshot.status.value:<9s}] "
            f"| Finished in {snapshot.epoch:<{ew}d} epochs "
            f"| Final Error: {snapshot.avg_error:.12f}"
        )

    # ------------------------------------------------------------------
    # Internal helpers (lock held)

    def _ordered(self) -> List[ProgressSnapshot]:
        return sorted(self._snapshots.values(), key=_sort_key)

    def _lines(self) -> List[str]:
        return [self.format_line(rank, s) for rank, s in enumerate(self._ordered(), start=1)]

    def _redraw(self) -> None:
        lines = self._lines()
        self.renderer.render(lines)
        self._write_status(lines)
        self.redraws += 1

    def _write_status(self, lines: Sequence[str]) -> None:
        if self.status_file is None:
            return
        try:
            self.status_file.write_text("".join(f"{line}\n" for line in lines), encoding="utf-8")
        except OSError as exc:
            logger.error("Error writing to status file %s: %s", self.status_file, exc)


__all__ = ["AnsiRenderer", "Dashboard", "LogRenderer", "Renderer", "make_renderer"]
