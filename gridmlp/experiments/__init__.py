"""Concurrent experiment grids."""

from .orchestrator import CONVERGED_THRESHOLD, ExperimentReport, Orchestrator, build_grid

__all__ = ["CONVERGED_THRESHOLD", "ExperimentReport", "Orchestrator", "build_grid"]
