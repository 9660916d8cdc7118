"""Console helpers for the example drivers."""

from .console import console, ok, header, solver_summary, print_solver

__all__ = [
    "console",
    "ok",
    "header",
    "solver_summary",
    "print_solver",
]
