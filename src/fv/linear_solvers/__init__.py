"""Linear solvers for the pressure Poisson equation."""

from .scipy_solver import PressureSolver, scipy_solver

__all__ = ["PressureSolver", "scipy_solver"]
