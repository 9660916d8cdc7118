"""Incompressible flow solver framework on staggered structured grids.

Solver Hierarchy:
-----------------
IncompressibleSolver
├── OperatorTables (interpolation, divergence, gradient coefficients)
├── PressureSolver (scipy Krylov solve of the pressure Laplacian)
└── BoundaryConditionRegistry (named cell regions)
"""

from .incomp import IncompressibleSolver
from .datastructures import IncompParameters, FlowMaxima

__all__ = [
    "IncompressibleSolver",
    "IncompParameters",
    "FlowMaxima",
]
