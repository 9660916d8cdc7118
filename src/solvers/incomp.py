"""Incompressible Navier-Stokes solver object on a staggered grid.

Holds the velocity and pressure fields, the operator tables of the grid, the
pressure Poisson solver and the boundary-condition registry, and exposes the
discrete operators used by a projection-type time integrator.
"""

import logging
from collections.abc import Mapping

import numpy as np

from fv.assembly.divergence import pressure_gradient, velocity_divergence
from fv.assembly.momentum_flux import momentum_derivative
from fv.assembly.pressure_correction_eq_assembly import assemble_pressure_laplacian
from fv.core.boundary_conditions import BoundaryConditionRegistry
from fv.discretization.operators import build_operators
from fv.linear_solvers.scipy_solver import PressureSolver

from .datastructures import FlowMaxima, IncompParameters

log = logging.getLogger(__name__)


class IncompressibleSolver:
    """Constant density incompressible flow solver.

    Parameters
    ----------
    grid : StructuredGrid
        Grid and geometry (volume fraction) of the flow domain.
    name : str
        Solver name used in logs.
    rho : float
        Constant density, must be positive.
    visc : float
        Constant dynamic viscosity, must be non-negative.
    pressure_solver : PressureSolver or mapping, optional
        Pressure Poisson solver built on ``grid``, or keyword arguments used
        to create one.
    """

    def __init__(self, grid, name="UNNAMED_INCOMP", rho=1.0, visc=0.0, pressure_solver=None):
        if not rho > 0.0:
            raise ValueError(f"Solver [{name}]: density must be positive, got {rho}")
        if not visc >= 0.0:
            raise ValueError(f"Solver [{name}]: viscosity must be non-negative, got {visc}")
        self.grid = grid
        self.name = name
        self.rho = float(rho)
        self.visc = float(visc)

        # Flow variables
        self.U = grid.zeros()
        self.V = grid.zeros()
        self.W = grid.zeros()
        self.P = grid.zeros()
        self.Uold = grid.zeros()
        self.Vold = grid.zeros()
        self.Wold = grid.zeros()

        # Discrete operators
        self.tables = build_operators(grid).freeze()

        # Pressure Poisson solver
        if pressure_solver is None:
            pressure_solver = PressureSolver(grid, name=f"{name}_PRESSURE")
        elif isinstance(pressure_solver, Mapping):
            pressure_solver = PressureSolver(grid, **dict(pressure_solver))
        if pressure_solver.grid is not grid:
            raise ValueError(f"Solver [{name}]: pressure solver must be built on the same grid")
        self.psolv = pressure_solver
        self.psolv.opr[...] = assemble_pressure_laplacian(grid, self.tables)
        self.psolv.setup()

        self.bcs = BoundaryConditionRegistry(grid)

        self.params = IncompParameters(
            name=name,
            rho=self.rho,
            visc=self.visc,
            nx=grid.nx,
            ny=grid.ny,
            nz=grid.nz,
            xper=grid.xper,
            yper=grid.yper,
            zper=grid.zper,
            pressure_method=self.psolv.method,
            pressure_tolerance=self.psolv.tolerance,
        )

    # ------------------------------------------------------------------
    # Boundary conditions
    # ------------------------------------------------------------------

    def add_bcond(self, name, type, locator):
        """Register a boundary-condition region selected by ``locator(grid, i, j, k)``."""
        return self.bcs.add(name, type, locator)

    def get_bcond(self, name):
        return self.bcs.get(name)

    # ------------------------------------------------------------------
    # Discrete operators on the current fields
    # ------------------------------------------------------------------

    def get_dmomdt(self):
        """Momentum time derivatives (drhoU/dt, drhoV/dt, drhoW/dt) of the current fields."""
        return momentum_derivative(
            self.grid, self.tables, self.rho, self.visc, self.U, self.V, self.W, self.P
        )

    def get_divergence(self):
        """Velocity divergence of the current fields over the owned cells."""
        return velocity_divergence(self.grid, self.tables, self.U, self.V, self.W)

    def get_pgrad(self, P=None):
        """Pressure gradient on the velocity faces, of ``P`` or of the current pressure."""
        return pressure_gradient(self.grid, self.tables, self.P if P is None else P)

    def get_max(self):
        """Maxima of the current fields and of their divergence."""
        own = self.grid.interior
        div = self.get_divergence()
        return FlowMaxima(
            Umax=float(np.max(np.abs(self.U[own]))),
            Vmax=float(np.max(np.abs(self.V[own]))),
            Wmax=float(np.max(np.abs(self.W[own]))),
            Pmax=float(np.max(np.abs(self.P[own]))),
            divmax=float(np.max(np.abs(div[own]))),
        )

    def print(self):
        """Log a summary of the solver."""
        log.info(f"Incompressible solver [{self.name}] on grid [{self.grid.name}]")
        log.info(f"  > density   = {self.rho:.6e}")
        log.info(f"  > viscosity = {self.visc:.6e}")
        log.info(f"  > boundary conditions: {', '.join(self.bcs.names) or 'none'}")
