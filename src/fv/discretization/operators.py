"""Operator tables of the staggered incompressible discretization.

All stencils are two-point stencils stored as arrays of shape
``grid.shape + (2,)``. Naming follows ``<family><component>_<direction>``:

- itpu_x : U interpolated in x to the cell center [xm, ym, zm]
- itpu_y : U interpolated in y to the edge [x, y, zm]
- divp_x : divergence in x to the cell center (pressure cell)
- divu_y : divergence in y for the U momentum cell [x, ym, zm]
- grdu_z : gradient in z of U at the edge [x, ym, z]

Every coefficient is pre-multiplied by the volume fraction of its footprint,
so blocked cells drop out of the stencils without branching.
"""

import logging
from dataclasses import dataclass, fields

import numpy as np

from .divergence import cell_divergence, face_divergence, zero_boundary_faces
from .gradient.structured_gradient import cell_gradient, edge_gradient
from .interpolation import cell_interpolation, edge_interpolation

log = logging.getLogger(__name__)

X, Y, Z = 0, 1, 2


@dataclass
class OperatorTables:
    """Interpolation, divergence and gradient coefficients of one geometry."""

    # Interpolation
    itpu_x: np.ndarray
    itpu_y: np.ndarray
    itpu_z: np.ndarray
    itpv_x: np.ndarray
    itpv_y: np.ndarray
    itpv_z: np.ndarray
    itpw_x: np.ndarray
    itpw_y: np.ndarray
    itpw_z: np.ndarray

    # Divergence
    divp_x: np.ndarray
    divp_y: np.ndarray
    divp_z: np.ndarray
    divu_x: np.ndarray
    divu_y: np.ndarray
    divu_z: np.ndarray
    divv_x: np.ndarray
    divv_y: np.ndarray
    divv_z: np.ndarray
    divw_x: np.ndarray
    divw_y: np.ndarray
    divw_z: np.ndarray

    # Gradient
    grdu_x: np.ndarray
    grdu_y: np.ndarray
    grdu_z: np.ndarray
    grdv_x: np.ndarray
    grdv_y: np.ndarray
    grdv_z: np.ndarray
    grdw_x: np.ndarray
    grdw_y: np.ndarray
    grdw_z: np.ndarray

    def names(self):
        return [f.name for f in fields(self)]

    def items(self):
        return [(name, getattr(self, name)) for name in self.names()]

    def equals(self, other) -> bool:
        """Bitwise equality of every table."""
        return all(
            np.array_equal(a, getattr(other, name)) for name, a in self.items()
        )

    def freeze(self):
        """Mark every table read-only."""
        for _, a in self.items():
            a.setflags(write=False)
        return self


def build_operators(grid) -> OperatorTables:
    """Build the operator tables of ``grid`` from its spacings and volume fraction.

    Pure function of the geometry: rebuilding from identical input returns
    bit-identical tables.

    Parameters
    ----------
    grid : StructuredGrid
        Geometry provider (coordinates, spacings, VF, periodicity, layout).

    Returns
    -------
    OperatorTables
    """
    tables = OperatorTables(
        # Velocity interpolation to cell centers and edges
        itpu_x=cell_interpolation(grid, X),
        itpu_y=edge_interpolation(grid, X, Y),
        itpu_z=edge_interpolation(grid, X, Z),
        itpv_x=edge_interpolation(grid, Y, X),
        itpv_y=cell_interpolation(grid, Y),
        itpv_z=edge_interpolation(grid, Y, Z),
        itpw_x=edge_interpolation(grid, Z, X),
        itpw_y=edge_interpolation(grid, Z, Y),
        itpw_z=cell_interpolation(grid, Z),
        # Divergence to pressure cells and momentum cells
        divp_x=cell_divergence(grid, X),
        divp_y=cell_divergence(grid, Y),
        divp_z=cell_divergence(grid, Z),
        divu_x=face_divergence(grid, X, X),
        divu_y=face_divergence(grid, X, Y),
        divu_z=face_divergence(grid, X, Z),
        divv_x=face_divergence(grid, Y, X),
        divv_y=face_divergence(grid, Y, Y),
        divv_z=face_divergence(grid, Y, Z),
        divw_x=face_divergence(grid, Z, X),
        divw_y=face_divergence(grid, Z, Y),
        divw_z=face_divergence(grid, Z, Z),
        # Velocity gradients
        grdu_x=cell_gradient(grid, X),
        grdu_y=edge_gradient(grid, X, Y),
        grdu_z=edge_gradient(grid, X, Z),
        grdv_x=edge_gradient(grid, Y, X),
        grdv_y=cell_gradient(grid, Y),
        grdv_z=edge_gradient(grid, Y, Z),
        grdw_x=edge_gradient(grid, Z, X),
        grdw_y=edge_gradient(grid, Z, Y),
        grdw_z=cell_gradient(grid, Z),
    )

    # Peripheral velocities come from boundary conditions
    zero_boundary_faces(grid, tables.divu_x, tables.divv_y, tables.divw_z)

    log.debug(f"Built {len(tables.names())} operator tables on grid [{grid.name}]")
    return tables
