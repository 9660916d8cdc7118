"""Finite volume divergence coefficients on the staggered grid.

- cell divergence (divp_x, divp_y, divp_z): divergence of the face velocities
  bounding a pressure cell, VF[i] * dxi[i] * [-1, +1]
- face divergence (divu_*, divv_*, divw_*): divergence of the fluxes bounding
  the momentum cell of velocity component ``comp``,
  min(VF[i-1:i]) * (1 / spacing) * [-1, +1]

The face divergence along the component's own direction spans two cell
centers (dxmi), along the other directions it spans one cell width (dyi, dzi).
"""

import logging

import numpy as np

from .interpolation import pair_min

log = logging.getLogger(__name__)

_SIGNS = np.array([-1.0, 1.0])


def _inverse_widths(grid, axis):
    return (grid.dxi, grid.dyi, grid.dzi)[axis]


def _inverse_center_spacing(grid, axis):
    return (grid.dxmi, grid.dymi, grid.dzmi)[axis]


def _along(values, axis):
    shape = [1, 1, 1, 1]
    shape[axis] = values.size
    return values.reshape(shape)


def cell_divergence(grid, axis):
    """Divergence coefficients to the cell center, defined on [1, n-2]^3."""
    div = np.zeros(grid.shape + (2,))
    inner = (slice(1, -1),) * 3
    scale = grid.VF[..., None] * _along(_inverse_widths(grid, axis), axis)
    div[inner] = (scale * _SIGNS)[inner]
    return div


def face_divergence(grid, comp, axis):
    """Divergence coefficients for the momentum cell of component ``comp``.

    Defined from index 1 in the ``comp`` direction, over the full range in
    the other two.
    """
    if comp == axis:
        inv = _inverse_center_spacing(grid, axis)
    else:
        inv = _inverse_widths(grid, axis)
    vf = pair_min(grid.VF, comp)
    # pair_min leaves index 0 along comp at zero, which keeps the outer layer empty
    return vf[..., None] * _along(inv, axis) * _SIGNS


def zero_boundary_faces(grid, divu_x, divv_y, divw_z):
    """Remove the domain-bounding faces from the normal face divergence.

    Pressure is Neumann all around a bounded direction, so the velocity on
    the first and last face of the domain must come from the boundary
    conditions rather than from the momentum equation.
    """
    if not grid.xper:
        if grid.iproc == 0:
            divu_x[grid.imin, :, :] = 0.0
        if grid.iproc == grid.npx - 1:
            divu_x[grid.imax + 1, :, :] = 0.0
    if not grid.yper:
        if grid.jproc == 0:
            divv_y[:, grid.jmin, :] = 0.0
        if grid.jproc == grid.npy - 1:
            divv_y[:, grid.jmax + 1, :] = 0.0
    if not grid.zper:
        if grid.kproc == 0:
            divw_z[:, :, grid.kmin] = 0.0
        if grid.kproc == grid.npz - 1:
            divw_z[:, :, grid.kmax + 1] = 0.0
    log.debug(
        f"Domain-bounding faces removed for periodicity {grid.periodicity} "
        f"on grid [{grid.name}]"
    )
