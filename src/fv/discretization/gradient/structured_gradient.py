"""Velocity gradient coefficients for structured staggered grids.

Cell-centered gradients (grdu_x, grdv_y, grdw_z) difference the two faces of
a cell and drop the side whose face is blocked. Edge gradients (grdu_y,
grdv_x, grdv_z, grdw_y, grdw_x, grdu_z) difference two neighbouring face
velocities across an edge over an effective distance that only counts the
open half-cells.
"""
import numpy as np

from ..interpolation import centers_and_faces, pair_min


def cell_gradient(grid, axis):
    """Gradient in ``axis`` of the ``axis`` velocity component, at cell centers.

    grd[i] = VF[i] * dxi[i] * [-min(VF[i-1:i]), +min(VF[i:i+1])]

    Defined on [1, n-2] in every direction.
    """
    inv = (grid.dxi, grid.dyi, grid.dzi)[axis]
    grd = np.zeros(grid.shape + (2,))
    v = np.moveaxis(grid.VF, axis, 0)
    g = np.moveaxis(grd, axis, 0)

    c = v[1:-1, 1:-1, 1:-1]
    m = v[:-2, 1:-1, 1:-1]
    p = v[2:, 1:-1, 1:-1]
    scale = c * inv[1:-1, None, None]
    g[1:-1, 1:-1, 1:-1, 0] = -scale * np.minimum(m, c)
    g[1:-1, 1:-1, 1:-1, 1] = scale * np.minimum(c, p)
    return grd


def edge_gradient(grid, comp, axis):
    """Gradient in ``axis`` of the ``comp`` velocity component, at edges.

    With a = min(VF) over the ``comp`` face pair on the lower side of the edge
    and b the same on the upper side, the effective distance is

        delta = b * (ym[j] - y[j]) + a * (y[j] - ym[j-1])

    and grd[j] = [-a, +b] / delta. Where delta <= 0 no gradient can be formed
    and both coefficients are exactly zero.

    Defined from index 1 in both ``comp`` and ``axis`` directions.
    """
    if comp == axis:
        raise ValueError("edge gradient needs two different directions")
    faces, centers, _ = centers_and_faces(grid, axis)
    n = centers.size

    # Face-pair minimum of the comp faces, then split into lower/upper side of the edge
    vf = np.moveaxis(pair_min(grid.VF, comp), axis, 0)
    lower = vf[:-1]
    upper = vf[1:]
    # pair_min is zero at index 0 along comp, so the outer layer stays empty
    d_hi = (centers[1:] - faces[1:n])[:, None, None]
    d_lo = (faces[1:n] - centers[:-1])[:, None, None]
    delta = upper * d_hi + lower * d_lo

    open_edge = delta > 0.0
    safe = np.where(open_edge, delta, 1.0)

    grd = np.zeros(grid.shape + (2,))
    g = np.moveaxis(grd, axis, 0)
    g[1:, ..., 0] = np.where(open_edge, -lower / safe, 0.0)
    g[1:, ..., 1] = np.where(open_edge, upper / safe, 0.0)
    return grd
