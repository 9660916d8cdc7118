"""Velocity divergence and pressure gradient on the staggered grid."""

import numpy as np
from numba import njit


@njit(nogil=True)
def _divergence_kernel(lo, hi, divp_x, divp_y, divp_z, U, V, W, div):
    for k in range(lo[2], hi[2] + 1):
        for j in range(lo[1], hi[1] + 1):
            for i in range(lo[0], hi[0] + 1):
                div[i, j, k] = (
                    divp_x[i, j, k, 0] * U[i, j, k] + divp_x[i, j, k, 1] * U[i + 1, j, k]
                    + divp_y[i, j, k, 0] * V[i, j, k] + divp_y[i, j, k, 1] * V[i, j + 1, k]
                    + divp_z[i, j, k, 0] * W[i, j, k] + divp_z[i, j, k, 1] * W[i, j, k + 1]
                )


@njit(nogil=True)
def _gradient_kernel(divu_x, divv_y, divw_z, P, Px, Py, Pz):
    nx, ny, nz = P.shape
    for k in range(nz):
        for j in range(ny):
            for i in range(1, nx):
                Px[i, j, k] = divu_x[i, j, k, 0] * P[i - 1, j, k] + divu_x[i, j, k, 1] * P[i, j, k]
    for k in range(nz):
        for j in range(1, ny):
            for i in range(nx):
                Py[i, j, k] = divv_y[i, j, k, 0] * P[i, j - 1, k] + divv_y[i, j, k, 1] * P[i, j, k]
    for k in range(1, nz):
        for j in range(ny):
            for i in range(nx):
                Pz[i, j, k] = divw_z[i, j, k, 0] * P[i, j, k - 1] + divw_z[i, j, k, 1] * P[i, j, k]


def _owned_bounds(grid):
    lo = np.array([grid.imin_, grid.jmin_, grid.kmin_], dtype=np.int64)
    hi = np.array([grid.imax_, grid.jmax_, grid.kmax_], dtype=np.int64)
    return lo, hi


def velocity_divergence(grid, tables, U, V, W):
    """Divergence of the face velocities over the owned pressure cells.

    Blocked cells (VF = 0) yield exactly zero. Halo entries of the result
    are zero.
    """
    lo, hi = _owned_bounds(grid)
    div = np.zeros(grid.shape)
    _divergence_kernel(lo, hi, tables.divp_x, tables.divp_y, tables.divp_z, U, V, W, div)
    return div


def pressure_gradient(grid, tables, P):
    """Pressure gradient on the velocity faces.

    Uses the normal face-divergence coefficients, so domain-bounding faces of
    bounded directions get a zero gradient and the divergence of the result
    reproduces the assembled pressure Laplacian. Filled on every face with a
    valid lower neighbour (index >= 1); P halos must be up to date.

    Returns
    -------
    Px, Py, Pz : ndarray
        Full-range gradient components at the U, V and W faces.
    """
    Px = np.zeros(grid.shape)
    Py = np.zeros(grid.shape)
    Pz = np.zeros(grid.shape)
    _gradient_kernel(tables.divu_x, tables.divv_y, tables.divw_z, P, Px, Py, Pz)
    return Px, Py, Pz
