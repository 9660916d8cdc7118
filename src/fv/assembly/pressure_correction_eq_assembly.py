"""Pressure Poisson operator of the staggered incompressible discretization.

The operator is the composition of the cell divergence (divp_*) with the
pressure gradient on the velocity faces (divu_x, divv_y, divw_z), scaled by
-vol so that the diagonal is positive. It is stored as a 7-point stencil
image ``opr[i, j, k, s]`` over the owned cells, with the stencil offsets given
by ``STENCIL[s]``.
"""

import numpy as np
from numba import njit
from scipy.sparse import coo_matrix

# Stencil offsets: center, +x, -x, +y, -y, +z, -z
STENCIL = np.array(
    [
        [0, 0, 0],
        [+1, 0, 0],
        [-1, 0, 0],
        [0, +1, 0],
        [0, -1, 0],
        [0, 0, +1],
        [0, 0, -1],
    ],
    dtype=np.int64,
)


def assemble_pressure_laplacian(grid, tables):
    """Assemble the 7-point pressure Laplacian image on the owned cells.

    For uniform unit volume fraction the rows sum to zero and the operator
    is symmetric; cut cells only scale coefficients, fully blocked cells
    produce all-zero rows.

    Parameters
    ----------
    grid : StructuredGrid
        Geometry provider.
    tables : OperatorTables
        Operator tables built on ``grid``.

    Returns
    -------
    opr : ndarray, shape (nxo, nyo, nzo, 7)
        Stencil coefficients, zero outside the owned range.
    """
    i0, i1 = grid.imin_, grid.imax_ + 1
    j0, j1 = grid.jmin_, grid.jmax_ + 1
    k0, k1 = grid.kmin_, grid.kmax_ + 1
    own = (slice(i0, i1), slice(j0, j1), slice(k0, k1))

    # Face gradient coefficients at the lower and upper face of each owned cell
    gx_lo = tables.divu_x[i0:i1, j0:j1, k0:k1]
    gx_hi = tables.divu_x[i0 + 1:i1 + 1, j0:j1, k0:k1]
    gy_lo = tables.divv_y[i0:i1, j0:j1, k0:k1]
    gy_hi = tables.divv_y[i0:i1, j0 + 1:j1 + 1, k0:k1]
    gz_lo = tables.divw_z[i0:i1, j0:j1, k0:k1]
    gz_hi = tables.divw_z[i0:i1, j0:j1, k0 + 1:k1 + 1]

    dx = tables.divp_x[own]
    dy = tables.divp_y[own]
    dz = tables.divp_z[own]

    opr = np.zeros(grid.shape + (len(STENCIL),))
    o = opr[own]
    o[..., 0] = (
        dx[..., 1] * gx_hi[..., 0] + dx[..., 0] * gx_lo[..., 1]
        + dy[..., 1] * gy_hi[..., 0] + dy[..., 0] * gy_lo[..., 1]
        + dz[..., 1] * gz_hi[..., 0] + dz[..., 0] * gz_lo[..., 1]
    )
    o[..., 1] = dx[..., 1] * gx_hi[..., 1]
    o[..., 2] = dx[..., 0] * gx_lo[..., 0]
    o[..., 3] = dy[..., 1] * gy_hi[..., 1]
    o[..., 4] = dy[..., 0] * gy_lo[..., 0]
    o[..., 5] = dz[..., 1] * gz_hi[..., 1]
    o[..., 6] = dz[..., 0] * gz_lo[..., 0]

    # Positive definite sign convention
    o *= -grid.vol[own][..., None]
    return opr


@njit()
def _stencil_to_coo(opr, stc, lo, n, periodic):
    """COO triplets of the owned-cell stencil image.

    Neighbours across a periodic direction wrap to the other side of the
    domain, neighbours outside a bounded direction are dropped.
    """
    nx, ny, nz = n[0], n[1], n[2]
    ncell = nx * ny * nz
    nst = stc.shape[0]

    max_nnz = ncell * nst
    row = np.zeros(max_nnz, dtype=np.int64)
    col = np.zeros(max_nnz, dtype=np.int64)
    data = np.zeros(max_nnz, dtype=np.float64)

    idx = 0
    for k in range(nz):
        for j in range(ny):
            for i in range(nx):
                r = i + nx * (j + ny * k)
                for s in range(nst):
                    a = opr[lo[0] + i, lo[1] + j, lo[2] + k, s]
                    if a == 0.0:
                        continue
                    ii = i + stc[s, 0]
                    jj = j + stc[s, 1]
                    kk = k + stc[s, 2]
                    if ii < 0 or ii >= nx:
                        if not periodic[0]:
                            continue
                        ii = ii % nx
                    if jj < 0 or jj >= ny:
                        if not periodic[1]:
                            continue
                        jj = jj % ny
                    if kk < 0 or kk >= nz:
                        if not periodic[2]:
                            continue
                        kk = kk % nz
                    row[idx] = r
                    col[idx] = ii + nx * (jj + ny * kk)
                    data[idx] = a
                    idx += 1

    return row[:idx], col[:idx], data[:idx]


def laplacian_to_csr(grid, opr, stc=STENCIL):
    """Convert a stencil image over the owned cells to a CSR matrix.

    Unknowns are numbered with i fastest: ``i + nx_ * (j + ny_ * k)`` in
    owned-cell coordinates. Duplicate entries (a periodic direction one cell
    wide) are summed.
    """
    lo = np.array([grid.imin_, grid.jmin_, grid.kmin_], dtype=np.int64)
    n = np.array([grid.nx_, grid.ny_, grid.nz_], dtype=np.int64)
    periodic = np.array([grid.xper, grid.yper, grid.zper], dtype=np.bool_)
    row, col, data = _stencil_to_coo(
        np.ascontiguousarray(opr), np.asarray(stc, dtype=np.int64), lo, n, periodic
    )
    ncell = int(n.prod())
    return coo_matrix((data, (row, col)), shape=(ncell, ncell)).tocsr()
