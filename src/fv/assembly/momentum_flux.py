"""Explicit momentum time derivative on the staggered grid.

For each velocity component the fluxes on the six faces of its momentum cell
are evaluated first, then differenced with the face divergence operator:

    flux = -rho * itp(u_a) * itp(u_b) + visc * (grd(u_a) + grd(u_b)) [- P]

The convective part multiplies two independently interpolated velocities,
the viscous part is the symmetric Newtonian stress, and the pressure only
enters the flux normal to the component's own direction.

The kernel is written for the x-momentum equation. The y and z equations are
the same expression under the cyclic relabelling x -> y -> z -> x, so they
reuse it on transposed views of the fields and tables.
"""

import numpy as np
from numba import njit

# Axis order of the relabelled frames: (own, second, third) directions
_FRAMES = ((0, 1, 2), (1, 2, 0), (2, 0, 1))


@njit(nogil=True)
def _momentum_derivative_kernel(
    lo, hi, rho, visc,
    U, V, W, P,
    itp_cc, grd_cc,
    itp_ab, itp_ba, grd_ab, grd_ba,
    itp_ac, itp_ca, grd_ac, grd_ca,
    div_a, div_b, div_c,
    dUdt,
):
    """x-momentum derivative in a frame where U is the own component.

    ``itp_ab`` interpolates U along the second direction to the (a, b) edge,
    ``itp_ba`` interpolates V along the first direction to the same edge;
    ``_ac`` / ``_ca`` are the same pair for the third direction and W.
    """
    FX = np.zeros(U.shape)
    FY = np.zeros(U.shape)
    FZ = np.zeros(U.shape)

    # fluxes on every face surrounding the owned momentum cells
    for k in range(lo[2], hi[2] + 2):
        for j in range(lo[1], hi[1] + 2):
            for i in range(lo[0], hi[0] + 2):
                # Normal face: cell center i-1
                im = i - 1
                u_lo = U[im, j, k]
                u_hi = U[im + 1, j, k]
                u_c = itp_cc[im, j, k, 0] * u_lo + itp_cc[im, j, k, 1] * u_hi
                g_c = grd_cc[im, j, k, 0] * u_lo + grd_cc[im, j, k, 1] * u_hi
                FX[im, j, k] = -rho * u_c * u_c + visc * (g_c + g_c) - P[im, j, k]

                # Edge shared with the second-direction faces
                u_b = itp_ab[i, j, k, 0] * U[i, j - 1, k] + itp_ab[i, j, k, 1] * U[i, j, k]
                v_a = itp_ba[i, j, k, 0] * V[i - 1, j, k] + itp_ba[i, j, k, 1] * V[i, j, k]
                g_ub = grd_ab[i, j, k, 0] * U[i, j - 1, k] + grd_ab[i, j, k, 1] * U[i, j, k]
                g_va = grd_ba[i, j, k, 0] * V[i - 1, j, k] + grd_ba[i, j, k, 1] * V[i, j, k]
                FY[i, j, k] = -rho * u_b * v_a + visc * (g_ub + g_va)

                # Edge shared with the third-direction faces
                u_c3 = itp_ac[i, j, k, 0] * U[i, j, k - 1] + itp_ac[i, j, k, 1] * U[i, j, k]
                w_a = itp_ca[i, j, k, 0] * W[i - 1, j, k] + itp_ca[i, j, k, 1] * W[i, j, k]
                g_uc = grd_ac[i, j, k, 0] * U[i, j, k - 1] + grd_ac[i, j, k, 1] * U[i, j, k]
                g_wa = grd_ca[i, j, k, 0] * W[i - 1, j, k] + grd_ca[i, j, k, 1] * W[i, j, k]
                FZ[i, j, k] = -rho * u_c3 * w_a + visc * (g_uc + g_wa)

    # divergence of the fluxes over the owned momentum cells
    for k in range(lo[2], hi[2] + 1):
        for j in range(lo[1], hi[1] + 1):
            for i in range(lo[0], hi[0] + 1):
                dUdt[i, j, k] = (
                    div_a[i, j, k, 0] * FX[i - 1, j, k] + div_a[i, j, k, 1] * FX[i, j, k]
                    + div_b[i, j, k, 0] * FY[i, j, k] + div_b[i, j, k, 1] * FY[i, j + 1, k]
                    + div_c[i, j, k, 0] * FZ[i, j, k] + div_c[i, j, k, 1] * FZ[i, j, k + 1]
                )


def _frame(a, order):
    """View of a field (or table) with axes relabelled to ``order``."""
    if a.ndim == 4:
        return np.transpose(a, order + (3,))
    return np.transpose(a, order)


def momentum_derivative(grid, tables, rho, visc, U, V, W, P):
    """Explicit time derivative of rho*U, rho*V and rho*W.

    Halos of U, V, W and P must be up to date. Only the owned cells of the
    returned arrays are filled; halo entries are zero.

    Parameters
    ----------
    grid : StructuredGrid
        Geometry provider.
    tables : OperatorTables
        Operator tables built on ``grid``.
    rho, visc : float
        Constant density and dynamic viscosity.
    U, V, W, P : ndarray
        Full-range velocity components and pressure.

    Returns
    -------
    dUdt, dVdt, dWdt : ndarray
        Full-range momentum derivatives.
    """
    t = tables
    components = (U, V, W)
    itp = {
        (0, 0): t.itpu_x, (0, 1): t.itpu_y, (0, 2): t.itpu_z,
        (1, 0): t.itpv_x, (1, 1): t.itpv_y, (1, 2): t.itpv_z,
        (2, 0): t.itpw_x, (2, 1): t.itpw_y, (2, 2): t.itpw_z,
    }
    grd = {
        (0, 0): t.grdu_x, (0, 1): t.grdu_y, (0, 2): t.grdu_z,
        (1, 0): t.grdv_x, (1, 1): t.grdv_y, (1, 2): t.grdv_z,
        (2, 0): t.grdw_x, (2, 1): t.grdw_y, (2, 2): t.grdw_z,
    }
    div = {
        (0, 0): t.divu_x, (0, 1): t.divu_y, (0, 2): t.divu_z,
        (1, 0): t.divv_x, (1, 1): t.divv_y, (1, 2): t.divv_z,
        (2, 0): t.divw_x, (2, 1): t.divw_y, (2, 2): t.divw_z,
    }
    lo_all = np.array([grid.imin_, grid.jmin_, grid.kmin_], dtype=np.int64)
    hi_all = np.array([grid.imax_, grid.jmax_, grid.kmax_], dtype=np.int64)

    derivatives = []
    for order in _FRAMES:
        a, b, c = order
        out = np.zeros(grid.shape)
        _momentum_derivative_kernel(
            lo_all[list(order)], hi_all[list(order)], float(rho), float(visc),
            _frame(components[a], order),
            _frame(components[b], order),
            _frame(components[c], order),
            _frame(P, order),
            _frame(itp[a, a], order), _frame(grd[a, a], order),
            _frame(itp[a, b], order), _frame(itp[b, a], order),
            _frame(grd[a, b], order), _frame(grd[b, a], order),
            _frame(itp[a, c], order), _frame(itp[c, a], order),
            _frame(grd[a, c], order), _frame(grd[c, a], order),
            _frame(div[a, a], order), _frame(div[a, b], order), _frame(div[a, c], order),
            _frame(out, order),
        )
        derivatives.append(out)
    return tuple(derivatives)
