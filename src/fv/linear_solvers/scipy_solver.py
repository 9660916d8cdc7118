"""Scipy-based pressure solver (BiCGSTAB or CG)."""

import logging

import numpy as np
from scipy.sparse import csr_matrix, diags
from scipy.sparse.linalg import bicgstab, cg

from ..assembly.pressure_correction_eq_assembly import STENCIL, laplacian_to_csr

log = logging.getLogger(__name__)

_METHODS = {"bicgstab": bicgstab, "cg": cg}


def scipy_solver(
    A_csr: csr_matrix,
    b_np: np.ndarray,
    method="bicgstab",
    tolerance=1e-10,
    max_iterations=1000,
    remove_nullspace=False,
    mask=None,
    left_nullspace=None,
):
    """Solve A x = b using a scipy Krylov method.

    Parameters
    ----------
    A_csr : csr_matrix
        Sparse matrix in CSR format.
    b_np : np.ndarray
        Right-hand side vector.
    method : {"bicgstab", "cg"}
        Krylov method (default: "bicgstab").
    tolerance : float, optional
        Relative convergence tolerance (default: 1e-10).
    max_iterations : int, optional
        Maximum iterations (default: 1000).
    remove_nullspace : bool, optional
        If True, makes the RHS orthogonal to the left null vector and removes
        the mean from the solution (for pressure eq).
    mask : np.ndarray of bool, optional
        Unknowns taking part in the nullspace removal (default: all).
    left_nullspace : np.ndarray, optional
        Left null vector of A. The RHS is made orthogonal to it (default:
        constant over ``mask``, i.e. mean removal).

    Returns
    -------
    x_np : np.ndarray
        Solution vector.
    info : int
        Solver status, 0 on convergence.
    """
    if method not in _METHODS:
        raise ValueError(f"Unknown linear solver method '{method}', expected one of {list(_METHODS)}")
    if mask is None:
        mask = np.ones(b_np.shape, dtype=bool)

    # Handle nullspace if requested (for pressure Poisson equation)
    b = b_np.copy()
    if remove_nullspace and mask.any():
        w = np.where(mask, 1.0, 0.0) if left_nullspace is None else left_nullspace
        b -= w * (np.dot(w, b) / np.dot(w, w))

    x, info = _METHODS[method](A_csr, b, rtol=tolerance, atol=0, maxiter=max_iterations)

    if info < 0:
        raise RuntimeError(f"{method} failed (info={info})")
    if info > 0:
        # Did not converge but we can still use the result
        log.warning(f"{method} did not converge in {info} iterations (rtol={tolerance})")

    # Remove nullspace component from solution if requested
    if remove_nullspace and mask.any():
        x[mask] -= np.mean(x[mask])

    return x, info


class PressureSolver:
    """Linear solver for the pressure Poisson equation on the owned cells.

    The caller installs the stencil offsets in ``stc`` and the operator image
    in ``opr`` (shape ``grid.shape + (7,)``), then calls :meth:`setup` once
    and :meth:`solve` as often as needed.
    """

    def __init__(self, grid, name="PRESSURE", method="bicgstab", tolerance=1e-10, max_iterations=1000):
        if method not in _METHODS:
            raise ValueError(f"Unknown linear solver method '{method}', expected one of {list(_METHODS)}")
        self.grid = grid
        self.name = name
        self.method = method
        self.tolerance = tolerance
        self.max_iterations = max_iterations

        self.stc = STENCIL.copy()
        self.opr = np.zeros(grid.shape + (len(self.stc),))

        self.A = None
        self.isolated = None
        self.nullspace = None
        self.info = None

    def setup(self):
        """Convert the installed operator to CSR.

        Rows of fully blocked cells are all zero; they get a unit diagonal and
        a zero right-hand side so the system stays solvable.
        """
        if self.stc.shape != (self.opr.shape[-1], 3):
            raise ValueError(
                f"Solver [{self.name}]: stencil map {self.stc.shape} does not match "
                f"operator with {self.opr.shape[-1]} entries"
            )
        A = laplacian_to_csr(self.grid, self.opr, self.stc)
        owned = self.opr[self.grid.interior]
        self.isolated = ~np.any(owned != 0.0, axis=-1).ravel(order="F")
        if self.isolated.any():
            A = (A + diags(self.isolated.astype(np.float64))).tocsr()
            log.info(f"Solver [{self.name}]: {int(self.isolated.sum())} blocked cells decoupled")
        # Rows scale with the cell volume fraction, so the left null vector is 1/VF
        VF = self.grid.VF[self.grid.interior].ravel(order="F")
        self.nullspace = np.zeros_like(VF)
        np.divide(1.0, VF, out=self.nullspace, where=~self.isolated & (VF > 0.0))
        fluid = VF[~self.isolated]
        if self.method == "cg" and fluid.size and fluid.min() < fluid.max():
            log.warning(
                f"Solver [{self.name}]: cg needs a symmetric operator but the volume fraction "
                f"is not uniform over the fluid cells, use bicgstab"
            )

        self.A = A
        log.debug(f"Solver [{self.name}]: {A.shape[0]} unknowns, {A.nnz} non-zeros")
        return self

    def solve(self, rhs, sol=None):
        """Solve opr * sol = rhs over the owned cells.

        Parameters
        ----------
        rhs : ndarray
            Full-range right-hand side, only the owned cells are read.
        sol : ndarray, optional
            Full-range array receiving the solution (allocated if omitted).

        Returns
        -------
        sol : ndarray
            Full-range solution with periodic halos synced.
        """
        if self.A is None:
            raise RuntimeError(f"Solver [{self.name}]: setup() must be called before solve()")
        grid = self.grid
        b = rhs[grid.interior].ravel(order="F").copy()
        b[self.isolated] = 0.0

        # Pressure is only defined up to a constant on the fluid cells
        x, self.info = scipy_solver(
            self.A,
            b,
            method=self.method,
            tolerance=self.tolerance,
            max_iterations=self.max_iterations,
            remove_nullspace=True,
            mask=~self.isolated,
            left_nullspace=self.nullspace,
        )

        if sol is None:
            sol = grid.zeros()
        sol[grid.interior] = x.reshape((grid.nx_, grid.ny_, grid.nz_), order="F")
        return grid.sync(sol)
