"""
StructuredGrid: geometry and decomposition layout for a staggered (MAC) grid.

This class defines the static geometry consumed by the discretization core:
face and center coordinates, spacings, cell volumes, the volume-fraction field
and the index bounds of the local block including its halo layers.

Indexing Conventions:
- All fields are numpy arrays over the full local range including halos,
  shape (nxo_, nyo_, nzo_) with nxo_ = nx_ + 2*no.
- Local indices run imino_ = 0 .. imaxo_ = nxo_ - 1; the owned cells are
  imin_ .. imax_ with imin_ = no.
- Global domain bounds (imin, imax, ...) are expressed in the same local frame.
- Face coordinate x[i] is the left face of cell i, xm[i] its center.
- dxm[i] is the distance between centers i-1 and i (defined from i = 1).
- Ghost cells of a bounded direction repeat the width of its boundary cell,
  ghost cells of a periodic direction are shifted images of the interior.

Staggering:
- P lives at [xm, ym, zm], U at [x, ym, zm], V at [xm, y, zm], W at [xm, ym, z].

Halo Exchange:
- sync() fills halos of periodic directions from the opposite side of the
  interior for a single-block grid. Bounded directions are left untouched.
"""

import logging

import numpy as np

log = logging.getLogger(__name__)


class StructuredGrid:
    def __init__(
        self,
        x,
        y,
        z,
        xper=False,
        yper=False,
        zper=False,
        nghost=2,
        VF=None,
        name="UNNAMED_GRID",
    ):
        self.name = name
        if nghost < 2:
            raise ValueError(f"Grid [{name}]: nghost must be at least 2, got {nghost}")
        self.no = int(nghost)

        # --- Periodicity ---
        self.xper = bool(xper)
        self.yper = bool(yper)
        self.zper = bool(zper)

        # --- Parallel layout (single block) ---
        self.npx = self.npy = self.npz = 1
        self.iproc = self.jproc = self.kproc = 0
        self.amroot = True

        # --- Coordinates ---
        self.x = self._extend_faces(np.asarray(x, dtype=np.float64), self.xper, "x")
        self.y = self._extend_faces(np.asarray(y, dtype=np.float64), self.yper, "y")
        self.z = self._extend_faces(np.asarray(z, dtype=np.float64), self.zper, "z")

        # --- Index bounds ---
        self.nx = self.nx_ = len(x) - 1
        self.ny = self.ny_ = len(y) - 1
        self.nz = self.nz_ = len(z) - 1
        no = self.no
        self.imino_, self.imin_ = 0, no
        self.jmino_, self.jmin_ = 0, no
        self.kmino_, self.kmin_ = 0, no
        self.imax_, self.imaxo_ = no + self.nx_ - 1, self.nx_ + 2 * no - 1
        self.jmax_, self.jmaxo_ = no + self.ny_ - 1, self.ny_ + 2 * no - 1
        self.kmax_, self.kmaxo_ = no + self.nz_ - 1, self.nz_ + 2 * no - 1
        self.imin, self.imax = self.imin_, self.imax_
        self.jmin, self.jmax = self.jmin_, self.jmax_
        self.kmin, self.kmax = self.kmin_, self.kmax_

        # --- Metrics ---
        self.xm, self.dx, self.dxi, self.dxm, self.dxmi = self._metrics(self.x)
        self.ym, self.dy, self.dyi, self.dym, self.dymi = self._metrics(self.y)
        self.zm, self.dz, self.dzi, self.dzm, self.dzmi = self._metrics(self.z)
        self.vol = (
            self.dx[:, None, None] * self.dy[None, :, None] * self.dz[None, None, :]
        )

        # --- Volume fraction ---
        if VF is None:
            self.VF = np.ones(self.shape)
        else:
            self.VF = self.sync(self._check_volume_fraction(VF))

    def _extend_faces(self, faces, periodic, direction):
        """Add nghost faces on each side of the interior face coordinates."""
        if faces.ndim != 1 or faces.size < 2:
            raise ValueError(
                f"Grid [{self.name}]: need at least one cell in {direction}"
            )
        if np.any(np.diff(faces) <= 0.0):
            raise ValueError(
                f"Grid [{self.name}]: {direction} coordinates must be strictly increasing"
            )
        n = faces.size - 1
        no = self.no
        if periodic and n < no:
            # Periodic images wrap more than once around a thin direction
            widths = np.diff(faces)
            left = faces[0] - np.cumsum(np.resize(widths[::-1], no))[::-1]
            right = faces[-1] + np.cumsum(np.resize(widths, no))
        elif periodic:
            length = faces[-1] - faces[0]
            left = faces[n - no : n] - length
            right = faces[1 : no + 1] + length
        else:
            # Ghost cells repeat the width of the boundary cell
            left = faces[0] - (faces[1] - faces[0]) * np.arange(no, 0, -1)
            right = faces[-1] + (faces[-1] - faces[-2]) * np.arange(1, no + 1)
        return np.concatenate([left, faces, right])

    @staticmethod
    def _metrics(faces):
        centers = 0.5 * (faces[:-1] + faces[1:])
        d = np.diff(faces)
        dm = np.empty_like(centers)
        dm[1:] = np.diff(centers)
        dm[0] = dm[1]
        return centers, d, 1.0 / d, dm, 1.0 / dm

    def _check_volume_fraction(self, VF):
        VF = np.array(VF, dtype=np.float64)
        if VF.shape != self.shape:
            raise ValueError(
                f"Grid [{self.name}]: VF shape {VF.shape} does not match {self.shape}"
            )
        if np.any(VF < 0.0) or np.any(VF > 1.0):
            raise ValueError(f"Grid [{self.name}]: VF must lie in [0, 1]")
        return VF

    # ------------------------------------------------------------------
    # Shapes and slices
    # ------------------------------------------------------------------

    @property
    def shape(self):
        """Shape of a full-range (halo-inclusive) field."""
        return (self.nx_ + 2 * self.no, self.ny_ + 2 * self.no, self.nz_ + 2 * self.no)

    @property
    def interior(self):
        """Slice tuple selecting the owned cells of a full-range field."""
        return (
            slice(self.imin_, self.imax_ + 1),
            slice(self.jmin_, self.jmax_ + 1),
            slice(self.kmin_, self.kmax_ + 1),
        )

    @property
    def periodicity(self):
        return (self.xper, self.yper, self.zper)

    @property
    def lengths(self):
        return (
            self.x[self.imax + 1] - self.x[self.imin],
            self.y[self.jmax + 1] - self.y[self.jmin],
            self.z[self.kmax + 1] - self.z[self.kmin],
        )

    def zeros(self):
        """Allocate a zeroed full-range field."""
        return np.zeros(self.shape, dtype=np.float64)

    def set_volume_fraction(self, VF):
        """Install a new volume-fraction field (halos synced)."""
        self.VF = self._check_volume_fraction(VF)
        self.sync(self.VF)

    # ------------------------------------------------------------------
    # Halo exchange
    # ------------------------------------------------------------------

    def sync(self, A):
        """Fill periodic halos of A in place and return it."""
        no = self.no
        for axis, (periodic, n) in enumerate(
            zip(self.periodicity, (self.nx_, self.ny_, self.nz_))
        ):
            if not periodic:
                continue
            B = np.moveaxis(A, axis, 0)
            # Wrap index by index so that directions thinner than the halo also work
            for m in range(no):
                B[no - 1 - m] = B[no + (n - 1 - m) % n]
                B[no + n + m] = B[no + m % n]
        return A

    def __repr__(self):
        return (
            f"StructuredGrid(name={self.name!r}, n=({self.nx}, {self.ny}, {self.nz}), "
            f"periodic={self.periodicity}, nghost={self.no})"
        )


def _stretched_faces(n, length, stretch):
    """Face coordinates on [0, length], tanh-clustered towards both ends."""
    s = np.linspace(-1.0, 1.0, n + 1)
    if stretch <= 0.0:
        return 0.5 * length * (s + 1.0)
    return 0.5 * length * (np.tanh(stretch * s) / np.tanh(stretch) + 1.0)


def create_structured_grid(
    nx,
    ny,
    nz,
    Lx=1.0,
    Ly=1.0,
    Lz=1.0,
    xper=False,
    yper=False,
    zper=False,
    stretch=(0.0, 0.0, 0.0),
    origin=(0.0, 0.0, 0.0),
    nghost=2,
    name="UNNAMED_GRID",
):
    """Create a Cartesian staggered grid.

    Parameters
    ----------
    nx, ny, nz : int
        Number of owned cells per direction.
    Lx, Ly, Lz : float
        Domain lengths.
    xper, yper, zper : bool
        Periodicity flags.
    stretch : tuple of float
        tanh clustering strength per direction (0 gives a uniform grid).
        Ignored in periodic directions.
    origin : tuple of float
        Lower corner of the domain.
    nghost : int
        Number of halo layers (at least 2).
    name : str
        Grid name used in log messages.

    Returns
    -------
    StructuredGrid
    """
    faces = []
    for n, L, per, beta, x0 in zip(
        (nx, ny, nz), (Lx, Ly, Lz), (xper, yper, zper), stretch, origin
    ):
        if n < 1:
            raise ValueError(f"Grid [{name}]: number of cells must be positive, got {n}")
        if L <= 0.0:
            raise ValueError(f"Grid [{name}]: domain length must be positive, got {L}")
        faces.append(x0 + _stretched_faces(n, L, 0.0 if per else beta))

    grid = StructuredGrid(
        *faces, xper=xper, yper=yper, zper=zper, nghost=nghost, name=name
    )
    log.info(f"Created {grid}")
    return grid
