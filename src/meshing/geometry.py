"""Volume-fraction generators for immersed geometry on a StructuredGrid.

The volume fraction of a cell is the share of its volume occupied by fluid
(1 = fluid, 0 = solid). Curved walls are resolved by sub-cell sampling.
"""

import numpy as np


def _subcell_points(faces, nsub):
    """Sub-cell sample coordinates, shape (ncells, nsub)."""
    t = (np.arange(nsub) + 0.5) / nsub
    return faces[:-1, None] + (faces[1:] - faces[:-1])[:, None] * t[None, :]


def cylinder_volume_fraction(grid, center, radius, axis=2, nsub=8):
    """Volume fraction of the fluid outside a solid cylinder.

    Parameters
    ----------
    grid : StructuredGrid
        Grid providing face coordinates (halos included).
    center : tuple of float
        Cylinder axis location in the two directions normal to ``axis``.
    radius : float
        Cylinder radius.
    axis : int
        Direction of the cylinder axis (0, 1 or 2).
    nsub : int
        Sub-cells per direction used for sampling.

    Returns
    -------
    VF : ndarray
        Full-range volume-fraction field.
    """
    if radius <= 0.0:
        raise ValueError(f"Cylinder radius must be positive, got {radius}")
    faces = (grid.x, grid.y, grid.z)
    a, b = [d for d in range(3) if d != axis]
    pa = _subcell_points(faces[a], nsub)
    pb = _subcell_points(faces[b], nsub)

    # (na, nsub, nb, nsub) sample grid in the cross-section plane
    r2 = (pa[:, :, None, None] - center[0]) ** 2 + (pb[None, None, :, :] - center[1]) ** 2
    fluid = (r2 > radius**2).mean(axis=(1, 3))

    VF = np.ones(grid.shape)
    VF_view = np.moveaxis(VF, (a, b), (0, 1))
    VF_view[...] = fluid[:, :, None]
    return VF


def wall_volume_fraction(grid, axis, position, solid_below=True):
    """Volume fraction for a planar wall normal to ``axis`` at ``position``.

    Cells cut by the plane get the exact fluid share of their width.
    """
    faces = (grid.x, grid.y, grid.z)[axis]
    width = faces[1:] - faces[:-1]
    if solid_below:
        fluid = np.clip((faces[1:] - position) / width, 0.0, 1.0)
    else:
        fluid = np.clip((position - faces[:-1]) / width, 0.0, 1.0)

    VF = np.ones(grid.shape)
    VF_view = np.moveaxis(VF, axis, 0)
    VF_view[...] = fluid.reshape((-1,) + (1,) * 2)
    return VF
