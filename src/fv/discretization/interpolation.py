"""Volume-fraction weighted velocity interpolation coefficients.

Two families on the staggered grid:

- cell interpolation: face velocity of component ``axis`` averaged to the cell
  center [xm, ym, zm] (itpu_x, itpv_y, itpw_z)
- edge interpolation: face velocity of component ``comp`` interpolated along
  ``axis`` to the cell edge shared by the ``comp`` and ``axis`` faces
  (itpu_y, itpv_x, itpv_z, itpw_y, itpw_x, itpu_z)

All coefficient arrays have shape ``grid.shape + (2,)``; entry 0 weights the
lower stencil point, entry 1 the upper one.
"""

import numpy as np


def pair_min(VF, axis):
    """min(VF[i-1], VF[i]) along ``axis``, stored at index i (i >= 1).

    Index 0 along ``axis`` is set to zero.
    """
    out = np.zeros_like(VF)
    v = np.moveaxis(VF, axis, 0)
    o = np.moveaxis(out, axis, 0)
    o[1:] = np.minimum(v[:-1], v[1:])
    return out


def centers_and_faces(grid, axis):
    """(faces, centers, inverse center spacing) for direction ``axis``."""
    if axis == 0:
        return grid.x, grid.xm, grid.dxmi
    if axis == 1:
        return grid.y, grid.ym, grid.dymi
    if axis == 2:
        return grid.z, grid.zm, grid.dzmi
    raise ValueError(f"axis must be 0, 1 or 2, got {axis}")


def cell_interpolation(grid, axis):
    """Interpolation of the ``axis`` velocity component to cell centers.

    itp[i] = 0.5 * VF[i] * [min(VF[i-1:i]), min(VF[i:i+1])]
    """
    VF = grid.VF
    itp = np.zeros(grid.shape + (2,))
    v = np.moveaxis(VF, axis, 0)
    t = np.moveaxis(itp, axis, 0)

    c = v[1:-1, 1:-1, 1:-1]
    m = v[:-2, 1:-1, 1:-1]
    p = v[2:, 1:-1, 1:-1]
    t[1:-1, 1:-1, 1:-1, 0] = 0.5 * c * np.minimum(m, c)
    t[1:-1, 1:-1, 1:-1, 1] = 0.5 * c * np.minimum(c, p)
    return itp


def edge_interpolation(grid, comp, axis):
    """Interpolation of the ``comp`` velocity component along ``axis`` to edges.

    The weight is an inverse-distance linear interpolation between the two
    cell centers bounding the edge, scaled by the minimum volume fraction
    over the 2x2 footprint of cells sharing the edge:

    itp[j] = min(VF 2x2) * dymi[j] * [ym[j] - y[j], y[j] - ym[j-1]]

    Defined from index 1 in both ``comp`` and ``axis`` directions.
    """
    if comp == axis:
        raise ValueError("edge interpolation needs two different directions")
    faces, centers, dmi = centers_and_faces(grid, axis)
    n = centers.size

    # 2x2 footprint minimum at edge (comp-face i, axis-face j)
    footprint = pair_min(pair_min(grid.VF, comp), axis)

    shape = [1, 1, 1]
    shape[axis] = n - 1
    w_lo = (dmi[1:] * (centers[1:] - faces[1:n])).reshape(shape)
    w_hi = (dmi[1:] * (faces[1:n] - centers[:-1])).reshape(shape)

    itp = np.zeros(grid.shape + (2,))
    sl = [slice(None)] * 3
    sl[axis] = slice(1, None)
    sl = tuple(sl)
    itp[sl + (0,)] = footprint[sl] * w_lo
    itp[sl + (1,)] = footprint[sl] * w_hi
    return itp
