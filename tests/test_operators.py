"""Tests for the operator tables built from spacings and volume fraction."""

import numpy as np
import pytest

from fv.discretization.gradient.structured_gradient import cell_gradient, edge_gradient
from fv.discretization.interpolation import edge_interpolation, pair_min
from fv.discretization.operators import OperatorTables, build_operators
from meshing.structured_grid import create_structured_grid


class TestBuild:
    def test_thirty_tables(self, box_grid):
        tables = build_operators(box_grid)
        assert len(tables.names()) == 30
        for name, a in tables.items():
            assert a.shape == box_grid.shape + (2,), name
            assert a.dtype == np.float64

    def test_rebuild_is_bit_identical(self, cylinder_grid):
        a = build_operators(cylinder_grid)
        b = build_operators(cylinder_grid)
        assert a.equals(b)

    def test_equals_detects_change(self, box_grid):
        a = build_operators(box_grid)
        b = build_operators(box_grid)
        b.grdw_y[3, 3, 3, 1] += 1.0
        assert not a.equals(b)

    def test_freeze(self, box_grid):
        tables = build_operators(box_grid).freeze()
        with pytest.raises(ValueError):
            tables.itpu_x[3, 3, 3, 0] = 1.0

    def test_outer_layer_is_zero(self, box_grid):
        t = build_operators(box_grid)
        for name in ("itpu_x", "itpv_y", "itpw_z", "divp_x", "divp_y", "divp_z",
                     "grdu_x", "grdv_y", "grdw_z"):
            a = getattr(t, name)
            assert np.all(a[0] == 0.0) and np.all(a[-1] == 0.0), name
            assert np.all(a[:, 0] == 0.0) and np.all(a[:, :, -1] == 0.0), name
        assert np.all(t.itpu_y[0] == 0.0) and np.all(t.itpu_y[:, 0] == 0.0)
        assert np.all(t.divv_x[:, 0] == 0.0)
        assert np.all(t.grdw_x[:, :, 0] == 0.0) and np.all(t.grdw_x[0] == 0.0)


class TestFluidValues:
    """Uniform spacing h = 0.5 and VF = 1: every stencil is the textbook one."""

    @pytest.fixture
    def tables(self, box_grid):
        return build_operators(box_grid)

    def test_interpolation(self, tables, box_grid):
        own = box_grid.interior
        for name in ("itpu_x", "itpu_y", "itpv_z", "itpw_x"):
            assert np.allclose(getattr(tables, name)[own], 0.5), name

    def test_divergence(self, tables, box_grid):
        own = box_grid.interior
        for name in ("divp_x", "divp_y", "divp_z", "divu_y", "divv_x", "divw_y"):
            a = getattr(tables, name)[own]
            assert np.allclose(a[..., 0], -2.0), name
            assert np.allclose(a[..., 1], 2.0), name

    def test_gradient(self, tables, box_grid):
        own = box_grid.interior
        for name in ("grdu_x", "grdv_y", "grdu_y", "grdv_z", "grdw_x"):
            a = getattr(tables, name)[own]
            assert np.allclose(a[..., 0], -2.0), name
            assert np.allclose(a[..., 1], 2.0), name

    def test_constant_field_interpolates_exactly_on_stretched_grid(self, stretched_grid):
        t = build_operators(stretched_grid)
        # Linear interpolation weights sum to one on every interior edge
        s = t.itpu_y[stretched_grid.interior].sum(axis=-1)
        assert np.allclose(s, 1.0)

    def test_divu_x_uses_center_spacing(self, stretched_grid):
        g = stretched_grid
        t = build_operators(g)
        i = g.imin + 2
        assert np.allclose(t.divu_x[i, g.jmin:g.jmax + 1, g.kmin, 1], g.dxmi[i])
        assert np.allclose(t.divu_y[i, g.jmin:g.jmax + 1, g.kmin, 1], g.dyi[g.jmin:g.jmax + 1])


class TestBoundaryFaces:
    def test_bounded_faces_removed(self, box_grid):
        g = box_grid
        t = build_operators(g)
        assert np.all(t.divu_x[g.imin] == 0.0)
        assert np.all(t.divu_x[g.imax + 1] == 0.0)
        assert np.all(t.divv_y[:, g.jmin] == 0.0)
        assert np.all(t.divw_z[:, :, g.kmax + 1] == 0.0)
        # Faces next to them are untouched
        assert np.allclose(t.divu_x[g.imin + 1, g.jmin:g.jmax + 1, g.kmin:g.kmax + 1, 1], 2.0)

    def test_periodic_faces_kept(self, periodic_grid):
        g = periodic_grid
        t = build_operators(g)
        own = (slice(g.jmin, g.jmax + 1), slice(g.kmin, g.kmax + 1))
        assert np.allclose(t.divu_x[g.imin][own][..., 1], 1.0)
        assert np.allclose(t.divu_x[g.imax + 1][own][..., 0], -1.0)


class TestCutCells:
    @pytest.fixture
    def blocked_grid(self):
        g = create_structured_grid(6, 6, 6, Lx=6.0, Ly=6.0, Lz=6.0)
        VF = np.ones(g.shape)
        VF[4, 4, 4] = 0.0
        VF[4, 5, 4] = 0.5
        g.set_volume_fraction(VF)
        return g

    def test_gradient_drops_blocked_side(self, blocked_grid):
        grd = cell_gradient(blocked_grid, 0)
        # Cell 5 has a blocked lower neighbour
        assert grd[5, 4, 4, 0] == 0.0
        assert np.isclose(grd[5, 4, 4, 1], 1.0)
        # The blocked cell has no gradient at all
        assert np.all(grd[4, 4, 4] == 0.0)

    def test_blocked_cell_divergence_is_zero(self, blocked_grid):
        t = build_operators(blocked_grid)
        for name in ("divp_x", "divp_y", "divp_z", "itpu_x", "itpv_y", "itpw_z"):
            assert np.all(getattr(t, name)[4, 4, 4] == 0.0), name
        # Faces of the blocked cell carry no momentum divergence
        assert np.all(t.divu_x[4, 4, 4] == 0.0) and np.all(t.divu_x[5, 4, 4] == 0.0)

    def test_partial_cell_scales_divergence(self, blocked_grid):
        t = build_operators(blocked_grid)
        assert np.allclose(t.divp_x[4, 5, 4], [-0.5, 0.5])

    def test_edge_gradient_with_fully_blocked_footprint(self):
        g = create_structured_grid(6, 6, 4, Lx=6.0, Ly=6.0, Lz=4.0)
        VF = np.ones(g.shape)
        VF[3:5, 3:5, :] = 0.0
        g.set_volume_fraction(VF)
        grd = edge_gradient(g, 0, 1)
        # Both U faces on either side of the edge at (i=4, j=4) are blocked
        assert np.all(grd[4, 4] == 0.0)
        itp = edge_interpolation(g, 0, 1)
        assert np.all(itp[4, 4] == 0.0)

    def test_edge_gradient_one_sided(self):
        g = create_structured_grid(6, 6, 4, Lx=6.0, Ly=6.0, Lz=4.0)
        VF = np.ones(g.shape)
        VF[:, :4, :] = 0.0
        g.set_volume_fraction(VF)
        grd = edge_gradient(g, 0, 1)
        # Wall below j = 4: gradient over the half distance from the wall
        assert np.allclose(grd[4, 4, 3], [0.0, 2.0])

    def test_pair_min(self):
        VF = np.array([[[1.0]], [[0.25]], [[0.5]]])
        out = pair_min(VF, 0)
        assert np.array_equal(out.ravel(), [0.0, 0.25, 0.25])

    def test_tables_dataclass(self):
        assert "grdw_z" in OperatorTables.__dataclass_fields__
