"""Tests for the explicit momentum time derivative."""

import numpy as np
import pytest

from fv.assembly.momentum_flux import momentum_derivative
from fv.discretization.interpolation import pair_min
from fv.discretization.operators import build_operators


def second_difference(f, axis):
    return np.roll(f, -1, axis) - 2.0 * f + np.roll(f, 1, axis)


class TestUniformFlow:
    def test_constant_velocity_has_no_derivative(self, periodic_grid):
        g = periodic_grid
        t = build_operators(g)
        U = np.full(g.shape, 1.3)
        V = np.full(g.shape, -0.4)
        W = np.full(g.shape, 0.8)
        dU, dV, dW = momentum_derivative(g, t, 1.2, 0.05, U, V, W, g.zeros())
        for d in (dU, dV, dW):
            assert np.allclose(d, 0.0, atol=1e-12)

    def test_halo_is_zero(self, box_grid, rng):
        g = box_grid
        t = build_operators(g)
        fields = [rng.standard_normal(g.shape) for _ in range(4)]
        mask = np.ones(g.shape, dtype=bool)
        mask[g.interior] = False
        for d in momentum_derivative(g, t, 1.0, 0.1, *fields):
            assert np.all(d[mask] == 0.0)


class TestPressureTerm:
    def test_pressure_gradient_drives_momentum(self, periodic_grid, rng):
        g = periodic_grid
        t = build_operators(g)
        P = g.sync(rng.standard_normal(g.shape))
        zero = g.zeros()
        dU, dV, dW = momentum_derivative(g, t, 1.0, 0.1, zero, zero, zero, P)

        own = g.interior
        i0, j0, k0 = g.imin, g.jmin, g.kmin
        expected_u = -(P - np.roll(P, 1, axis=0))
        expected_v = -(P - np.roll(P, 1, axis=1))
        expected_w = -(P - np.roll(P, 1, axis=2))
        # Unit spacing
        assert np.allclose(dU[own], expected_u[own])
        assert np.allclose(dV[own], expected_v[own])
        assert np.allclose(dW[own], expected_w[own])
        assert np.isclose(dU[i0, j0, k0], P[i0 - 1, j0, k0] - P[i0, j0, k0])


class TestViscousTerm:
    """Shear layers in every orientation exercise all three relabelled frames."""

    visc = 0.1

    def test_u_sheared_in_y(self, periodic_grid):
        g = periodic_grid
        t = build_operators(g)
        U = np.broadcast_to(np.sin(2.0 * np.pi * g.ym / 6.0)[None, :, None], g.shape).copy()
        zero = g.zeros()
        dU, dV, dW = momentum_derivative(g, t, 1.0, self.visc, U, zero, zero, zero)
        own = g.interior
        assert np.allclose(dU[own], self.visc * second_difference(U, 1)[own])
        assert np.allclose(dV[own], 0.0)
        assert np.allclose(dW[own], 0.0)

    def test_v_sheared_in_z(self, periodic_grid):
        g = periodic_grid
        t = build_operators(g)
        V = np.broadcast_to(np.sin(2.0 * np.pi * g.zm / 4.0)[None, None, :], g.shape).copy()
        zero = g.zeros()
        dU, dV, dW = momentum_derivative(g, t, 1.0, self.visc, zero, V, zero, zero)
        own = g.interior
        assert np.allclose(dV[own], self.visc * second_difference(V, 2)[own])
        assert np.allclose(dU[own], 0.0)
        assert np.allclose(dW[own], 0.0)

    def test_w_sheared_in_x(self, periodic_grid):
        g = periodic_grid
        t = build_operators(g)
        W = np.broadcast_to(np.sin(2.0 * np.pi * g.xm / 8.0)[:, None, None], g.shape).copy()
        zero = g.zeros()
        dU, dV, dW = momentum_derivative(g, t, 1.0, self.visc, zero, zero, W, zero)
        own = g.interior
        assert np.allclose(dW[own], self.visc * second_difference(W, 0)[own])
        assert np.allclose(dU[own], 0.0)
        assert np.allclose(dV[own], 0.0)


class TestConvectiveTerm:
    @pytest.mark.parametrize("rho, visc", [(2.0, 0.0), (2.0, 0.1)])
    def test_v_advected_by_uniform_u(self, periodic_grid, rho, visc):
        g = periodic_grid
        t = build_operators(g)
        c = 1.5
        U = np.full(g.shape, c)
        V = np.broadcast_to(np.sin(2.0 * np.pi * g.xm / 8.0)[:, None, None], g.shape).copy()
        dU, dV, dW = momentum_derivative(g, t, rho, visc, U, V, g.zeros(), g.zeros())

        own = g.interior
        central = 0.5 * (np.roll(V, -1, 0) - np.roll(V, 1, 0))
        expected = -rho * c * central + visc * second_difference(V, 0)
        assert np.allclose(dV[own], expected[own])
        assert np.allclose(dW[own], 0.0)


class TestCutCells:
    def test_blocked_faces_have_no_derivative(self, cylinder_grid, rng):
        g = cylinder_grid
        t = build_operators(g)
        U, V, W, P = (g.sync(rng.standard_normal(g.shape)) for _ in range(4))
        dU, dV, dW = momentum_derivative(g, t, 1.0, 0.01, U, V, W, P)

        own = g.interior
        for axis, d in enumerate((dU, dV, dW)):
            blocked = pair_min(g.VF, axis)[own] == 0.0
            assert np.all(d[own][blocked] == 0.0)
        assert np.any(pair_min(g.VF, 0)[own] == 0.0)

    def test_read_only_tables(self, box_grid, rng):
        g = box_grid
        t = build_operators(g).freeze()
        fields = [rng.standard_normal(g.shape) for _ in range(4)]
        dU, _, _ = momentum_derivative(g, t, 1.0, 0.1, *fields)
        assert np.all(np.isfinite(dU))
