"""Tests for the divergence diagnostics norms."""

import numpy as np

from solvers.metrics import (
    discrete_l2_norm,
    discrete_linf_norm,
    divergence_norms,
)


def test_l2_norm_is_volume_weighted():
    values = np.array([1.0, -2.0, 2.0])
    assert np.isclose(discrete_l2_norm(values, 0.25), 1.5)
    assert np.isclose(discrete_l2_norm(values, np.array([1.0, 0.0, 0.0])), 1.0)


def test_empty_linf():
    assert discrete_linf_norm(np.array([])) == 0.0


def test_divergence_norms_ignore_halo(box_grid):
    div = box_grid.zeros()
    div[0, 0, 0] = 10.0
    div[box_grid.imin, box_grid.jmin, box_grid.kmin] = 2.0
    norms = divergence_norms(box_grid, div)
    assert norms["div_linf"] == 2.0
    assert np.isclose(norms["div_l2"], np.sqrt(0.125 * 4.0))
