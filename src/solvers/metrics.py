"""Shared norms for divergence and residual diagnostics."""

from __future__ import annotations

import numpy as np


# -----------------------------------------------------------------------------
# Norms
# -----------------------------------------------------------------------------


def discrete_l2_norm(values: np.ndarray, vol: np.ndarray | float) -> float:
    """Volume-weighted L2 norm, sqrt(sum(vol * values**2))."""
    return float(np.sqrt(np.sum(vol * np.abs(values) ** 2)))


def discrete_linf_norm(values: np.ndarray) -> float:
    """Maximum absolute value."""
    if values.size == 0:
        return 0.0
    return float(np.max(np.abs(values)))


def divergence_norms(grid, div: np.ndarray) -> dict[str, float]:
    """L2 and L-infinity norms of a divergence field over the owned cells."""
    owned = div[grid.interior]
    return {
        "div_l2": discrete_l2_norm(owned, grid.vol[grid.interior]),
        "div_linf": discrete_linf_norm(owned),
    }
