"""Pytest configuration and fixtures for the staggered incompressible solver tests."""

import sys
from pathlib import Path

import numpy as np
import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


@pytest.fixture
def periodic_grid():
    """Triply periodic uniform 8x6x4 grid with unit spacing."""
    from meshing.structured_grid import create_structured_grid

    return create_structured_grid(
        8, 6, 4, Lx=8.0, Ly=6.0, Lz=4.0, xper=True, yper=True, zper=True, name="periodic"
    )


@pytest.fixture
def box_grid():
    """Bounded uniform 6x5x4 box, h = 0.5."""
    from meshing.structured_grid import create_structured_grid

    return create_structured_grid(6, 5, 4, Lx=3.0, Ly=2.5, Lz=2.0, name="box")


@pytest.fixture
def stretched_grid():
    """Bounded in x and y with tanh stretching in y, periodic in z."""
    from meshing.structured_grid import create_structured_grid

    return create_structured_grid(
        8, 8, 3, Lx=2.0, Ly=1.0, Lz=0.3, zper=True, stretch=(0.0, 1.5, 0.0), name="stretched"
    )


@pytest.fixture
def cylinder_grid():
    """Channel periodic in z with an immersed cylinder."""
    from meshing.geometry import cylinder_volume_fraction
    from meshing.structured_grid import create_structured_grid

    grid = create_structured_grid(
        24, 12, 1, Lx=4.0, Ly=2.0, Lz=1.0 / 6.0, zper=True, name="cylinder"
    )
    grid.set_volume_fraction(cylinder_volume_fraction(grid, center=(1.5, 1.0), radius=0.45))
    return grid


@pytest.fixture
def rng():
    return np.random.default_rng(1234)
