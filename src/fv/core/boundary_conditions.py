"""Named boundary-condition regions of an incompressible solver.

A region is the set of grid cells selected by a locator predicate
``locator(grid, i, j, k) -> bool``, evaluated once over the full local range
(halo layers included) when the region is registered.
"""

import logging
from dataclasses import dataclass
from enum import IntEnum

import numpy as np

log = logging.getLogger(__name__)


class BCType(IntEnum):
    DIRICHLET = 1
    NEUMANN = 2


class Iterator:
    """Cell indices of a grid region, selected once by ``locator``."""

    def __init__(self, grid, name, locator):
        self.name = name
        selected = [
            (i, j, k)
            for k in range(grid.kmino_, grid.kmaxo_ + 1)
            for j in range(grid.jmino_, grid.jmaxo_ + 1)
            for i in range(grid.imino_, grid.imaxo_ + 1)
            if locator(grid, i, j, k)
        ]
        self.indices = np.array(selected, dtype=np.int64).reshape(-1, 3)
        self.n = len(self.indices)

    def __len__(self):
        return self.n

    def __iter__(self):
        return iter(map(tuple, self.indices))

    def mask(self, shape):
        """Boolean full-range mask of the region."""
        m = np.zeros(shape, dtype=bool)
        m[self.indices[:, 0], self.indices[:, 1], self.indices[:, 2]] = True
        return m

    def __repr__(self):
        return f"Iterator(name={self.name!r}, n={self.n})"


@dataclass(frozen=True)
class BoundaryCondition:
    name: str
    type: BCType
    itr: Iterator


class BoundaryConditionRegistry:
    """Insertion-ordered collection of boundary conditions.

    The registry only grows. Registering an existing name keeps the earlier
    region but lookups by name return the most recent registration.
    """

    def __init__(self, grid):
        self.grid = grid
        self._bcs = []

    def add(self, name, type, locator):
        """Register a new boundary-condition region and return it."""
        if name in self:
            log.warning(f"Boundary condition [{name}] already registered, the new region shadows it")
        bc = BoundaryCondition(name=name, type=BCType(type), itr=Iterator(self.grid, name, locator))
        if bc.itr.n == 0:
            log.warning(f"Boundary condition [{name}] selects no cells on grid [{self.grid.name}]")
        self._bcs.append(bc)
        log.debug(f"Boundary condition [{name}] ({bc.type.name}) on {bc.itr.n} cells")
        return bc

    def get(self, name):
        for bc in reversed(self._bcs):
            if bc.name == name:
                return bc
        raise KeyError(f"Boundary condition [{name}] not found, known: {self.names}")

    @property
    def names(self):
        return [bc.name for bc in self._bcs]

    def __iter__(self):
        return iter(self._bcs)

    def __len__(self):
        return len(self._bcs)

    def __contains__(self, name):
        return any(bc.name == name for bc in self._bcs)
