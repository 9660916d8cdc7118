"""Data structures for solver configuration and diagnostics.

- IncompParameters: solver configuration (logged to MLflow at start)
- FlowMaxima: monitoring maxima of the current fields
"""

from dataclasses import dataclass, asdict

import pandas as pd


# ========================================================
# Parameters (Input Configuration)
# ========================================================


@dataclass
class IncompParameters:
    """Incompressible solver parameters."""

    name: str = "UNNAMED_INCOMP"
    rho: float = 1.0
    visc: float = 0.0
    nx: int = 0
    ny: int = 0
    nz: int = 0
    xper: bool = False
    yper: bool = False
    zper: bool = False
    pressure_method: str = "bicgstab"
    pressure_tolerance: float = 1e-10

    def to_dataframe(self):
        return pd.DataFrame([asdict(self)])

    def to_mlflow(self):
        """Flat dict for mlflow.log_params."""
        return asdict(self)


# ========================================================
# Monitoring
# ========================================================


@dataclass
class FlowMaxima:
    """Maxima of |U|, |V|, |W|, |P| and |div| over the owned cells."""

    Umax: float = 0.0
    Vmax: float = 0.0
    Wmax: float = 0.0
    Pmax: float = 0.0
    divmax: float = 0.0

    def to_dataframe(self):
        return pd.DataFrame([asdict(self)])

    def to_mlflow(self):
        return asdict(self)
