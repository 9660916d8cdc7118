"""
Staggered incompressible solver - projection check driver.

Builds the configured grid and immersed geometry, computes the momentum
derivative and the divergence of an initial velocity field, projects the
velocity onto a divergence-free field with one pressure Poisson solve and
logs the divergence before and after to MLflow.

Usage:
    uv run python main.py
    uv run python main.py grid=channel_cylinder
    uv run python main.py grid=periodic_box solver.visc=1e-3
"""

import logging
import os
import sys
from pathlib import Path

import hydra
import mlflow
import numpy as np
from dotenv import load_dotenv
from hydra.utils import instantiate
from omegaconf import DictConfig, OmegaConf

load_dotenv()
sys.path.insert(0, str(Path(__file__).parent / "src"))

from cli.console import header, ok, print_solver  # noqa: E402
from fv.core.boundary_conditions import BCType  # noqa: E402
from fv.discretization.interpolation import pair_min  # noqa: E402
from meshing.geometry import cylinder_volume_fraction  # noqa: E402
from solvers.metrics import divergence_norms  # noqa: E402

log = logging.getLogger(__name__)


def get_experiment_name(cfg: DictConfig) -> str:
    """Build full experiment name with optional prefix."""
    name = cfg.experiment_name
    prefix = cfg.mlflow.get("project_prefix", "")
    if prefix and not name.startswith("/"):
        return f"{prefix}/{name}"
    return name


def setup_mlflow(cfg: DictConfig) -> str:
    """Setup MLflow tracking and return experiment name."""
    tracking_uri = cfg.mlflow.get("tracking_uri", "./mlruns")
    if str(cfg.mlflow.get("mode", "")).lower() in ("files", "local"):
        os.environ.pop("MLFLOW_TRACKING_URI", None)
    os.environ["MLFLOW_TRACKING_URI"] = str(tracking_uri)
    mlflow.set_tracking_uri(tracking_uri)

    experiment_name = get_experiment_name(cfg)
    mlflow.set_experiment(experiment_name)
    return experiment_name


def build_grid(cfg: DictConfig):
    """Instantiate the grid and install the immersed geometry."""
    grid = instantiate(cfg.grid.mesh, _convert_="all")
    cylinder = cfg.grid.get("cylinder")
    if cylinder:
        VF = cylinder_volume_fraction(grid, **OmegaConf.to_container(cylinder))
        grid.set_volume_fraction(VF)
        log.info(f"Cylinder installed, fluid volume fraction {VF[grid.interior].mean():.4f}")
    return grid


def register_boundaries(solver):
    """Register the domain-bounding regions of the bounded directions."""
    g = solver.grid
    if not g.xper:
        solver.add_bcond("inflow", BCType.DIRICHLET, lambda g, i, j, k: i == g.imin)
        solver.add_bcond("outflow", BCType.NEUMANN, lambda g, i, j, k: i == g.imax + 1)
    if not g.yper:
        solver.add_bcond("bottom", BCType.DIRICHLET, lambda g, i, j, k: j == g.jmin - 1)
        solver.add_bcond("top", BCType.DIRICHLET, lambda g, i, j, k: j == g.jmax + 1)
    if not g.zper:
        solver.add_bcond("back", BCType.DIRICHLET, lambda g, i, j, k: k == g.kmin - 1)
        solver.add_bcond("front", BCType.DIRICHLET, lambda g, i, j, k: k == g.kmax + 1)


def initialize_velocity(solver, flow: str, magnitude: float):
    """Fill the initial velocity field of the example flow."""
    g = solver.grid
    if flow == "channel":
        # Uniform stream, zero inside the solid
        solver.U[...] = magnitude * pair_min(g.VF, 0)
    elif flow == "taylor_green":
        X, Y, Z = np.meshgrid(g.x[:-1], g.ym, g.zm, indexing="ij")
        solver.U[...] = magnitude * np.sin(X) * np.cos(Y) * np.cos(Z)
        X, Y, Z = np.meshgrid(g.xm, g.y[:-1], g.zm, indexing="ij")
        solver.V[...] = -magnitude * np.cos(X) * np.sin(Y) * np.cos(Z)
        # Perturbation so that the projection has something to remove
        solver.U[...] += 0.1 * magnitude * np.cos(Y)
        solver.U[...] *= 1.0 + 0.05 * np.sin(X)
    else:
        raise ValueError(f"Unknown example flow '{flow}'")
    for field in (solver.U, solver.V, solver.W):
        g.sync(field)


def project(solver):
    """Remove the divergence of the current velocity with one pressure solve."""
    g = solver.grid
    div = solver.get_divergence()
    phi = solver.psolv.solve(-g.vol * div)
    Px, Py, Pz = solver.get_pgrad(phi)
    solver.U -= Px
    solver.V -= Py
    solver.W -= Pz
    for field in (solver.U, solver.V, solver.W):
        g.sync(field)
    solver.P[...] = phi
    return solver.psolv.info


@hydra.main(config_path="conf", config_name="config", version_base=None)
def main(cfg: DictConfig) -> None:
    """Main entry point."""
    log.info(f"Grid: {cfg.grid.name}, solver: {cfg.solver.name}")
    log.info(f"MLflow experiment: {setup_mlflow(cfg)}")

    grid = build_grid(cfg)
    solver = instantiate(cfg.solver, grid=grid, _convert_="partial")
    register_boundaries(solver)
    initialize_velocity(solver, cfg.grid.flow, cfg.velocity)
    solver.print()
    print_solver(solver)

    with mlflow.start_run(run_name=f"{cfg.solver.name}_{cfg.grid.name}"):
        mlflow.log_params(solver.params.to_mlflow())
        mlflow.log_dict(OmegaConf.to_container(cfg), "config.yaml")

        header("Momentum derivative")
        dUdt, dVdt, dWdt = solver.get_dmomdt()
        own = grid.interior
        dmom = {
            "dUdt_max": float(np.abs(dUdt[own]).max()),
            "dVdt_max": float(np.abs(dVdt[own]).max()),
            "dWdt_max": float(np.abs(dWdt[own]).max()),
        }
        mlflow.log_metrics(dmom)
        ok(", ".join(f"{k} = {v:.3e}" for k, v in dmom.items()))

        header("Projection")
        before = divergence_norms(grid, solver.get_divergence())
        info = project(solver)
        after = divergence_norms(grid, solver.get_divergence())
        mlflow.log_metrics({f"{k}_before": v for k, v in before.items()})
        mlflow.log_metrics({f"{k}_after": v for k, v in after.items()})
        mlflow.log_metric("pressure_info", info)
        mlflow.log_metrics(solver.get_max().to_mlflow())
        ok(f"max |div| {before['div_linf']:.3e} -> {after['div_linf']:.3e}")

    log.info(f"Done: divergence L2 {before['div_l2']:.3e} -> {after['div_l2']:.3e}")


if __name__ == "__main__":
    main()
