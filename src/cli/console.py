"""Rich console output helpers."""

from rich.console import Console
from rich.table import Table

console = Console()


def ok(msg: str):
    """Print success message."""
    console.print(f"  [green]✓[/green] {msg}")


def header(msg: str):
    """Print bold header."""
    console.print(f"\n[bold]{msg}[/bold]")


def solver_summary(solver) -> Table:
    """Table with the solver parameters and its boundary conditions."""
    table = Table(title=f"Incompressible solver [{solver.name}]")
    table.add_column("Item", style="cyan")
    table.add_column("Value")

    grid = solver.grid
    table.add_row("grid", f"{grid.name} ({grid.nx} x {grid.ny} x {grid.nz})")
    table.add_row("periodic", ", ".join(str(p) for p in grid.periodicity))
    table.add_row("density", f"{solver.rho:.6e}")
    table.add_row("viscosity", f"{solver.visc:.6e}")
    table.add_row("pressure solver", f"{solver.psolv.method} (rtol={solver.psolv.tolerance:.1e})")
    for bc in solver.bcs:
        table.add_row(f"bc {bc.name}", f"{bc.type.name}, {bc.itr.n} cells")
    return table


def print_solver(solver):
    """Print the solver summary table."""
    console.print(solver_summary(solver))
