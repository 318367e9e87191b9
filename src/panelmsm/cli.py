"""Command-line interface."""

from pathlib import Path
from typing import List, Optional
import logging

import numpy as np
import pandas as pd
import typer
from rich.console import Console
from rich.progress import BarColumn, Progress, TextColumn, TimeRemainingColumn
from rich.table import Table

from panelmsm.core.data import PanelData
from panelmsm.core.errors import InvalidDimension, SamplerConfigError
from panelmsm.core.generator import build_generator, infer_n_states
from panelmsm.core.inference import METHODS, PanelInference
from panelmsm.core.simulation import simulate_panel

app = typer.Typer(help="PANELMSM: Bayesian multi-state models for panel data")
console = Console()


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging")):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@app.command()
def version():
    """Show PANELMSM version."""
    from panelmsm import __version__
    console.print(f"PANELMSM version {__version__}")


@app.command()
def simulate(
    rates: List[float] = typer.Option(..., "--rate", help="Transition rate, repeat S*(S-1) times"),
    horizon: int = typer.Option(50, help="Unit time steps per subject"),
    subjects: int = typer.Option(2, help="Number of subjects"),
    seed: Optional[int] = typer.Option(None, help="Random seed"),
    out: Path = typer.Option(Path("panel.csv"), help="Output CSV"),
):
    """Simulate panel observations from a generator."""
    try:
        Q = build_generator(rates, infer_n_states(len(rates)))
    except InvalidDimension as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)

    panel = simulate_panel(Q, horizon, subjects, rng=np.random.default_rng(seed))
    panel.to_csv(out, index=False)
    console.print(f"Wrote {len(panel)} observations for {subjects} subjects to {out}")


@app.command()
def sample(
    data_path: Path = typer.Argument(..., exists=True, help="CSV with subject, time, state"),
    method: str = typer.Option("metropolis", help=f"Sampler: {', '.join(METHODS)}"),
    samples: int = typer.Option(1000, help="Iterations"),
    step_size: float = typer.Option(0.5, help="Metropolis proposal sd"),
    epsilon: float = typer.Option(0.05, help="HMC leapfrog step size"),
    leapfrog_steps: int = typer.Option(10, "--leapfrog", help="HMC leapfrog steps"),
    start: Optional[List[float]] = typer.Option(None, "--start", help="Log-scale start value, repeat per parameter"),
    burn_in: int = typer.Option(0, help="Rows dropped before summarizing"),
    n_states: Optional[int] = typer.Option(None, help="State count (default: distinct observed states)"),
    time_scaled: bool = typer.Option(False, help="Use observed gaps instead of unit time"),
    seed: Optional[int] = typer.Option(None, help="Random seed"),
    chain_out: Optional[Path] = typer.Option(None, help="Write the log-scale chain to CSV"),
):
    """Sample the posterior over transition rates."""
    if method not in METHODS:
        console.print(f"[red]Error: unknown method '{method}'[/red]")
        raise typer.Exit(code=1)

    try:
        data = PanelData(pd.read_csv(data_path), n_states=n_states, metadata={"source": str(data_path)})
    except (ValueError, KeyError) as e:
        console.print(f"[red]Error reading {data_path}: {e}[/red]")
        raise typer.Exit(code=1)

    inference = PanelInference(data, time_scaled=time_scaled)
    tuning = {"step_size": step_size} if method == "metropolis" else {
        "epsilon": epsilon,
        "n_steps": leapfrog_steps,
    }

    progress = Progress(
        TextColumn("[cyan]{task.description}"),
        BarColumn(),
        TextColumn("{task.completed}/{task.total}"),
        TimeRemainingColumn(),
        console=console,
        transient=True,
    )
    try:
        with progress:
            task = progress.add_task(method, total=samples)
            result = inference.sample(
                method,
                num_samples=samples,
                start=start or None,
                burn_in=burn_in,
                rng=np.random.default_rng(seed),
                progress=lambda i, n: progress.update(task, completed=i),
                **tuning,
            )
    except (InvalidDimension, SamplerConfigError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)

    frame = result.summary.to_frame()
    table = Table(title=f"Posterior rates ({result.summary.n_draws} draws, {method})")
    for column in frame.columns:
        table.add_column(str(column), style="cyan" if column == "transition" else "green")
    for row in frame.itertuples(index=False):
        table.add_row(*(f"{v:.4f}" if isinstance(v, float) else str(v) for v in row))
    console.print(table)
    console.print(f"Acceptance rate: {result.acceptance_rate:.3f}")

    if chain_out is not None:
        columns = [f"theta_{k}" for k in range(result.chain.shape[1])]
        pd.DataFrame(result.chain, columns=columns).rename_axis("iteration").to_csv(chain_out)
        console.print(f"Chain written to {chain_out}")


if __name__ == "__main__":
    app()
