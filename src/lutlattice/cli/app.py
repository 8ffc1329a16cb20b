"""LutLattice CLI application.

Commands:
    generate    - Generate a lattice, apply a transform, write a .cube LUT
    inspect     - Show the header of a .cube file
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, TimeElapsedColumn

from lutlattice import __version__
from lutlattice.config import MAX_CUBE_SIZE
from lutlattice.errors import LutLatticeError

app = typer.Typer(
    name="lutlattice",
    help="Synthetic RGB lattice generator and 3D LUT writer.",
    no_args_is_help=True,
)
console = Console()

# Set up logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)


def version_callback(value: bool):
    if value:
        console.print(f"LutLattice v{__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False, "--version", "-V", help="Show version and exit.",
        callback=version_callback, is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
):
    if verbose:
        logging.getLogger("lutlattice").setLevel(logging.DEBUG)


_STAGE_WEIGHTS = {
    "generate": 20,
    "transform": 40,
    "export": 40,
}


@app.command()
def generate(
    size: str = typer.Argument(..., help="LUT grid size per axis (e.g. 33)."),
    output: Path = typer.Argument(..., help="Output .cube path. Must not exist."),
    domain_min: Optional[float] = typer.Option(
        None, "--min", help="Domain minimum. Overrides CUBE_MIN.",
    ),
    domain_max: Optional[float] = typer.Option(
        None, "--max", help="Domain maximum. Overrides CUBE_MAX.",
    ),
    precision: Optional[int] = typer.Option(
        None, "-p", "--precision", help="Fractional digits. Overrides CUBE_FLOAT_LENGTH.",
    ),
    comment: Optional[str] = typer.Option(
        None, "--comment", help="Header comment. Overrides CUBE_COMMENT.",
    ),
    transform: Optional[str] = typer.Option(
        None, "-t", "--transform",
        help="Transform callable as 'module:function' (default: identity).",
    ),
    max_size: Optional[int] = typer.Option(
        None, "--max-size", help=f"Largest accepted grid size (default {MAX_CUBE_SIZE}).",
    ),
):
    """Generate a lattice, pass it through a transform, and write a .cube LUT."""
    from lutlattice.core.environment import load_config
    from lutlattice.pipeline.runner import load_transform, run_lattice

    try:
        config = load_config(
            size,
            max_size=max_size,
            domain_min=domain_min,
            domain_max=domain_max,
            precision=precision,
            comment=comment,
        )
        transform_fn = load_transform(transform) if transform else None
    except LutLatticeError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)

    console.print(f"\n[bold]LutLattice Generation[/bold]")
    console.print(f"  Size:      {config.size}^3 = {config.num_points:,} nodes")
    console.print(f"  Domain:    [{config.domain_min:g}, {config.domain_max:g}]")
    console.print(f"  Precision: {config.precision}")
    console.print(f"  Transform: {transform or 'identity'}")
    console.print()

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TimeElapsedColumn(),
        console=console,
    ) as progress:
        task = progress.add_task("Generating LUT...", total=100)
        stages = list(_STAGE_WEIGHTS)

        def on_progress(stage: str, fraction: float, message: str):
            base = sum(_STAGE_WEIGHTS[s] for s in stages[:stages.index(stage)])
            pct = base + _STAGE_WEIGHTS[stage] * fraction
            progress.update(task, completed=pct,
                            description=f"{stage}: {message}" if message else stage)

        try:
            result = run_lattice(
                config, output, transform=transform_fn, progress_callback=on_progress,
            )
            progress.update(task, completed=100, description="Complete")
        except LutLatticeError as e:
            console.print(f"\n[red]Error:[/red] {e}")
            raise typer.Exit(code=1)

    console.print(f"\n[green]Output:[/green] {result.output_path}")
    total_time = result.diagnostics.get("total_time", 0)
    console.print(f"[dim]Total time: {total_time:.2f}s[/dim]\n")


@app.command()
def inspect(
    lut_file: Path = typer.Argument(..., help="LUT file to inspect (.cube)."),
    max_size: Optional[int] = typer.Option(
        None, "--max-size", help=f"Largest accepted grid size (default {MAX_CUBE_SIZE}).",
    ),
):
    """Show the header and value range of a .cube file."""
    from lutlattice.core.types import flat_index
    from lutlattice.io.cube import read_cube

    try:
        rgb, meta = read_cube(lut_file, max_size=max_size)
    except FileNotFoundError:
        console.print(f"[red]Error:[/red] File not found: {lut_file}")
        raise typer.Exit(code=1)
    except LutLatticeError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)

    table = Table(title=str(lut_file), show_header=True, header_style="bold")
    table.add_column("Field", style="cyan")
    table.add_column("Value", justify="right")

    N = meta["size"]
    table.add_row("Title", meta["title"])
    table.add_row("Size", f"{N}^3 = {N ** 3:,} nodes")
    table.add_row("Input range", f"{meta['domain_min']:g} .. {meta['domain_max']:g}")
    if meta["comment"]:
        table.add_row("Comment", meta["comment"])
    black = rgb[flat_index(0, 0, 0, N)]
    white = rgb[flat_index(N - 1, N - 1, N - 1, N)]
    table.add_row("Black node", " ".join(f"{v:.4f}" for v in black))
    table.add_row("White node", " ".join(f"{v:.4f}" for v in white))
    table.add_row("Output min", " ".join(f"{v:.4f}" for v in rgb.min(axis=0)))
    table.add_row("Output max", " ".join(f"{v:.4f}" for v in rgb.max(axis=0)))

    console.print(table)


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
