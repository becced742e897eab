"""
Entrypoint for the order simulator.

    ordersim install [--generate N]   seed identities, arm the first order
    ordersim run                      long-running order loop
    ordersim generate                 create one order now
    ordersim settings                 show effective synthesis settings
    ordersim uninstall                clear the pending order
"""

import json
from typing import Optional

import typer
from rich.console import Console

from apps.simulator.src.core.bootstrap import bootstrap
from apps.simulator.src.core.config import get_runtime_settings, load_simulator_settings
from apps.simulator.src.service.simulator_service import SimulatorService
from libs.config import AppConfig
from libs.observability import init_observability

console = Console()

app = typer.Typer(
    name="ordersim",
    help="Synthesize fake storefront orders on a randomized schedule.",
    add_completion=False,
    no_args_is_help=True,
)


def _service() -> SimulatorService:
    """Initialize observability and build the service."""
    app_cfg = AppConfig.load()
    init_observability(level=app_cfg.log_level_number(), cfg=app_cfg.otel)
    return bootstrap(get_runtime_settings())


@app.command(help="Seed the identity pool and arm the first fire event.")
def install(
    generate: Optional[int] = typer.Option(
        None, "--generate", min=1, help="Generate N identities with Faker instead of the bundled set."
    ),
    seed: Optional[int] = typer.Option(None, "--seed", help="Faker seed for --generate."),
) -> None:
    fire_at = _service().install(generate=generate, seed=seed)
    if fire_at is None:
        console.print("[yellow]Installed. Orders per period is 0, nothing scheduled.[/yellow]")
    else:
        console.print(f"[green]Installed. Next order at {fire_at} (epoch seconds).[/green]")


@app.command(help="Clear the pending fire event.")
def uninstall() -> None:
    _service().uninstall()
    console.print("Pending order cleared.")


@app.command(help="Run the order loop until interrupted.")
def run(
    max_runs: Optional[int] = typer.Option(
        None, "--max-runs", min=1, help="Stop after this many timer-triggered orders."
    ),
) -> None:
    _service().run(max_runs=max_runs)


@app.command(help="Generate one simulated order now.")
def generate() -> None:
    result = _service().generate_now()
    if result.ok:
        console.print(
            f"[green]Simulated order {result.order_id} has been created successfully "
            f"({result.status.value}).[/green]"
        )
        return
    console.print(f"[red]Simulated order failed: {result.error}: {result.message}[/red]")
    raise typer.Exit(code=1)


@app.command(help="Print the effective synthesis settings as JSON.")
def settings() -> None:
    cfg = load_simulator_settings()
    console.print_json(json.dumps(cfg.model_dump(mode="json")))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
