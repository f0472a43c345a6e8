"""panscan CLI — terminal interface built with Typer + Rich."""

from __future__ import annotations

import asyncio
import json
from typing import Optional, Tuple

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from panscan import __version__
from panscan.core.config import Config, load_config
from panscan.modules.wildcard import WildcardModule, WildcardReport, WildcardSession
from panscan.utils.helpers import is_valid_domain, normalise_domain
from panscan.utils.logger import configure_logging, get_logger

app = typer.Typer(
    name="panscan",
    help="[bold cyan]panscan[/] — wildcard DNS detection for subdomain brute-forcing",
    rich_markup_mode="rich",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)
logger = get_logger(__name__)


def _print_banner() -> None:
    """Print the panscan banner."""
    console.print(
        Panel(
            Text("panscan", style="bold cyan", justify="center"),
            subtitle=f"[dim]v{__version__} — wildcard DNS detector[/]",
            border_style="cyan",
            expand=False,
        )
    )


def _prepare(target: str, config_file: Optional[str], verbose: bool) -> Tuple[str, Config]:
    """Validate *target* and load configuration, exiting on a bad domain."""
    domain = normalise_domain(target)
    if not is_valid_domain(domain):
        err_console.print(f"[red]Invalid domain: {target!r}[/]")
        raise typer.Exit(1)
    cfg = load_config(config_file)
    configure_logging(
        verbose=verbose or cfg.general.verbose, log_file=cfg.general.log_file
    )
    return domain, cfg


# ---------------------------------------------------------------------------
# probe command
# ---------------------------------------------------------------------------


@app.command()
def probe(
    target: str = typer.Option(..., "--target", "-t", help="Root domain to probe"),
    as_json: bool = typer.Option(False, "--json", help="Print raw results as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    config_file: Optional[str] = typer.Option(None, "--config", help="Custom config file"),
) -> None:
    """[bold]Probe a domain's authoritative servers for wildcard DNS.[/]

    Examples:

        panscan probe --target example.com

        panscan probe --target example.com --json
    """
    domain, cfg = _prepare(target, config_file, verbose)
    if not as_json:
        _print_banner()
        console.print(f"[bold green]►[/] Probing [bold]{domain}[/] for wildcard DNS")

    result = asyncio.run(WildcardModule().run(domain, cfg))
    if result.error:
        err_console.print(f"[red]Probe failed: {result.error}[/]")
        raise typer.Exit(1)

    if as_json:
        console.print_json(json.dumps(result.to_dict()))
    else:
        _display_results(result)


def _display_results(result: WildcardReport) -> None:
    """Render probe results as Rich tables."""
    console.print(f"[dim]Probe domain:[/] {result.probe_domain}")

    servers = Table(title="Authoritative Servers", border_style="dim")
    servers.add_column("Server", style="bold")
    for server in result.servers:
        servers.add_row(server)
    console.print(servers)

    if not result.wildcard:
        console.print(f"[bold green]✓[/] No wildcard DNS detected for {result.target}")
        return

    records = Table(title="Wildcard Records", border_style="dim")
    records.add_column("Type", style="bold")
    records.add_column("Value")
    for record in result.records:
        value = record.target if record.type == "CNAME" else ", ".join(record.ips)
        records.add_row(record.type, value)
    console.print(records)

    blacklist = Table(title="Blacklist", border_style="dim")
    blacklist.add_column("Value", style="bold")
    blacklist.add_column("TTL", justify="right")
    for value, ttl in sorted(result.blacklist.items()):
        blacklist.add_row(value, str(ttl))
    console.print(blacklist)
    console.print(
        f"[bold yellow]⚠[/] Wildcard DNS detected for {result.target} "
        f"({result.duration:.1f}s)"
    )


# ---------------------------------------------------------------------------
# check command
# ---------------------------------------------------------------------------


@app.command()
def check(
    target: str = typer.Option(..., "--target", "-t", help="Root domain to probe"),
    record: str = typer.Option(..., "--record", "-r", help="CNAME target or IP to classify"),
    ttl: int = typer.Option(..., "--ttl", help="TTL observed for the record"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    config_file: Optional[str] = typer.Option(None, "--config", help="Custom config file"),
) -> None:
    """[bold]Classify one DNS answer as wildcard noise or a genuine record.[/]

    Examples:

        panscan check --target example.com --record 1.2.3.4 --ttl 300
    """
    domain, cfg = _prepare(target, config_file, verbose)
    verdict = asyncio.run(_classify(domain, cfg, record, ttl))
    if verdict:
        console.print(f"[yellow]wildcard[/] {record} (ttl={ttl})")
    else:
        console.print(f"[green]genuine[/] {record} (ttl={ttl})")


async def _classify(domain: str, cfg: Config, record: str, ttl: int) -> bool:
    async with WildcardSession(domain, cfg) as session:
        await session.start()
        verdict = session.is_wildcard(record, ttl)
    logger.debug("%s ttl=%d under %s -> wildcard=%s", record, ttl, domain, verdict)
    return verdict


# ---------------------------------------------------------------------------
# config / version commands
# ---------------------------------------------------------------------------


@app.command()
def config(
    config_file: Optional[str] = typer.Option(None, "--config", help="Config file path"),
) -> None:
    """[bold]Show the effective configuration.[/]"""
    cfg = load_config(config_file)
    console.print_json(cfg.model_dump_json(indent=2))


@app.command()
def version() -> None:
    """[bold]Show panscan version information.[/]"""
    console.print(f"[bold cyan]panscan[/] version [bold]{__version__}[/]")


def main() -> None:
    """Entry point registered in pyproject.toml."""
    app()


if __name__ == "__main__":
    main()
