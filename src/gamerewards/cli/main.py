#!/usr/bin/env python3
"""
Gaming Rewards CLI

Talks to a running economics API:
- Standing screening and reward splits
- Staking, unstaking and stake books
- Protocol staking stats and sustainability status
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

import click
import requests
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from gamerewards.core.config import Config

logger = logging.getLogger(__name__)
console = Console()


def _api_request(api_url: str, method: str, endpoint: str, **kwargs) -> Dict[str, Any]:
    """Make HTTP request to the economics API."""
    url = f"{api_url.rstrip('/')}/{endpoint.lstrip('/')}"
    try:
        resp = requests.request(method, url, timeout=Config.REQUEST_TIMEOUT, **kwargs)
    except requests.exceptions.RequestException as e:
        raise click.ClickException(f"API error: {e}")

    try:
        data = resp.json()
    except ValueError:
        data = None

    if resp.status_code >= 400:
        if isinstance(data, dict) and data.get("error"):
            raise click.ClickException(f"{data['error']} ({data.get('code', resp.status_code)})")
        raise click.ClickException(f"API error: HTTP {resp.status_code}")
    if not isinstance(data, dict):
        raise click.ClickException("API error: response is not a JSON object")
    return data


def _emit_json(ctx: click.Context, data: Dict[str, Any]) -> bool:
    if ctx.obj.get("json_output"):
        click.echo(json.dumps(data, indent=2))
        return True
    return False


@click.group()
@click.option("--api-url", default=Config.API_URL, show_default=True, help="Economics API base URL")
@click.option("--json", "json_output", is_flag=True, help="Print raw JSON responses")
@click.pass_context
def cli(ctx: click.Context, api_url: str, json_output: bool):
    """Gaming rewards economics commands."""
    ctx.ensure_object(dict)
    ctx.obj["api_url"] = api_url
    ctx.obj["json_output"] = json_output


# === STANDING / REWARDS ===

@cli.command("classify")
@click.argument("signals_file", type=click.File("r"))
@click.pass_context
def classify(ctx: click.Context, signals_file):
    """Classify player standing from a JSON file of signals ('-' for stdin)."""
    try:
        signals = json.load(signals_file)
    except json.JSONDecodeError as e:
        raise click.ClickException(f"Signals file is not valid JSON: {e}")

    data = _api_request(ctx.obj["api_url"], "POST", "/standing/classify", json={"signals": signals})
    if _emit_json(ctx, data):
        return

    verdict = data.get("verdict", {})
    color = "green" if verdict.get("is_valid") else "red"
    console.print(Panel(
        f"[{color}]Standing:[/] {verdict.get('standing')}\n"
        f"[cyan]Reason:[/] {verdict.get('reason')}\n"
        f"[dim]{verdict.get('message', '')}[/]",
        title="Player Standing", border_style=color
    ))


@cli.command("distribute")
@click.argument("amount", type=int)
@click.pass_context
def distribute(ctx: click.Context, amount: int):
    """Split a gross reward AMOUNT (minor units)."""
    data = _api_request(ctx.obj["api_url"], "POST", "/rewards/distribute", json={"amount": amount})
    if _emit_json(ctx, data):
        return

    table = Table(title=f"Reward Split ({data.get('gross_amount', amount)})", box=box.ROUNDED)
    table.add_column("Bucket", style="cyan")
    table.add_column("Amount", style="green", justify="right")
    table.add_row("Instant claim", str(data.get("instant_claim", 0)))
    table.add_row("Staking incentive", str(data.get("staking_incentive", 0)))
    table.add_row("Protocol operations", str(data.get("protocol_operations", 0)))
    for name, value in data.get("operations_breakdown", {}).items():
        table.add_row(f"  {name}", str(value), style="dim")
    console.print(table)


# === STAKING ===

@cli.command("stake")
@click.argument("user")
@click.argument("amount", type=int)
@click.pass_context
def stake(ctx: click.Context, user: str, amount: int):
    """Lock AMOUNT for USER for 30 days."""
    data = _api_request(ctx.obj["api_url"], "POST", "/staking/stake", json={"user": user, "amount": amount})
    if _emit_json(ctx, data):
        return

    console.print(f"[green]Staked {data.get('principal', amount)}[/] as [cyan]{data.get('stake_id')}[/]")
    console.print(f"[yellow]Unlocks at:[/] {data.get('unlock_at')} ms")
    console.print(f"[green]Estimated 30-day yield:[/] {data.get('estimated_yield', 0):.4f}")


@cli.command("unstake")
@click.argument("user")
@click.argument("stake_id")
@click.pass_context
def unstake(ctx: click.Context, user: str, stake_id: str):
    """Close an unlocked stake and show the payout."""
    data = _api_request(
        ctx.obj["api_url"], "POST", "/staking/unstake", json={"user": user, "stake_id": stake_id}
    )
    if _emit_json(ctx, data):
        return

    console.print(Panel(
        f"[cyan]Principal:[/] {data.get('principal', 0)}\n"
        f"[green]Yield:[/] {data.get('yield_amount', 0):.4f}\n"
        f"[green]Total:[/] {data.get('total', 0):.4f}\n"
        f"[dim]Staked for {data.get('staking_duration_ms', 0)} ms[/]",
        title=f"Unstaked {stake_id}", border_style="green"
    ))


@cli.command("book")
@click.argument("user")
@click.pass_context
def book(ctx: click.Context, user: str):
    """Show the active stakes of USER."""
    data = _api_request(ctx.obj["api_url"], "GET", f"/staking/{user}")
    if _emit_json(ctx, data):
        return

    stakes = data.get("stakes", [])
    if not stakes:
        console.print(f"[yellow]No active stakes for {user}[/]")
        return

    table = Table(title=f"Stakes of {user} (total {data.get('total_staked', 0)})", box=box.ROUNDED)
    table.add_column("Stake", style="cyan")
    table.add_column("Amount", style="green", justify="right")
    table.add_column("Unlock at", style="dim")
    table.add_column("Accrued", style="yellow", justify="right")
    for entry in stakes:
        table.add_row(
            entry.get("stake_id", ""),
            str(entry.get("amount", 0)),
            str(entry.get("unlock_at", "")),
            f"{entry.get('current_rewards', 0):.4f}",
        )
    console.print(table)


@cli.command("stats")
@click.pass_context
def stats(ctx: click.Context):
    """Show protocol-wide staking stats."""
    data = _api_request(ctx.obj["api_url"], "GET", "/staking/stats")
    if _emit_json(ctx, data):
        return

    s = data.get("stats", {})
    table = Table(title="Protocol Staking", box=box.ROUNDED)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green", justify="right")
    table.add_row("Total staked", str(s.get("total_staked", 0)))
    table.add_row("Rewards paid", f"{s.get('total_staking_rewards', 0):.4f}")
    table.add_row("Users", str(s.get("total_users", 0)))
    table.add_row("Active stakes", str(s.get("total_stakes", 0)))
    table.add_row("Average stake", f"{s.get('average_stake_amount', 0):.2f}")
    table.add_row("Liquidity increase", f"{s.get('protocol_liquidity_increase', 0):.4f}%")
    console.print(table)


@cli.command("status")
@click.pass_context
def status(ctx: click.Context):
    """Show lifetime totals and sustainability."""
    data = _api_request(ctx.obj["api_url"], "GET", "/economics/status")
    if _emit_json(ctx, data):
        return

    sus = data.get("sustainability", {})
    healthy = sus.get("is_self_sustaining")
    console.print(Panel(
        f"[cyan]Total rewards:[/] {data.get('total_rewards_ever', 0)}\n"
        f"[cyan]User pool:[/] {data.get('user_pool_ever', 0)}\n"
        f"[cyan]Protocol pool:[/] {data.get('protocol_pool_ever', 0)}\n"
        f"[yellow]Revenue / expenses:[/] {sus.get('monthly_revenue', 0)} / {sus.get('monthly_expenses', 0)}"
        f" ({sus.get('sustainability_ratio', 0):.2f}x)\n"
        f"[yellow]Runway:[/] {sus.get('runway_months', 0)} months\n"
        f"[{'green' if healthy else 'red'}]Self-sustaining:[/] {'Yes' if healthy else 'No'}",
        title="Protocol Economics", border_style="cyan"
    ))


# === SERVER ===

@cli.command("serve")
@click.option("--host", default=None, help=f"Bind address (default {Config.API_HOST})")
@click.option("--port", default=None, type=int, help=f"Bind port (default {Config.API_PORT})")
def serve(host: Optional[str], port: Optional[int]):
    """Run the economics API server."""
    from gamerewards.api import create_app
    from gamerewards.core.logging_config import setup_logging_from_config

    setup_logging_from_config(Config)
    app = create_app(config=Config)
    bind_host = host or Config.API_HOST
    bind_port = port or Config.API_PORT
    logger.info(
        "Starting economics API",
        extra={"event": "cli.serve", "host": bind_host, "port": bind_port},
    )
    app.run(host=bind_host, port=bind_port)


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
