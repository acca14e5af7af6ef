# Simple CLI for Crypto Council
import asyncio
import json
import click
from pydantic import ValidationError


def _container():
    from app.containers import AppContainer
    from core.logging import configure_logging

    container = AppContainer()
    configure_logging(container.settings())
    return container


@click.group()
def cli():
    """Crypto Council CLI"""
    pass


@cli.command()
def api():
    """Run the API server"""
    click.echo("🚀 Starting Crypto Council API server...")
    from api.main import run as run_api
    run_api()


@cli.command("market-data")
@click.argument("symbols", nargs=-1)
@click.option("--provider", default=None, help="binance, coingecko, coinmarketcap or synthetic")
def market_data(symbols, provider):
    """Print market snapshots for SYMBOLS (default: configured symbols) as JSON"""
    container = _container()
    symbols = list(symbols) or container.settings().market_data.default_symbols
    client = container.market_data_client()
    try:
        snapshots = asyncio.run(client.fetch_market_data(symbols, provider))
    except ValueError as e:
        raise click.ClickException(str(e))
    click.echo(json.dumps([s.model_dump(mode="json", by_alias=True) for s in snapshots], indent=2))


@cli.command()
@click.argument("task_file", type=click.File("r", encoding="utf-8"))
def collaborate(task_file):
    """Run a collaboration task from a JSON file and print the report"""
    from core.schemas.collaboration import CollaborationTask
    from core.utils.exceptions import InvalidTask, NoEnabledAgents

    try:
        task = CollaborationTask.model_validate(json.load(task_file))
    except (json.JSONDecodeError, ValidationError) as e:
        raise click.ClickException(f"Invalid task file: {e}")

    orchestrator = _container().orchestrator()
    try:
        report = asyncio.run(orchestrator.run(task))
    except (InvalidTask, NoEnabledAgents) as e:
        raise click.ClickException(e.message)

    click.echo(report.report_text)
    stats = report.stats
    click.echo(
        f"\n{stats.successful_agents}/{stats.total_agents} agents succeeded in {stats.elapsed_ms:.0f} ms"
    )


if __name__ == "__main__":
    cli()
