#!/usr/bin/env python3
"""
Recreation.gov Availability Watcher - Main Entry Point

Usage:
    python main.py --campgrounds 232447,232450 --months 2026-05,2026-06 [watch]
    python main.py --config config/config.yaml check
    python main.py --config config/config.yaml info
"""
import asyncio
import logging
import sys

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from campwatch import __version__
from campwatch.api.client import RecGovAPIClient
from campwatch.common.config import load_config, Config
from campwatch.common.errors import ConfigError
from campwatch.common.models import PollOutcome, PollState, PollTrigger
from campwatch.common.scheduler import format_interval
from campwatch.watcher import Poller, Watcher

console = Console()


def setup_logging(level: str = "INFO", log_file: str = None):
    """Configure logging"""
    handlers = [RichHandler(console=console, rich_tracebacks=True)]

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(message)s",
        handlers=handlers
    )


def cli_overrides(
    campgrounds=None,
    months=None,
    interval=None,
    min_nights=None,
    start_dates=None,
    telegram_token=None,
    telegram_chat_id=None,
    notify_partial=False,
) -> dict:
    """Turn the flags that were actually given into a config override dict"""
    watch = {
        key: value
        for key, value in {
            "campground_ids": campgrounds,
            "months": months,
            "interval_minutes": interval,
            "min_nights": min_nights,
            "start_dates": start_dates,
        }.items()
        if value is not None
    }
    if notify_partial:
        watch["notify_partial"] = True

    telegram = {
        key: value
        for key, value in {"token": telegram_token, "chat_id": telegram_chat_id}.items()
        if value is not None
    }

    overrides = {"watch": watch}
    if telegram:
        overrides["telegram"] = telegram
    return overrides


def settings_table(cfg: Config) -> Table:
    watch = cfg.watch
    telegram = cfg.telegram

    table = Table(show_header=False)
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    table.add_row("Campgrounds", ", ".join(watch.campground_ids))
    table.add_row("Months", ", ".join(watch.months))
    table.add_row("Interval", f"every {format_interval(watch.interval_minutes)}")
    table.add_row("Min nights", f"{watch.min_nights} consecutive night(s)")
    table.add_row("Start dates", f"run must begin on {watch.describe_start_dates()}")
    table.add_row(
        "Telegram",
        f"bot configured, chat {telegram.chat_id}" if telegram.enabled else "(not configured)"
    )
    table.add_row(
        "Partial",
        "notifications enabled" if watch.notify_partial else "disabled (min nights/start dates only)"
    )
    table.add_row("Fetching", f"{watch.requests_per_poll} request(s) per poll")
    return table


@click.group(invoke_without_command=True)
@click.option("--config", "-c", "config_path", default=None, help="Path to YAML config file")
@click.option("--campgrounds", default=None, help="Comma-separated campground IDs")
@click.option("--months", default=None, help="Comma-separated months (YYYY-MM)")
@click.option("--interval", type=float, default=None, help="Minutes between polls")
@click.option("--min-nights", type=int, default=None, help="Consecutive nights required")
@click.option("--start-dates", default=None, help="Comma-separated allowed start dates (YYYY-MM-DD)")
@click.option("--telegram-token", default=None, help="Telegram bot token")
@click.option("--telegram-chat-id", default=None, help="Telegram chat ID to notify")
@click.option("--notify-partial", is_flag=True, help="Also notify when nights exist but none qualify")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.version_option(__version__, "--version", prog_name="campwatch", message="v%(version)s")
@click.pass_context
def cli(ctx, config_path, campgrounds, months, interval, min_nights, start_dates,
        telegram_token, telegram_chat_id, notify_partial, verbose):
    """
    Recreation.gov Availability Watcher

    Polls campgrounds for open nights and alerts a Telegram chat when a
    stretch of consecutive nights opens up. Flags override environment
    variables, which override the config file.
    """
    ctx.ensure_object(dict)

    overrides = cli_overrides(
        campgrounds=campgrounds,
        months=months,
        interval=interval,
        min_nights=min_nights,
        start_dates=start_dates,
        telegram_token=telegram_token,
        telegram_chat_id=telegram_chat_id,
        notify_partial=notify_partial,
    )

    try:
        cfg = load_config(config_path, overrides=overrides)
    except FileNotFoundError:
        console.print(f"[red]Config file not found: {config_path}[/red]")
        sys.exit(1)
    except ConfigError as e:
        console.print(f"[red]❌ {e}[/red]")
        console.print("Pass --campgrounds and --months or set CAMPGROUND_IDS and MONTHS.")
        sys.exit(1)

    ctx.obj["config"] = cfg
    setup_logging(
        level="DEBUG" if verbose else cfg.logging.level,
        log_file=cfg.logging.file
    )

    if ctx.invoked_subcommand is None:
        ctx.invoke(watch)


@cli.command()
@click.pass_context
def watch(ctx):
    """Poll on the configured interval and listen for Telegram commands"""
    cfg = ctx.obj["config"]

    console.print(Panel(settings_table(cfg), title="🏕️  Recreation.gov Availability Watcher", style="blue"))

    async def run():
        async with Watcher(cfg) as watcher:
            await watcher.run()

    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        console.print("\n[yellow]Stopped[/yellow]")


@cli.command()
@click.pass_context
def check(ctx):
    """Run a single poll and print the matches (no notifications)"""
    cfg = ctx.obj["config"]

    async def run():
        async with RecGovAPIClient(cfg.api) as client:
            poller = Poller(client, cfg.watch, PollState())
            return await poller.run_poll(PollTrigger.MANUAL)

    result = asyncio.run(run())

    if result.outcome == PollOutcome.FAILED:
        console.print(f"[red]❌ Poll failed: {result.error}[/red]")
        sys.exit(1)

    if result.outcome == PollOutcome.NOTHING:
        console.print("[yellow]Nothing available right now[/yellow]")
        return

    if result.outcome == PollOutcome.PARTIAL:
        console.print(f"[yellow]{result.total_nights} night(s) available, none qualify[/yellow]")
        return

    table = Table(title=f"Qualifying Sites ({len(result.matches)} total)")
    table.add_column("Campground")
    table.add_column("Site")
    table.add_column("Loop")
    table.add_column("Type")
    table.add_column("Matched Run")

    for site in result.matches:
        table.add_row(
            site.campground_id,
            site.display_name,
            site.loop or "-",
            site.site_type or "-",
            " → ".join(site.matched_run)
        )

    console.print(table)


@cli.command()
@click.pass_context
def info(ctx):
    """Show current configuration"""
    cfg = ctx.obj["config"]

    console.print(Panel("📋 Current Configuration", style="blue"))
    console.print(settings_table(cfg))


if __name__ == "__main__":
    cli()
