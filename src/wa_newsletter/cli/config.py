"""CLI: newsletter config set|show"""

from typing import Optional

import click
from rich.console import Console

console = Console()


@click.group()
def config():
    """Bridge connection settings."""


@config.command("set")
@click.option("--url", "base_url", default=None, help="Bridge Socket.IO URL.")
@click.option("--token", default=None, help="Bridge auth token.")
def config_set(base_url: Optional[str], token: Optional[str]):
    """Store bridge URL and/or token."""
    from wa_newsletter.cli.main import CONFIG_FILE, _load_config, _save_config

    cfg = _load_config()
    if base_url:
        cfg["base_url"] = base_url
    if token:
        cfg["token"] = token
    _save_config(cfg)
    console.print(f"[green]Saved to {CONFIG_FILE}[/green]")


@config.command("show")
def config_show():
    """Show the effective configuration (token masked)."""
    from wa_newsletter.cli.main import DEFAULT_BRIDGE_URL, _load_config

    cfg = _load_config()
    token = cfg.get("token")
    console.print(f"URL:   {cfg.get('base_url', DEFAULT_BRIDGE_URL)}")
    console.print(f"Token: {token[:4] + '…' if token else '[dim]not set[/dim]'}")
