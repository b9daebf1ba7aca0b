"""
wa-newsletter CLI — `newsletter` command.

Commands:
  newsletter config set|show       Bridge URL and token
  newsletter info <jid>            Channel metadata
  newsletter create <name>         Create a channel
  newsletter follow|unfollow|mute|unmute|delete <jid>
  newsletter messages <key>        Fetch message history
  newsletter react <jid> <id> [e]  React to (or un-react) a message
"""

import asyncio
import json
import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

try:
    import click
    from rich.console import Console
except ImportError:
    raise SystemExit("CLI requires extras: pip install wa-newsletter[cli]")

from wa_newsletter.client import AsyncNewsletterClient
from wa_newsletter.errors import NewsletterError
from wa_newsletter.transport.socketio import SocketIOTransport

console = Console()
CONFIG_FILE = Path.home() / ".wa-newsletter" / "config.json"
DEFAULT_BRIDGE_URL = "http://localhost:8765"


def _load_config() -> dict:
    try:
        cfg = json.loads(CONFIG_FILE.read_text())
    except (FileNotFoundError, json.JSONDecodeError):
        cfg = {}
    if os.environ.get("WA_NEWSLETTER_URL"):
        cfg["base_url"] = os.environ["WA_NEWSLETTER_URL"]
    if os.environ.get("WA_NEWSLETTER_TOKEN"):
        cfg["token"] = os.environ["WA_NEWSLETTER_TOKEN"]
    return cfg


def _save_config(cfg: dict) -> None:
    CONFIG_FILE.parent.mkdir(parents=True, exist_ok=True)
    CONFIG_FILE.write_text(json.dumps(cfg, indent=2))


@asynccontextmanager
async def _open_client() -> AsyncIterator[AsyncNewsletterClient]:
    cfg = _load_config()
    if not cfg.get("token"):
        console.print("[red]No bridge token. Run `newsletter config set --token ...` first.[/red]")
        raise SystemExit(1)
    transport = SocketIOTransport(cfg.get("base_url", DEFAULT_BRIDGE_URL), cfg["token"])
    await transport.connect()
    try:
        yield AsyncNewsletterClient(transport, transport.identity, transport.decrypt)
    finally:
        await transport.disconnect()


def _run(coro):
    try:
        return asyncio.run(coro)
    except NewsletterError as e:
        console.print(f"[red]{e.code}: {e}[/red]")
        raise SystemExit(1)


@click.group()
@click.version_option("0.1.0")
@click.option("-v", "--verbose", is_flag=True, help="Log protocol traffic.")
def main(verbose):
    """wa-newsletter CLI — manage WhatsApp channels."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(asctime)s %(name)s %(levelname)s %(message)s")


# Register subcommands from separate modules
from wa_newsletter.cli.config import config
from wa_newsletter.cli.channel import info, create, follow, unfollow, mute, unmute, delete
from wa_newsletter.cli.messages import messages, react

main.add_command(config)
for _cmd in (info, create, follow, unfollow, mute, unmute, delete, messages, react):
    main.add_command(_cmd)


if __name__ == "__main__":
    main()
