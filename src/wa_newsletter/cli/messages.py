"""CLI: newsletter messages, newsletter react"""

import json
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from wa_newsletter.models.newsletter import FetchKeyType

console = Console()


def _open_client():
    from wa_newsletter.cli.main import _open_client
    return _open_client()


def _run(coro):
    from wa_newsletter.cli.main import _run
    return _run(coro)


@click.command("messages")
@click.argument("key")
@click.option("--type", "key_type", type=click.Choice([t.value for t in FetchKeyType]), default="jid")
@click.option("--count", default=10, type=int)
@click.option("--after", default=0, type=int)
@click.option("--json-output", "--json", is_flag=True)
def messages(key, key_type, count, after, json_output):
    """Fetch channel message history."""

    async def _fetch():
        async with _open_client() as client:
            updates = await client.fetch_messages(key_type, key, count, after)
        if json_output:
            for u in updates:
                click.echo(json.dumps({
                    "server_id": u.server_id,
                    "views": u.views,
                    "reactions": u.reactions,
                    "message": u.message,
                    "error": str(u.error) if u.error else None,
                }, default=str))
            return
        table = Table(title=f"Messages ({len(updates)})")
        table.add_column("Server ID", style="bold")
        table.add_column("Views")
        table.add_column("Reactions")
        table.add_column("Message")
        for u in updates:
            reactions = " ".join(f"{r.get('code', '?')}×{r.get('count', '?')}" for r in u.reactions)
            body = f"[red]{u.error}[/red]" if u.failed else str(u.message)[:80]
            table.add_row(u.server_id, "-" if u.views is None else str(u.views), reactions, body)
        console.print(table)

    _run(_fetch())


@click.command("react")
@click.argument("jid")
@click.argument("server_id")
@click.argument("code", required=False)
def react(jid, server_id, code: Optional[str]):
    """React to a message; omit CODE to remove your reaction."""

    async def _react():
        async with _open_client() as client:
            await client.react_message(jid, server_id, code)
        console.print(f"[green]{'Reacted ' + code if code else 'Reaction removed'}[/green]")

    _run(_react())
