"""CLI: newsletter info|create|follow|unfollow|mute|unmute|delete"""

import json

import click
from rich.console import Console
from rich.table import Table

from wa_newsletter.models.newsletter import NewsletterMetadata, NewsletterViewRole

console = Console()


def _open_client():
    from wa_newsletter.cli.main import _open_client
    return _open_client()


def _run(coro):
    from wa_newsletter.cli.main import _run
    return _run(coro)


def _print_metadata(meta: NewsletterMetadata, json_output: bool) -> None:
    if json_output:
        click.echo(json.dumps(meta.model_dump(), indent=2))
        return
    table = Table(title=meta.name, show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    for field, value in meta.model_dump(exclude={"viewer_metadata"}).items():
        table.add_row(field, "" if value is None else str(value))
    console.print(table)


@click.command("info")
@click.argument("jid")
@click.option("--role", type=click.Choice([r.value for r in NewsletterViewRole]), default="GUEST")
@click.option("--json-output", "--json", is_flag=True)
def info(jid, role, json_output):
    """Show channel metadata."""

    async def _info():
        async with _open_client() as client:
            meta = await client.metadata(jid, role)
            admins = await client.admin_count(jid) if role in ("ADMIN", "OWNER") else None
        _print_metadata(meta, json_output)
        if admins is not None and not json_output:
            console.print(f"[dim]Admins: {admins}[/dim]")

    _run(_info())


@click.command("create")
@click.argument("name")
@click.option("-d", "--description", default="")
@click.option("--json-output", "--json", is_flag=True)
def create(name, description, json_output):
    """Create a new channel."""

    async def _create():
        async with _open_client() as client:
            with console.status("Creating channel..."):
                meta = await client.create(name, description)
        if json_output:
            _print_metadata(meta, True)
        else:
            console.print(f"[green]Channel created: {meta.id}[/green]")

    _run(_create())


def _simple_command(name: str, help_text: str, done: str) -> click.Command:
    @click.command(name, help=help_text)
    @click.argument("jid")
    def command(jid):
        async def _go():
            async with _open_client() as client:
                await getattr(client, name)(jid)
            console.print(f"[green]{done} {jid}[/green]")

        _run(_go())

    return command


follow = _simple_command("follow", "Follow a channel.", "Following")
unfollow = _simple_command("unfollow", "Unfollow a channel.", "Unfollowed")
mute = _simple_command("mute", "Mute a channel.", "Muted")
unmute = _simple_command("unmute", "Unmute a channel.", "Unmuted")
delete = _simple_command("delete", "Delete a channel you own.", "Deleted")
