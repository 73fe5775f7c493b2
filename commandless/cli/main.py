import asyncio
import json
import logging

import click

from commandless.config import CommandlessConfig
from commandless.errors import CommandlessError
from commandless.runtime.catalog import load_definitions
from commandless.runtime.engine import CommandEngine, MessageIntake


def _load_engine(path: str, bot_id: str) -> CommandEngine:
    try:
        engine = CommandEngine(config=CommandlessConfig.from_env())
        engine.rebuild_catalog(bot_id, load_definitions(path))
    except (FileNotFoundError, ValueError, CommandlessError) as e:
        raise click.ClickException(str(e))
    return engine


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def cli(verbose: bool):
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING)


@cli.command()
@click.argument("path")
def patterns(path):
    """Show the catalog entries generated from a definitions file."""
    engine = _load_engine(path, "cli")
    click.echo(json.dumps(engine.get_catalog("cli"), indent=2))


@cli.command()
@click.argument("path")
@click.argument("text")
@click.option("--user", "users", multiple=True, help="Mentioned user id (repeatable)")
@click.option("--channel", "channels", multiple=True, help="Mentioned channel id (repeatable)")
@click.option("--role", "roles", multiple=True, help="Mentioned role id (repeatable)")
@click.option("--bot-id", default=None, help="The bot's own user id")
@click.option("--scores", is_flag=True, help="Print per-command scores")
def match(path, text, users, channels, roles, bot_id, scores):
    """
    Route TEXT against the commands in PATH.

    \b
    Examples:
      commandless match commands.json "warn <@42> for spamming" --user 42
      commandless match commands.json "purge 10 messages" --scores
    """
    engine = _load_engine(path, "cli")
    intake = MessageIntake(
        text=text,
        author_id="cli",
        channel_id="cli",
        mentioned_user_ids=list(users),
        mentioned_channel_ids=list(channels),
        mentioned_role_ids=list(roles),
        bot_user_id=bot_id,
    )

    if engine.analyzer is not None:
        result = asyncio.run(engine.process_message("cli", intake))
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    decision = engine.match("cli", intake)
    click.echo(json.dumps(decision.result.to_dict(), indent=2))

    if scores:
        click.echo(f"\nThreshold: {decision.threshold}")
        for candidate in sorted(decision.candidates, key=lambda c: -c.aggregate_score):
            click.echo(f"  /{candidate.entry.command_name:<16} {candidate.aggregate_score:.3f}")


@cli.command()
@click.option(
    "--catalogs",
    required=True,
    help="Comma-separated bot_id:path pairs (e.g., 'mod-bot:catalogs/mod.json')"
)
@click.option("--port", default=8000, help="Server port (default: 8000)")
def serve(catalogs: str, port: int):
    """
    Start multi-bot Commandless API server.

    \b
    Examples:
      commandless serve --catalogs mod-bot:catalogs/mod.json
      commandless serve --catalogs mod-bot:mod.json,fun-bot:fun.json --port 8080

    \b
    API Endpoints:
      GET  /healthz                 - Health check with bot count
      GET  /bots                    - List bots
      GET  /bots/{id}/catalog       - Show a bot's catalog
      PUT  /bots/{id}/catalog       - Rebuild a bot's catalog
      POST /bots/{id}/messages      - Route a chat message
      GET  /metrics                 - Routing metrics

    \b
    Environment Variables:
      COMMANDLESS_CATALOGS  - Alternative to --catalogs flag
    """
    import os
    from pathlib import Path

    import uvicorn

    click.echo("Validating catalog files...")
    for pair in catalogs.split(","):
        if ":" not in pair:
            click.echo(
                f"Error: Invalid format '{pair}'. Expected 'bot_id:path'",
                err=True
            )
            raise click.Abort()

        bot_id, path = pair.split(":", 1)
        path_obj = Path(path.strip())

        if not path_obj.exists():
            click.echo(f"Error: Catalog file not found: {path}", err=True)
            raise click.Abort()

        click.echo(f"✓ Validated: {bot_id.strip()} -> {path_obj.absolute()}")

    os.environ["COMMANDLESS_CATALOGS"] = catalogs

    click.echo(f"\nStarting Commandless API server on port {port}...")
    click.echo(f"Health check: http://127.0.0.1:{port}/healthz\n")

    from commandless.runtime.api import app
    uvicorn.run(app, host="0.0.0.0", port=port)


if __name__ == "__main__":
    cli()
