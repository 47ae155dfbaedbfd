"""Serve the JSON API."""

import click


@click.command("serve")
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", default=5000, show_default=True, type=int)
@click.option("--debug", is_flag=True, help="Enable the Flask debugger and reloader")
@click.pass_context
def serve(ctx, host: str, port: int, debug: bool):
    """Run the HTTP API on the development server."""
    from pocketledger.api.app import create_app

    settings = ctx.obj["settings"]
    if not settings.master_password:
        click.echo(
            "Warning: POCKETLEDGER_MASTER_PASSWORD is not set; no device can log in.",
            err=True,
        )
    app = create_app(settings=settings, db=ctx.obj["db"])
    app.run(host=host, port=port, debug=debug)


def register_commands(cli: click.Group) -> None:
    """Register serve command with main CLI."""
    cli.add_command(serve)
