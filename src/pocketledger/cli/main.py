"""Main CLI entry point."""

import logging

import click

from pocketledger.config import Settings
from pocketledger.database.factories import create_database

# Import and register all commands at module level
from pocketledger.cli.commands import (
    transaction,
    balance,
    loan,
    device,
    serve,
)


def configure_logging(verbose: bool) -> None:
    """Configure root logging for command-line use."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@click.group()
@click.option(
    "--db-url",
    help="SQLAlchemy database URL (overrides POCKETLEDGER_DB_URL environment variable)",
    envvar="POCKETLEDGER_DB_URL",
)
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to SQLite database file (overrides POCKETLEDGER_DB_PATH environment variable)",
    envvar="POCKETLEDGER_DB_PATH",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, db_url: str | None, db_path: str | None, verbose: bool):
    """pocketledger - Personal finance tracker.

    Record income, expenses and personal loans, view balances and export a
    bank-statement style CSV.
    """
    ctx.ensure_object(dict)
    configure_logging(verbose)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        env_settings = Settings.from_env()
        settings = Settings(
            database_url=db_url,
            database_path=db_path,
            master_password=env_settings.master_password,
            device_retention_days=env_settings.device_retention_days,
        )
        db = create_database(settings)
        db.connect()
        db.initialize_schema()
        ctx.obj["settings"] = settings
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
transaction.register_commands(cli)
balance.register_commands(cli)
loan.register_commands(cli)
device.register_commands(cli)
serve.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
