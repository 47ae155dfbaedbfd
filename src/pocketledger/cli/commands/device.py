"""Device access commands."""

import click
from pocketledger.cli.error_handling import handle_domain_error
from pocketledger.domain.device import DeviceAccessService
from pocketledger.domain.errors import DomainError


def _service(ctx) -> DeviceAccessService:
    return DeviceAccessService(ctx.obj["db"], ctx.obj["settings"].master_password)


@click.group()
def device_group():
    """Manage devices allowed to use the API."""
    pass


@device_group.command("login")
@click.argument("device_id")
@click.option("--name", help="Human-readable device name")
@click.password_option("--password", confirmation_prompt=False, help="Master password")
@click.pass_context
def login(ctx, device_id: str, name: str | None, password: str):
    """Register a device with the master password and print its token."""
    try:
        token = _service(ctx).authenticate_with_master_password(
            password, device_id, device_name=name or device_id, user_agent="pocketledger-cli"
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    if token is None:
        click.echo("Error: Authentication failed", err=True)
        ctx.exit(1)
    click.echo(token)


@device_group.command("list")
@click.pass_context
def list_devices(ctx):
    """List active devices."""
    devices = _service(ctx).list_devices()
    if not devices:
        click.echo("No devices registered.")
        return
    click.echo(f"{'Device ID':<24} {'Name':<28} {'Last seen':<20}")
    click.echo("-" * 74)
    for device in devices:
        click.echo(
            f"{device.device_id[:24]:<24} {device.name[:28]:<28} "
            f"{device.last_seen.strftime('%Y-%m-%d %H:%M'):<20}"
        )


@device_group.command("revoke")
@click.argument("device_id")
@click.pass_context
def revoke(ctx, device_id: str):
    """Revoke every token of a device."""
    if not _service(ctx).revoke_device(device_id):
        click.echo(f"Error: Device {device_id} not found", err=True)
        ctx.exit(1)
    click.echo(f"Revoked device {device_id}")


@device_group.command("cleanup")
@click.option("--days", type=int, help="Inactivity window in days (defaults to POCKETLEDGER_DEVICE_RETENTION_DAYS or 90)")
@click.pass_context
def cleanup(ctx, days: int | None):
    """Deactivate devices that have not been seen recently."""
    retention = days if days is not None else ctx.obj["settings"].device_retention_days
    try:
        count = _service(ctx).cleanup_old_devices(retention)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deactivated {count} device token(s)")


def register_commands(cli: click.Group) -> None:
    """Register device commands with main CLI."""
    cli.add_command(device_group, name="device")
