"""VM guest customization commands."""

import asyncio

import typer

from ..api.client import VSphereClient
from ..api.codec import spec_to_api
from ..api.exceptions import UsageError, VSphereCliError
from ..config import ConfigManager
from ..customize import apply_options, resolve_spec
from ..models.customization import CustomizeOptions
from ..utils import (
    print_cancelled,
    print_error,
    print_info,
    print_json,
    print_warning,
)
from ..utils.helpers import async_to_sync, ordered_group
from ._shared import wait_with_spinner

_CMD_ORDER = ["customize"]


app = typer.Typer(help="Manage virtual machines", no_args_is_help=True, cls=ordered_group(_CMD_ORDER))


@app.command("customize")
@async_to_sync
async def customize_vm(
    ctx: typer.Context,
    name: str = typer.Argument(None, help="Stored customization spec NAME"),
    vm: str = typer.Option(
        None, "--vm", "-vm", envvar="VSPHERECLI_VM", help="Virtual machine name or id (vm-N)"
    ),
    auto_login: int = typer.Option(
        0, "--auto-login", "-auto-login",
        help="Number of times the VM should automatically login as an administrator",
    ),
    prefix: str = typer.Option(None, "--prefix", "-prefix", help="Host name generator prefix"),
    tz: str = typer.Option(None, "--tz", "-tz", help="Time zone (Windows: hex index)"),
    domain: str = typer.Option(None, "--domain", "-domain", help="Domain name"),
    host_name: str = typer.Option(None, "--name", "-name", help="Host name"),
    mac: list[str] = typer.Option(None, "--mac", "-mac", help="MAC address (repeatable)"),
    ip: list[str] = typer.Option(None, "--ip", "-ip", help="IP address or 'dhcp' (repeatable)"),
    gateway: list[str] = typer.Option(None, "--gateway", "-gateway", help="Gateway(s), comma-separated (repeatable)"),
    netmask: list[str] = typer.Option(None, "--netmask", "-netmask", help="Netmask (repeatable)"),
    dns_server: list[str] = typer.Option(
        None, "--dns-server", "-dns-server", help="DNS server(s), comma-separated (repeatable)"
    ),
    kind: str = typer.Option(
        "Linux", "--type", "-type", help="Customization type if spec NAME is not specified (Linux|Windows)"
    ),
    profile: str = typer.Option(None, "--profile", "-p", help="Profile to use"),
    timeout: int = typer.Option(None, "--timeout", help="Task timeout in seconds"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print the resulting spec instead of applying it"),
) -> None:
    """Customize VM.

    Optionally specify a stored customization spec NAME. Without NAME a new
    spec of the given --type is built from the options.

    The --ip, --netmask and --gateway options are for static IP configuration.
    If the VM has multiple NICs, an --ip and --netmask must be specified for
    each, in NIC order. --ip dhcp selects DHCP for that NIC.

    The Windows --tz value is the Microsoft time zone index in hex.

    Examples:
        vspherecli vm customize --vm VM NAME
        vspherecli vm customize --vm VM --name my-hostname --ip dhcp
        vspherecli vm customize --vm VM --gateway GW --ip NEWIP --netmask MASK --dns-server DNS1,DNS2 NAME
        vspherecli vm customize --vm VM --mac 00:50:56:be:dd:f8 --ip 10.0.0.178 --netmask 255.255.255.0
        vspherecli vm customize --vm VM --type Windows --auto-login 3 --tz 035
    """
    if not vm:
        typer.echo(ctx.get_help())
        raise typer.Exit(2)

    options = CustomizeOptions(
        auto_login=auto_login,
        prefix=prefix,
        tz=tz,
        domain=domain,
        host_name=host_name,
        mac=mac or [],
        ip=ip or [],
        gateway=gateway or [],
        netmask=netmask or [],
        dns_server=dns_server or [],
        kind=kind,
    )

    config_manager = ConfigManager()

    try:
        profile_config = config_manager.get_profile(profile)

        async with VSphereClient(profile_config) as client:
            target = await client.find_vm(vm)

            spec = await resolve_spec(client, options, name)
            apply_options(spec, options, name)

            if dry_run:
                print_json(spec_to_api(spec))
                return

            task_id = await client.customize_vm(target.vm, spec)
            if task_id:
                try:
                    await wait_with_spinner(
                        client, task_id,
                        f"Customizing VM {target.name}...",
                        timeout or profile_config.task_timeout,
                    )
                except (KeyboardInterrupt, asyncio.CancelledError):
                    print_warning("Cancelling task...")
                    await client.cancel_task(task_id)
                    print_cancelled()
                    print_info("Check vCenter to verify task status")
                    raise typer.Exit(1)

    except UsageError as e:
        raise typer.BadParameter(str(e), param_hint="'--type'")
    except VSphereCliError as e:
        print_error(str(e))
        raise typer.Exit(1)
