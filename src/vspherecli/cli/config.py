"""Profile commands: where vCenter lives and how to log in to it."""

import typer
from rich.panel import Panel

from ..api.client import VSphereClient
from ..api.exceptions import VSphereCliError
from ..config import AuthConfig, ConfigManager, ProfileConfig
from ..utils import (
    confirm,
    console,
    create_table,
    print_cancelled,
    print_error,
    print_info,
    print_success,
    prompt,
    select_menu,
)
from ..utils.helpers import async_to_sync, ordered_group

_CMD_ORDER = ["add", "remove", "default", "list", "show", "test"]

app = typer.Typer(help="Manage vCenter connection profiles", no_args_is_help=True, cls=ordered_group(_CMD_ORDER))


def _pick_profile(config_manager: ConfigManager, title: str) -> str | None:
    """Let the user pick a profile name. Returns None if cancelled."""
    names = sorted(config_manager.list_profiles())
    if not names:
        print_info("No profiles configured. Run 'vspherecli config add' to create one.")
        return None
    idx = select_menu(names, title)
    if idx is None:
        print_cancelled()
        return None
    return names[idx]


def _profile_panel(name: str, profile: ProfileConfig, is_default: bool = False) -> Panel:
    lines = [
        f"[bold]Host:[/bold]          {profile.host}:{profile.port}",
        f"[bold]User:[/bold]          {profile.auth.user}",
        f"[bold]Auth:[/bold]          {profile.auth.type}",
        f"[bold]Verify SSL:[/bold]    {'yes' if profile.verify_ssl else 'no'}",
        f"[bold]Timeout:[/bold]       {profile.timeout}s (tasks {profile.task_timeout}s)",
    ]
    if is_default:
        lines.append("\n[green]Default profile[/green]")
    return Panel("\n".join(lines), title=f"Profile: {name}", border_style="blue")


def _build_profile(
    host: str | None,
    port: int | None,
    user: str | None,
    password: str | None,
    session_id: str | None,
    verify_ssl: bool,
) -> ProfileConfig:
    """Prompt for whatever was not given on the command line."""
    host = host or prompt("vCenter host")
    if port is None:
        port = int(prompt("vCenter port", default="443"))
    user = user or prompt("Username", default="administrator@vsphere.local")

    if session_id:
        auth = AuthConfig(type="session", user=user, session_id=session_id)
    else:
        auth = AuthConfig(type="password", user=user, password=password or prompt("Password", password=True))

    return ProfileConfig(host=host, port=port, verify_ssl=verify_ssl, auth=auth)


@app.command("add")
def add_profile(
    name: str = typer.Argument(None, help="Profile name"),
    host: str = typer.Option(None, "--host", "-ho", help="vCenter host (IP or hostname)"),
    user: str = typer.Option(None, "--user", "-us", help="Username (e.g., administrator@vsphere.local)"),
    password: str = typer.Option(None, "--password", "-pw", help="Password"),
    session_id: str = typer.Option(None, "--session-id", "-si", help="Reuse an existing API session id"),
    port: int = typer.Option(None, "--port", "-po", help="vCenter port"),
    verify_ssl: bool = typer.Option(False, "--verify-ssl", "-vs", is_flag=True, help="Verify SSL certificate"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Add a connection profile.

    Values not given as options are prompted for. With --session-id the
    profile reuses that session instead of logging in with a password.
    """
    config_manager = ConfigManager()

    try:
        name = name or prompt("Profile name", default="default")
        if config_manager.exists() and name in config_manager.list_profiles():
            print_error(f"Profile '{name}' already exists. Remove it first to replace it.")
            raise typer.Exit(1)

        try:
            profile = _build_profile(host, port, user, password, session_id, verify_ssl)
        except ValueError as e:
            print_error(f"Invalid profile: {e}")
            raise typer.Exit(1)

        console.print(_profile_panel(name, profile))
        if not yes and not confirm("Save this profile?", default=True):
            print_cancelled()
            raise typer.Exit()

        first = not config_manager.exists() or not config_manager.list_profiles()
        config_manager.add_profile(name, profile)
        print_success(f"Profile '{name}' added" + (" (set as default)" if first else ""))

    except KeyboardInterrupt:
        console.print()
        print_cancelled()
    except VSphereCliError as e:
        print_error(str(e))
        raise typer.Exit(1)


@app.command("remove")
def remove_profile(
    name: str = typer.Argument(None, help="Profile name"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Remove a profile."""
    config_manager = ConfigManager()

    try:
        name = name or _pick_profile(config_manager, "  Profile to remove:")
        if name is None:
            return
        if not yes and not confirm(f"Remove profile '{name}'?", default=False):
            print_cancelled()
            return

        config_manager.remove_profile(name)
        print_success(f"Profile '{name}' removed")

    except VSphereCliError as e:
        print_error(str(e))
        raise typer.Exit(1)


@app.command("default")
def set_default(
    name: str = typer.Argument(None, help="Profile name"),
) -> None:
    """Set the default profile."""
    config_manager = ConfigManager()

    try:
        name = name or _pick_profile(config_manager, "  Default profile:")
        if name is None:
            return
        config_manager.set_default_profile(name)
        print_success(f"Default profile set to '{name}'")

    except VSphereCliError as e:
        print_error(str(e))
        raise typer.Exit(1)


@app.command("list")
def list_profiles() -> None:
    """List all profiles."""
    config_manager = ConfigManager()

    try:
        config = config_manager.get()
        if not config.profiles:
            print_info("No profiles configured. Run 'vspherecli config add' to create one.")
            return

        table = create_table(
            title="Profiles",
            columns=[("Profile", "cyan"), ("Host", ""), ("User", ""), ("Auth", ""), ("Default", "green")],
        )
        for profile_name, profile in config.profiles.items():
            table.add_row(
                profile_name,
                f"{profile.host}:{profile.port}",
                profile.auth.user,
                profile.auth.type,
                "✓" if profile_name == config.default_profile else "",
            )
        console.print(table)

    except VSphereCliError as e:
        print_error(str(e))
        raise typer.Exit(1)


@app.command("show")
def show_profile(
    name: str = typer.Argument(None, help="Profile name"),
) -> None:
    """Show profile details."""
    config_manager = ConfigManager()

    try:
        name = name or _pick_profile(config_manager, "  Select profile:")
        if name is None:
            return
        profile = config_manager.get_profile(name)
        console.print(_profile_panel(name, profile, name == config_manager.get().default_profile))

    except VSphereCliError as e:
        print_error(str(e))
        raise typer.Exit(1)


@app.command("test")
@async_to_sync
async def test_profile(
    profile: str = typer.Option(None, "--profile", "-p", help="Profile to test"),
) -> None:
    """Log in to vCenter and print its version."""
    config_manager = ConfigManager()

    try:
        profile_config = config_manager.get_profile(profile)
        print_info(f"Testing connection to {profile_config.host}:{profile_config.port}...")

        async with VSphereClient(profile_config) as client:
            version = await client.get_version()

        print_success("Connection successful")
        print_info(f"vCenter {version.get('version', 'unknown')} build {version.get('build', 'unknown')}")

    except VSphereCliError as e:
        print_error(f"Connection failed: {e}")
        raise typer.Exit(1)
