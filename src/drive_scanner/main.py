import asyncio
import logging
from typing import List, Optional

import typer
from rich import print
from rich.console import Console
from rich.table import Table

from drive_scanner.config import config
from drive_scanner.drivelist import Drive
from drive_scanner.scanner.events import DRIVES_EVENT, ERROR_EVENT
from drive_scanner.scanner_app import ScannerApp
from drive_scanner.services.settings_service import UNSAFE_MODE
from drive_scanner.utils.logging import setup_logging

# Create CLI app
app = typer.Typer(
    name="drive-scanner",
    help="List and watch the drives attached to this host",
    add_completion=False
)
settings_app = typer.Typer(help="Show or change persisted settings")
app.add_typer(settings_app, name="settings")

console = Console()
logger = logging.getLogger(__name__)


def build_drives_table(drives: List[Drive]) -> Table:
    """Render drives as a rich table."""
    table = Table(title="Drives")
    table.add_column("Name", style="bold cyan")
    table.add_column("Device")
    table.add_column("Description")
    table.add_column("Size", justify="right")
    table.add_column("Mountpoints")
    table.add_column("System")
    table.add_column("Protected")

    for drive in drives:
        table.add_row(
            drive.name or drive.device,
            drive.device,
            drive.description or "-",
            drive.get_formatted_size(),
            ", ".join(mountpoint.path for mountpoint in drive.mountpoints) or "-",
            "yes" if drive.system else "no",
            "yes" if drive.protected else "no",
        )

    return table


@app.callback()
def callback():
    """Drive scanner."""
    setup_logging()


@app.command("list")
def list_command(
    unsafe: bool = typer.Option(
        False, "--unsafe", "-u", help="Include system drives regardless of the unsafe_mode setting"
    ),
):
    """Scan the drives once and print them."""
    try:
        drives = asyncio.run(_list_drives(unsafe))
    except Exception as e:
        logger.error(f"Error listing drives: {e}", exc_info=True)
        print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(code=1)

    if not drives:
        print("No drives found")
        return

    console.print(build_drives_table(drives))


@app.command()
def watch(
    interval: Optional[int] = typer.Option(
        None, "--interval", "-i", help="Milliseconds between scans"
    ),
):
    """Scan the drives periodically and print every change."""
    if interval:
        config.scanner.scan_interval_ms = interval

    print(f"Watching drives every {config.scanner.scan_interval_ms:g} ms, press Ctrl+C to stop")

    try:
        asyncio.run(_watch_drives())
    except KeyboardInterrupt:
        print("\nShutting down...")
    except Exception as e:
        logger.error(f"Error running drive scanner: {e}", exc_info=True)
        print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(code=1)


@settings_app.command("show")
def settings_show():
    """Print the persisted settings."""
    settings = asyncio.run(_get_settings())

    table = Table(title="Settings")
    table.add_column("Key", style="bold")
    table.add_column("Value")
    table.add_column("Description")

    for key, setting in settings.items():
        table.add_row(key, str(setting["value"]), setting["description"] or "")

    console.print(table)


@settings_app.command("set-unsafe-mode")
def settings_set_unsafe_mode(
    enabled: bool = typer.Argument(..., help="Whether system drives are included in scans"),
):
    """Enable or disable unsafe mode."""
    asyncio.run(_set_setting(UNSAFE_MODE, enabled))
    print(f"unsafe_mode set to [bold]{str(enabled).lower()}[/bold]")


async def _list_drives(unsafe: bool) -> List[Drive]:
    """Run a single scan."""
    scanner_app = ScannerApp()
    await scanner_app.initialize()
    try:
        return await scanner_app.scanner.scan(unsafe_mode=True if unsafe else None)
    finally:
        await scanner_app.db.close()


async def _watch_drives() -> None:
    """Run the scanner until interrupted."""
    scanner_app = ScannerApp()
    last_seen = None

    def on_drives(drives: List[Drive]) -> None:
        nonlocal last_seen
        current = [drive.to_dict() for drive in drives]
        if current != last_seen:
            last_seen = current
            console.print(build_drives_table(drives))

    def on_error(error: Exception) -> None:
        print(f"[bold red]Scan failed:[/bold red] {error}")

    scanner_app.scanner.on(DRIVES_EVENT, on_drives).on(ERROR_EVENT, on_error)

    await scanner_app.start()
    await scanner_app.wait_for_stop()


async def _get_settings():
    scanner_app = ScannerApp()
    await scanner_app.initialize()
    try:
        return await scanner_app.settings.get_all()
    finally:
        await scanner_app.db.close()


async def _set_setting(key: str, value) -> None:
    scanner_app = ScannerApp()
    await scanner_app.initialize()
    try:
        await scanner_app.settings.set(key, value)
    finally:
        await scanner_app.db.close()


if __name__ == "__main__":
    app()
