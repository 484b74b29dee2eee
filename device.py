from typing import Optional, Sequence

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from errors import NoDevicesError
from models import Device


def find_device(devices: Sequence[Device], hint: str) -> Optional[Device]:
    """First device whose name or ID equals `hint` exactly."""
    if not hint:
        return None
    return next((d for d in devices if d.name == hint or d.id == hint), None)


def select_device(devices: Sequence[Device], hint: str = "") -> Device:
    """
    Picks the playback target: the device named by `hint`, else the first
    active device, else the first device listed.
    """
    if not devices:
        raise NoDevicesError()

    device = find_device(devices, hint)
    if device is not None:
        return device
    return next((d for d in devices if d.is_active), devices[0])


def render_devices_table(devices: Sequence[Device], console: Optional[Console] = None) -> None:
    console = console or Console()

    console.print()
    console.print("🎵 Available Spotify Connect Devices", style="cyan")
    console.print()

    table = Table(box=box.ROUNDED)
    for column in ("#", "Name", "Type", "Status", "Device ID"):
        table.add_column(column)

    for i, device in enumerate(devices, start=1):
        status = Text("● Active", style="green") if device.is_active else Text("Inactive")
        table.add_row(
            str(i),
            Text(device.name, style="bold"),
            Text(device.type),
            status,
            Text(device.id, style="bright_black"),
        )

    console.print(table)
    console.print()
    console.print(f"Total devices: {len(devices)}", style="bold green")
