"""Linux-specific drive listing implementation."""
import json
import logging
from typing import Any, Dict, List

from drive_scanner.drivelist.detection import DriveLister
from drive_scanner.drivelist.models import Drive, DriveListError, Mountpoint
from drive_scanner.drivelist.strategies.utils import as_bool, as_int, build_description, run_command

logger = logging.getLogger(__name__)

LSBLK_COMMAND = [
    "lsblk", "--bytes", "--json", "--paths",
    "--output", "NAME,KNAME,SIZE,TYPE,MOUNTPOINT,MODEL,VENDOR,RM,HOTPLUG,RO,TRAN",
]


class LinuxDriveLister(DriveLister):
    """Drive lister implementation for Linux."""

    def list_drives(self) -> List[Drive]:
        """
        List drives on Linux systems using lsblk.

        Returns:
            One Drive per block device of type "disk"
        """
        output = run_command(LSBLK_COMMAND)

        try:
            data = json.loads(output)
        except json.JSONDecodeError as e:
            raise DriveListError(f"Could not parse lsblk output: {e}") from e

        return parse_lsblk(data)


def parse_lsblk(data: Dict[str, Any]) -> List[Drive]:
    """Build drive descriptors from the JSON document printed by lsblk."""
    drives = []

    for device in data.get("blockdevices", []):
        if device.get("type") != "disk":
            continue

        name = device.get("name")
        if not name:
            continue

        removable = as_bool(device.get("rm")) or as_bool(device.get("hotplug"))
        transport = (device.get("tran") or "").lower()

        drive = Drive(
            device=name,
            raw=device.get("kname") or name,
            description=build_description(device.get("vendor"), device.get("model")),
            size=as_int(device.get("size")),
            mountpoints=[Mountpoint(path=path) for path in _collect_mountpoints(device)],
            system=not (removable or transport == "usb"),
            protected=as_bool(device.get("ro")),
        )

        drives.append(drive)
        logger.debug(f"Found disk: {drive}")

    return drives


def _collect_mountpoints(device: Dict[str, Any]) -> List[str]:
    """Mount points of a device and its descendants, in lsblk order."""
    mountpoints = []

    mountpoint = device.get("mountpoint")
    # lsblk reports swap as "[SWAP]"
    if mountpoint and not mountpoint.startswith("["):
        mountpoints.append(mountpoint)

    for child in device.get("children", []):
        mountpoints.extend(_collect_mountpoints(child))

    return mountpoints
